from fastapi import APIRouter, HTTPException, Depends

from course_catalog.core.database import Database, get_db, parse_object_id
from course_catalog.core.security import get_current_user
from course_catalog.models.course import Course, EnrolledCourses

router = APIRouter()


@router.get("/me/courses", response_model=EnrolledCourses)
async def list_my_courses(user=Depends(get_current_user), db: Database = Depends(get_db)):
    """
    Any authenticated role may call this; only students can hold enrollments.
    Ids of deleted courses are skipped, the rest keep enrollment order.
    """
    user_id = parse_object_id(user["user_id"])
    user_doc = await db.users.find_one({"_id": user_id}) if user_id else None
    if not user_doc:
        raise HTTPException(status_code=404, detail="User not found.")

    course_ids = user_doc.get("enrolled_courses", [])
    by_id = {}
    async for doc in db.courses.find({"_id": {"$in": course_ids}}):
        by_id[doc["_id"]] = doc
    courses = [Course.from_doc(by_id[cid]) for cid in course_ids if cid in by_id]
    return {"courses": courses}
