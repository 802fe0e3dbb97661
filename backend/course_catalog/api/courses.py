# File: backend/course_catalog/api/courses.py

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from pymongo import ReturnDocument

from course_catalog.core.database import Database, get_db, parse_object_id
from course_catalog.core.security import get_current_user, require_admin
from course_catalog.models.common import MessageResponse
from course_catalog.models.course import Course, CourseIn, EnrollRequest

logger = logging.getLogger(__name__)
router = APIRouter()

COURSE_NOT_FOUND = "Course not found."


@router.get("", response_model=List[Course])
async def list_courses(db: Database = Depends(get_db)):
    results = []
    async for doc in db.courses.find({}):
        results.append(Course.from_doc(doc))
    return results


@router.post("", response_model=Course, status_code=201, dependencies=[Depends(require_admin)])
async def create_course(payload: CourseIn, db: Database = Depends(get_db)):
    course_doc = payload.model_dump()
    result = await db.courses.insert_one(course_doc)
    course_doc["_id"] = result.inserted_id
    logger.info("Created course %s (%s)", result.inserted_id, payload.title)
    return Course.from_doc(course_doc)


@router.put("/{course_id}", response_model=Course, dependencies=[Depends(require_admin)])
async def update_course(course_id: str, payload: CourseIn, db: Database = Depends(get_db)):
    oid = parse_object_id(course_id)
    if oid is None:
        raise HTTPException(status_code=404, detail=COURSE_NOT_FOUND)

    updated = await db.courses.find_one_and_update(
        {"_id": oid},
        {"$set": payload.model_dump()},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail=COURSE_NOT_FOUND)
    return Course.from_doc(updated)


@router.delete("/{course_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_course(course_id: str, db: Database = Depends(get_db)):
    """
    Enrollment lists that reference the course are left untouched; the
    enrolled-courses listing skips ids that no longer resolve.
    """
    oid = parse_object_id(course_id)
    result = await db.courses.delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise HTTPException(status_code=404, detail=COURSE_NOT_FOUND)
    logger.info("Deleted course %s", course_id)
    return {"message": "Course deleted successfully."}


@router.post("/enroll", response_model=MessageResponse)
async def enroll_in_course(
    request: EnrollRequest,
    user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    user_id = parse_object_id(user["user_id"])
    course_id = parse_object_id(request.course_id)
    user_doc = await db.users.find_one({"_id": user_id}) if user_id else None
    course_doc = await db.courses.find_one({"_id": course_id}) if course_id else None
    if not user_doc or not course_doc:
        raise HTTPException(status_code=404, detail="User or course not found.")

    # Checked against the stored role, not the token claim.
    if user_doc["role"] != "student":
        raise HTTPException(status_code=403, detail="Forbidden")

    # The $ne guard makes check-and-append one atomic write, so two concurrent
    # requests for the same course cannot both succeed.
    result = await db.users.update_one(
        {"_id": user_id, "enrolled_courses": {"$ne": course_id}},
        {"$push": {"enrolled_courses": course_id}},
    )
    if result.modified_count == 0:
        raise HTTPException(status_code=409, detail="You are already enrolled in this course.")

    logger.info("User %s enrolled in course %s", user["email"], request.course_id)
    return {"message": "Enrolled successfully."}
