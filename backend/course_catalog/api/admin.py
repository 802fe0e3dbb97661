import logging
from typing import List
from fastapi import APIRouter, HTTPException, Depends

from course_catalog.core.database import Database, get_db, parse_object_id
from course_catalog.core.security import get_current_user, require_admin
from course_catalog.models.common import MessageResponse
from course_catalog.models.user import UserProfile

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/users", response_model=List[UserProfile])
async def list_users(db: Database = Depends(get_db)):
    results = []
    async for doc in db.users.find({}):
        results.append(UserProfile.from_doc(doc))
    return results


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, admin=Depends(get_current_user), db: Database = Depends(get_db)):
    oid = parse_object_id(user_id)
    result = await db.users.delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="User not found.")
    logger.info("Admin %s deleted user %s", admin["email"], user_id)
    return {"message": "User deleted successfully."}
