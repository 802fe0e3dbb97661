# File: backend/course_catalog/api/auth.py

import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pymongo.errors import DuplicateKeyError

from course_catalog.core.database import Database, get_db, parse_object_id
from course_catalog.core.mailer import send_password_reset_email
from course_catalog.core.security import (
    RESET_TOKEN_TYPE,
    create_access_token,
    create_reset_token,
    decode_jwt_token,
    get_current_user,
    hash_password,
    verify_password,
)
from course_catalog.models.common import MessageResponse
from course_catalog.models.user import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    UserCreate,
    UserProfile,
    UserPublic,
)

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password."
RESET_LINK_SENT = "If a matching account was found, a password reset link has been sent to your email."


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: UserCreate, db: Database = Depends(get_db)):
    """
    Self-registration always creates a student; admins come from the seeder
    or the FIRST_ADMIN_* bootstrap.
    """
    new_user = {
        "email": request.email,
        "hashed_password": hash_password(request.password),
        "role": "student",
        "enrolled_courses": [],
    }
    try:
        await db.users.insert_one(new_user)
    except DuplicateKeyError:
        logger.debug("Registration rejected, email already taken: %s", request.email)
        raise HTTPException(status_code=409, detail="A user with this email already exists.")

    logger.info("Registered new student %s", request.email)
    return {"message": "User registered successfully."}


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, db: Database = Depends(get_db)):
    user_doc = await db.users.find_one({"email": request.email})
    if not user_doc:
        logger.debug("No user found with email: %s", request.email)
        raise HTTPException(status_code=400, detail=INVALID_CREDENTIALS)

    if not verify_password(request.password, user_doc["hashed_password"]):
        logger.debug("Password mismatch for user: %s", request.email)
        raise HTTPException(status_code=400, detail=INVALID_CREDENTIALS)

    if user_doc["role"] != request.role:
        logger.debug("Role mismatch for %s: requested %s", request.email, request.role)
        raise HTTPException(status_code=403, detail="Access denied.")

    user = UserPublic.from_doc(user_doc)
    token = create_access_token(user.id, user.role, user.email)
    logger.info("User %s logged in successfully", request.email)
    return {"token": token, "user": user}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_db),
):
    """
    The response is identical whether or not the email is registered.
    """
    user_doc = await db.users.find_one({"email": request.email})
    if not user_doc:
        logger.debug("Password reset requested for unknown email: %s", request.email)
        return {"message": RESET_LINK_SENT}

    token = create_reset_token(str(user_doc["_id"]))
    await db.users.update_one({"_id": user_doc["_id"]}, {"$set": {"reset_token": token}})
    background_tasks.add_task(send_password_reset_email, user_doc["email"], token)
    return {"message": RESET_LINK_SENT}


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(token: str, request: ResetPasswordRequest, db: Database = Depends(get_db)):
    payload = decode_jwt_token(token, token_type=RESET_TOKEN_TYPE)
    user_id = parse_object_id(payload["user_id"]) if payload else None
    if user_id is None:
        raise HTTPException(status_code=400, detail="Invalid or expired token.")

    # Matching on the stored token and unsetting it in one update makes the token single use.
    result = await db.users.update_one(
        {"_id": user_id, "reset_token": token},
        {
            "$set": {"hashed_password": hash_password(request.new_password)},
            "$unset": {"reset_token": ""},
        },
    )
    if result.modified_count == 0:
        raise HTTPException(status_code=400, detail="Invalid or expired token.")

    logger.info("Password reset for user %s", payload["user_id"])
    return {"message": "Password has been reset successfully."}


@router.get("/profile", response_model=UserProfile)
async def profile(user=Depends(get_current_user), db: Database = Depends(get_db)):
    user_id = parse_object_id(user["user_id"])
    user_doc = await db.users.find_one({"_id": user_id}) if user_id else None
    if not user_doc:
        raise HTTPException(status_code=404, detail="User not found.")
    return UserProfile.from_doc(user_doc)
