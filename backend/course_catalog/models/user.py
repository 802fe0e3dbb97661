from typing import List, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

Role = Literal["admin", "student"]


def normalize_email(value: str) -> str:
    return value.strip().lower()


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class LoginRequest(BaseModel):
    email: str
    password: str
    # Any string: a role the account does not hold is answered with 403.
    role: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(alias="newPassword", min_length=1)


class UserPublic(BaseModel):
    id: str
    email: str
    role: Role

    @classmethod
    def from_doc(cls, doc: dict) -> "UserPublic":
        return cls(id=str(doc["_id"]), email=doc["email"], role=doc["role"])


class UserProfile(UserPublic):
    """A stored user minus the password hash and any pending reset token."""
    enrolled_courses: List[str] = []

    @classmethod
    def from_doc(cls, doc: dict) -> "UserProfile":
        return cls(
            id=str(doc["_id"]),
            email=doc["email"],
            role=doc["role"],
            enrolled_courses=[str(c) for c in doc.get("enrolled_courses", [])],
        )


class LoginResponse(BaseModel):
    token: str
    user: UserPublic
