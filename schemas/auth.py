"""
Schema definitions for signup, login and the current-user endpoint.
"""
import datetime
from pydantic import BaseModel, Field, field_validator


class SignupSchema(BaseModel):
    username: str = Field(..., min_length=1, max_length=150, description="Unique username")
    password: str = Field(..., min_length=1, description="User password")

    @field_validator("username")
    @classmethod
    def strip_username(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v

    model_config = {
        "json_schema_extra": {"example": {"username": "ada", "password": "s3cret"}}
    }


class LoginSchema(BaseModel):
    username: str = Field(..., description="Username chosen at signup")
    password: str = Field(..., description="User password")


class UserSummarySchema(BaseModel):
    id: int
    username: str

    model_config = {"from_attributes": True}


class UserSchema(UserSummarySchema):
    created_at: datetime.datetime


class LoginResponseSchema(BaseModel):
    token: str
    user: UserSummarySchema


class MessageSchema(BaseModel):
    message: str
