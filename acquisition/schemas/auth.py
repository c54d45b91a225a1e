from pydantic import BaseModel, EmailStr, Field, field_validator

from acquisition.schemas.user import UserOut


class SignupIn(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters long")
        return v


class SigninIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthOut(BaseModel):
    user: UserOut
    access_token: str
    token_type: str = "bearer"


class MessageOut(BaseModel):
    message: str
