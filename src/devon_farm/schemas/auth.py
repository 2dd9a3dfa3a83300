# schemas/auth.py
"""
Pydantic schemas for the magic-link login flow.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator


class LoginRequest(BaseModel):
    """
    Body for POST /login (submitted as an HTML form).
    Name and email are captured here because the callback carries neither.
    """

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., examples=["ana@example.com"])

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip()
        return v
