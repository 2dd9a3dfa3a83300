from pydantic import BaseModel, Field, field_validator


class FarmCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip()
        return v


class DashboardStats(BaseModel):
    total_horses: int = 0
    stallions: int = 0
    geldings: int = 0
    mares: int = 0
    youngstock: int = 0
