import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from devon_farm.models.horse import HorseGender, HorseORM


class HorseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    date_of_birth: date | None = None
    gender: HorseGender


class HorseCreate(HorseBase):
    pass


class HorseUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    date_of_birth: date | None = None
    gender: HorseGender | None = None


class HorseResponse(HorseBase):
    id: uuid.UUID
    farm_id: uuid.UUID
    display_gender: str

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_horse(cls, horse: HorseORM) -> "HorseResponse":
        return cls(
            id=horse.id,
            farm_id=horse.farm_id,
            name=horse.name,
            description=horse.description,
            date_of_birth=horse.date_of_birth,
            gender=horse.gender,
            display_gender=horse.display_gender(),
        )
