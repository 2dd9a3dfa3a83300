import uuid
from datetime import UTC, date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from devon_farm.core.postgres import Base

# A horse is a filly or colt until it turns 3
MAX_YOUTH_AGE = 3


class HorseGender(str, Enum):
    STALLION = "stallion"
    GELDING = "gelding"
    MARE = "mare"


class HorseORM(Base):
    __tablename__ = "horses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    farm_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("farms.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[HorseGender] = mapped_column(SQLEnum(HorseGender), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def age(self, today: date | None = None) -> int | None:
        if self.date_of_birth is None:
            return None
        today = today or date.today()
        years = today.year - self.date_of_birth.year
        if (today.month, today.day) < (self.date_of_birth.month, self.date_of_birth.day):
            years -= 1
        return years

    def display_gender(self, today: date | None = None) -> str:
        age = self.age(today)
        is_youth = age is not None and age < MAX_YOUTH_AGE
        if self.gender == HorseGender.MARE:
            return "Filly" if is_youth else "Mare"
        if is_youth:
            return "Colt"
        return "Stallion" if self.gender == HorseGender.STALLION else "Gelding"
