import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devon_farm.core.postgres import Base


class UserORM(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    # Subject id issued by the magic-link provider; the join key for sessions
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # NULL until the user has created or joined a farm
    farm_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("farms.id", ondelete="SET NULL", name="fk_users_farm_id_farms"),
        index=True,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )
