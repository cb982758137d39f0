from __future__ import annotations

from datetime import datetime, timezone
from sqlalchemy import BigInteger, String, DateTime, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from msgboard.db.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    # BigInteger for Postgres, plain INTEGER on SQLite so autoincrement works
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(60), nullable=False)  # bcrypt
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
