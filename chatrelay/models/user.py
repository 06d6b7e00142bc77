from __future__ import annotations

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class UserActivity(Base):
    """Last time an identity sent or was sent something, in epoch milliseconds."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    last_activity: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)


__all__ = ["UserActivity"]
