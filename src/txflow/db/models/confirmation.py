from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BaseMixin


class Confirmation(Base, BaseMixin):
    __tablename__ = "confirmations"

    signature: Mapped[str] = mapped_column(
        sa.String(length=128), nullable=False, index=True, unique=True
    )
    operation_type: Mapped[int] = mapped_column(sa.Integer, nullable=False, index=True)
    finality: Mapped[str] = mapped_column(sa.String(length=16), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(length=16), nullable=False, index=True)
    watched_at: Mapped[datetime] = mapped_column(sa.DateTime, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime, nullable=True, default=None
    )
    error: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    extras: Mapped[str] = mapped_column(sa.Text, nullable=False, default="null")
