"""History of committed draws."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from ..db.utils import format_timestamp
from .base import Base


class DrawRecord(Base):
    """Immutable record of one committed draw.

    Names are snapshots taken at commit time, not references, so renaming or
    re-importing participants and prizes never rewrites history.
    """

    __tablename__ = "draw_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    """Surrogate primary key; increases with every commit."""

    participant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Winner's name at the time of the draw."""

    prize_name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Prize name at the time of the draw."""

    timestamp: Mapped[str] = mapped_column(String(32), nullable=False)
    """Local wall-clock time of the commit."""

    def __init__(
        self,
        *,
        participant_name: str,
        prize_name: str,
        timestamp: Optional[str] = None,
    ) -> None:
        self.participant_name = participant_name
        self.prize_name = prize_name
        self.timestamp = timestamp or format_timestamp()

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<DrawRecord(id={self.id}, participant_name={self.participant_name!r}, "
            f"prize_name={self.prize_name!r}, timestamp={self.timestamp!r})>"
        )

    @classmethod
    def newest_first(cls, session: Session) -> list["DrawRecord"]:
        return list(session.scalars(select(cls).order_by(cls.id.desc())))

    @classmethod
    def oldest_first(cls, session: Session) -> list["DrawRecord"]:
        return list(session.scalars(select(cls).order_by(cls.id)))
