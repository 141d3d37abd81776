"""Raffle participant model."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import CheckConstraint, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base
from .utils import PARTICIPANT_ID_PREFIX, generate_entity_id


class Participant(Base):
    """A person eligible to be drawn, as imported from the participant list."""

    __tablename__ = "participants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Opaque identifier assigned on import."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Display name taken from the first column of the imported sheet."""

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Zero-based row order of the participant in the imported list."""

    win_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Number of committed draws this participant has won."""

    __table_args__ = (CheckConstraint("win_count >= 0", name="win_count_non_negative"),)

    def __init__(
        self,
        *,
        name: str,
        position: int = 0,
        win_count: int = 0,
        id: Optional[str] = None,
    ) -> None:
        self.id = id or generate_entity_id(PARTICIPANT_ID_PREFIX)
        self.name = name
        self.position = position
        self.win_count = win_count

    def __repr__(self) -> str:
        return (
            f"<Participant(id={self.id!r}, name={self.name!r}, "
            f"win_count={self.win_count})>"
        )

    @property
    def has_won(self) -> bool:
        return self.win_count > 0

    def record_win(self) -> None:
        self.win_count += 1

    @classmethod
    def ordered(cls, session: Session, *, only_non_winners: bool = False) -> list["Participant"]:
        """Return participants in import order, optionally only those without wins."""

        stmt = select(cls).order_by(cls.position, cls.id)
        if only_non_winners:
            stmt = stmt.where(cls.win_count == 0)
        return list(session.scalars(stmt))

    @classmethod
    def from_names(cls, names: list[str]) -> list["Participant"]:
        """Build fresh participants (no wins) for ``names`` keeping their order."""

        taken: set[str] = set()
        participants = []
        for position, name in enumerate(names):
            participant = cls(
                id=generate_entity_id(PARTICIPANT_ID_PREFIX, taken),
                name=name,
                position=position,
            )
            taken.add(participant.id)
            participants.append(participant)
        return participants
