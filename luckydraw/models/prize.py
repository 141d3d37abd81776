"""Prize model and its unit accounting."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import CheckConstraint, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base
from .utils import PRIZE_ID_PREFIX, generate_entity_id

DEFAULT_PRIZE_NAMES = (
    "1st-class award",
    "2nd-class award",
    "3rd-class award",
    "4th-class award",
)


class Prize(Base):
    """A prize with a fixed number of units that draws hand out one at a time."""

    __tablename__ = "prizes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Opaque identifier assigned on import."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Display name of the prize."""

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Zero-based order of the prize in the imported list."""

    total: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Number of units offered."""

    remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Units not yet awarded; always between 0 and :attr:`total`."""

    __table_args__ = (
        CheckConstraint("total > 0", name="total_positive"),
        CheckConstraint(
            "remaining >= 0 AND remaining <= total", name="remaining_within_total"
        ),
    )

    def __init__(
        self,
        *,
        name: str,
        total: int = 1,
        remaining: Optional[int] = None,
        position: int = 0,
        id: Optional[str] = None,
    ) -> None:
        if total < 1:
            raise ValueError("Prize total must be a positive integer")
        if remaining is None:
            remaining = total
        if not 0 <= remaining <= total:
            raise ValueError("Prize remaining must be between 0 and total")
        self.id = id or generate_entity_id(PRIZE_ID_PREFIX)
        self.name = name
        self.total = total
        self.remaining = remaining
        self.position = position

    def __repr__(self) -> str:
        return (
            f"<Prize(id={self.id!r}, name={self.name!r}, "
            f"remaining={self.remaining}/{self.total})>"
        )

    @property
    def awarded(self) -> int:
        """Units already handed out; these are never revoked."""
        return self.total - self.remaining

    @property
    def is_exhausted(self) -> bool:
        return self.remaining <= 0

    def award_unit(self) -> None:
        """Take one unit off :attr:`remaining`.

        Raises
        ------
        ValueError
            If the prize has no units left.
        """
        if self.remaining <= 0:
            raise ValueError(f"Prize {self.name!r} has no units remaining")
        self.remaining -= 1

    def restock(self) -> None:
        """Restore every awarded unit."""
        self.remaining = self.total

    def retotal(self, requested_total: Optional[int]) -> int:
        """Change :attr:`total` without revoking awarded units.

        ``None`` or a non-positive value keeps the current total. The new total
        is clamped to at least :attr:`awarded` and :attr:`remaining` is
        recomputed from it.

        Returns
        -------
        int
            The total actually applied.
        """
        used = self.awarded
        next_total = (
            requested_total
            if requested_total is not None and requested_total > 0
            else self.total
        )
        clamped = max(used, next_total)
        self.total = clamped
        self.remaining = clamped - used
        return clamped

    @classmethod
    def ordered(cls, session: Session) -> list["Prize"]:
        """Return prizes in import order."""

        return list(session.scalars(select(cls).order_by(cls.position, cls.id)))

    @classmethod
    def from_specs(cls, specs: Iterable[tuple[str, int]]) -> list["Prize"]:
        """Build fresh prizes from ``(name, total)`` pairs keeping their order."""

        taken: set[str] = set()
        prizes = []
        for position, (name, total) in enumerate(specs):
            prize = cls(
                id=generate_entity_id(PRIZE_ID_PREFIX, taken),
                name=name,
                total=total,
                position=position,
            )
            taken.add(prize.id)
            prizes.append(prize)
        return prizes

    @classmethod
    def defaults(cls) -> list["Prize"]:
        """The four single-unit prizes used when no prize list was imported."""

        return cls.from_specs((name, 1) for name in DEFAULT_PRIZE_NAMES)
