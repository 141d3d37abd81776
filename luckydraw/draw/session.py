"""Stateful draw session: selects winners, stages them for reveal and commits them."""

from __future__ import annotations

from dataclasses import dataclass, field
import enum
import logging
import random
from typing import Callable, Iterable, Optional, Union

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.engine import get_sessionmaker, make_engine
from ..models import Base, DrawRecord, Participant, Prize
from ..models.utils import parse_leading_int
from ..spreadsheet.errors import SpreadsheetFormatError
from ..spreadsheet.importer import (
    PrizeSpec,
    default_prize_specs,
    read_participant_names,
    read_participants_and_prizes,
    read_prizes,
)
from .config import DrawDefaults, load_draw_defaults
from .sampling import PendingSelection, build_pending_queue
from .settings import (
    DisplayMode,
    DrawCount,
    DrawSettings,
    resolve_draw_count,
)

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]

GOLDEN_ANGLE = 137.50776405003785


class DrawState(str, enum.Enum):
    """Lifecycle of the session; draws are only accepted while :attr:`IDLE`."""

    IDLE = "idle"
    SEQUENTIAL = "sequential"
    BATCH = "batch"


@dataclass(frozen=True)
class WheelSlice:
    """One entry of the displayed candidate list."""

    label: str
    color: str


@dataclass
class BatchDrawOutcome:
    """Result of committing a staged batch.

    Attributes
    ----------
    records : list[DrawRecord]
        Records created, in commit order.
    skipped : int
        Staged selections dropped because they were no longer valid.
    """

    records: list[DrawRecord] = field(default_factory=list)
    skipped: int = 0


def wheel_color_for_index(index: int) -> str:
    """Spread hues by the golden angle so neighbouring slices never look alike."""
    hue = (index * GOLDEN_ANGLE) % 360
    return f"hsl({hue:.2f} 80% 72%)"


def _positive_total(value) -> int:
    total = parse_leading_int(value)
    return total if total is not None and total > 0 else 1


class DrawSession:
    """Owns the participants, prizes and draw history of one raffle session.

    Every public operation returns a plain value. Requests that cannot be
    served (busy, nothing to draw, unreadable import) are no-ops reported
    through the ``status`` callback instead of raising.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        *,
        rng: Optional[random.Random] = None,
        status: Optional[StatusCallback] = None,
        defaults: Optional[DrawDefaults] = None,
    ) -> None:
        """Create a draw session and seed it with the default prizes.

        Parameters
        ----------
        session : Optional[Session], default: None
            SQLAlchemy session whose tables hold the draw state. When omitted,
            a private in-memory database is created. Existing rows are
            discarded either way: state never outlives the session.
        rng : Optional[random.Random], default: None
            Random source for sampling. ``random.SystemRandom`` is used when
            omitted; tests pass a seeded ``random.Random``.
        status : Optional[StatusCallback], default: None
            Receives human-readable status messages.
        defaults : Optional[DrawDefaults], default: None
            Initial settings. Read from the environment when omitted.
        """

        if session is None:
            engine = make_engine()
            Base.metadata.create_all(engine)
            session = get_sessionmaker(engine)()
        self._session = session
        self._rng = rng
        self._status = status

        defaults = defaults or load_draw_defaults()
        self._settings = DrawSettings(
            exclude_winners=defaults.exclude_winners,
            draw_count=defaults.draw_count,
            display_mode=defaults.display_mode,
        )

        self._state = DrawState.IDLE
        self._queue: list[PendingSelection] = []
        self._current: Optional[PendingSelection] = None
        self._batch: list[PendingSelection] = []
        self._displayed: list[WheelSlice] = []
        self._selected_prize_id: Optional[str] = None
        self.reset_generation = 0

        self._start_fresh()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> DrawState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state is DrawState.IDLE

    @property
    def exclude_winners(self) -> bool:
        return self._settings.exclude_winners

    @property
    def draw_count(self) -> DrawCount:
        return self._settings.draw_count

    @property
    def display_mode(self) -> DisplayMode:
        return self._settings.display_mode

    @property
    def selected_prize_id(self) -> Optional[str]:
        return self._selected_prize_id

    @property
    def displayed_candidates(self) -> list[WheelSlice]:
        """Candidate list currently on display; reveal indexes point into it."""
        return list(self._displayed)

    @property
    def current_selection(self) -> Optional[PendingSelection]:
        return self._current

    @property
    def pending_batch(self) -> list[PendingSelection]:
        return list(self._batch)

    def participants(self) -> list[Participant]:
        return Participant.ordered(self._session)

    def prizes(self) -> list[Prize]:
        return Prize.ordered(self._session)

    def results(self) -> list[DrawRecord]:
        """Draw history, newest first."""
        return DrawRecord.newest_first(self._session)

    def results_oldest_first(self) -> list[DrawRecord]:
        return DrawRecord.oldest_first(self._session)

    def selected_prize(self) -> Optional[Prize]:
        if self._selected_prize_id is None:
            return None
        return self._session.get(Prize, self._selected_prize_id)

    def remaining_participants(self) -> list[Participant]:
        """Participants eligible for the next draw."""
        return Participant.ordered(
            self._session, only_non_winners=self._settings.exclude_winners
        )

    def can_draw(self) -> bool:
        prize = self.selected_prize()
        return (
            prize is not None
            and prize.remaining > 0
            and len(self.remaining_participants()) > 0
        )

    def resolved_draw_count(self) -> int:
        prize = self.selected_prize()
        if prize is None:
            return 1
        return resolve_draw_count(
            prize,
            len(self.remaining_participants()),
            self._settings.draw_count,
            self._settings.exclude_winners,
        )

    def uses_marquee(self) -> bool:
        return self._settings.uses_marquee(self.resolved_draw_count())

    def report_status(self, message: str) -> None:
        logger.info(f"Status: {message}")
        if self._status is not None:
            self._status(message)

    # ------------------------------------------------------------------
    # Sequential draw
    # ------------------------------------------------------------------

    def prepare_draw(self) -> Optional[int]:
        """Stage this round's winners and return the first reveal index.

        Returns
        -------
        Optional[int]
            Index into :attr:`displayed_candidates` the animation should stop
            on, or ``None`` when no draw can start.
        """

        if not self._check_ready():
            return None

        self._refresh_displayed_candidates()
        queue = self._build_queue()
        if not queue:
            return None

        self._current = queue.pop(0)
        self._queue = queue
        self._state = DrawState.SEQUENTIAL
        logger.info(
            f"Sequential draw started with {len(queue) + 1} selection(s) "
            f"for prize {self._current.prize_id}"
        )
        return self._current.reveal_index

    def finalize_draw(self) -> Optional[int]:
        """Commit the selection on display and move on to the next one.

        The current selection is re-validated first and dropped silently when
        it became stale.

        Returns
        -------
        Optional[int]
            Reveal index of the next queued selection, or ``None`` once the
            queue is exhausted (the session is then idle again). Also ``None``
            when no sequential draw is in progress.
        """

        pending = self._current
        self._current = None
        if pending is None:
            return None

        records, _ = self._commit_selections([pending])
        if records:
            self._ensure_selected_prize_valid()

        if not self._queue:
            self._state = DrawState.IDLE
            logger.info("Sequential draw finished")
            return None
        self._current = self._queue.pop(0)
        return self._current.reveal_index

    # ------------------------------------------------------------------
    # Batch draw
    # ------------------------------------------------------------------

    def prepare_batch_draw(self) -> Optional[list[str]]:
        """Stage a whole batch of winners for simultaneous reveal.

        Returns
        -------
        Optional[list[str]]
            Participant ids of the staged winners in order, or ``None`` when no
            draw can start.
        """

        if not self._check_ready():
            return None

        batch = self._build_queue()
        if not batch:
            return None

        self._batch = batch
        self._state = DrawState.BATCH
        logger.info(f"Batch draw staged with {len(batch)} selection(s)")
        return [pending.participant_id for pending in batch]

    def finalize_batch_draw(self) -> Optional[BatchDrawOutcome]:
        """Commit every staged selection, skipping the ones that became stale.

        Returns ``None`` when no batch draw is in progress.
        """

        if self._state is not DrawState.BATCH:
            return None

        batch = self._batch
        self._batch = []
        records, skipped = self._commit_selections(batch)

        self._ensure_selected_prize_valid()
        self._refresh_displayed_candidates()
        self._state = DrawState.IDLE

        if skipped:
            self.report_status(
                f"{skipped} staged selection(s) were no longer eligible and were skipped"
            )
        logger.info(
            f"Batch draw committed {len(records)} winner(s), skipped {skipped}"
        )
        return BatchDrawOutcome(records=records, skipped=skipped)

    def cancel_batch_draw(self) -> bool:
        """Discard the staged batch without committing anything."""

        if self._state is not DrawState.BATCH:
            return False
        logger.info(f"Batch draw cancelled, {len(self._batch)} selection(s) discarded")
        self._batch = []
        self._state = DrawState.IDLE
        return True

    # ------------------------------------------------------------------
    # Administrative mutations (idle only)
    # ------------------------------------------------------------------

    def reset(self) -> bool:
        """Clear every win, restock every prize and drop the draw history."""

        if not self._guard_idle():
            return False

        self._queue = []
        self._current = None
        self._batch = []
        for participant in self.participants():
            participant.win_count = 0
        for prize in self.prizes():
            prize.restock()
        self._session.execute(delete(DrawRecord))
        self._commit()

        self._ensure_selected_prize_valid()
        self._refresh_displayed_candidates()
        self.reset_generation += 1
        self.report_status("Draw state has been reset")
        return True

    def load_participants(self, names: Iterable[str]) -> bool:
        """Replace the participant list; prizes are restocked and history cleared."""

        if not self._guard_idle():
            return False
        names = list(names)
        if not names:
            self.report_status("No participants to import")
            return False

        def mutate() -> None:
            participants = Participant.from_names(names)
            self._session.execute(delete(Participant))
            self._session.add_all(participants)
            for prize in self.prizes():
                prize.restock()
            self._session.execute(delete(DrawRecord))

        if not self._apply_replacement(mutate):
            return False

        self._ensure_selected_prize_valid()
        self._refresh_displayed_candidates()
        self.report_status(f"Imported {len(names)} participants")
        return True

    def load_prizes(self, specs: Iterable[PrizeSpec]) -> bool:
        """Replace the prize list; wins are cleared and the first prize selected."""

        if not self._guard_idle():
            return False
        specs = list(specs)
        if not specs:
            self.report_status("No prizes to import")
            return False

        def mutate() -> None:
            self._replace_prizes(specs)
            for participant in self.participants():
                participant.win_count = 0
            self._session.execute(delete(DrawRecord))

        if not self._apply_replacement(mutate):
            return False

        self._select_first_prize()
        self._refresh_displayed_candidates()
        self.report_status(f"Imported {len(specs)} prizes")
        return True

    def load_roster(self, names: Iterable[str], specs: Iterable[PrizeSpec]) -> bool:
        """Replace participants and prizes together and clear the history.

        An empty ``specs`` installs the four default prizes.
        """

        if not self._guard_idle():
            return False
        names = list(names)
        specs = list(specs) or default_prize_specs()
        if not names:
            self.report_status("No participants to import")
            return False

        def mutate() -> None:
            participants = Participant.from_names(names)
            self._session.execute(delete(Participant))
            self._session.add_all(participants)
            self._replace_prizes(specs)
            self._session.execute(delete(DrawRecord))

        if not self._apply_replacement(mutate):
            return False

        self._select_first_prize()
        self._ensure_selected_prize_valid()
        self._refresh_displayed_candidates()
        self.report_status(
            f"Imported {len(names)} participants and {len(specs)} prizes"
        )
        return True

    def import_participants(self, data: bytes) -> bool:
        """Import participants from workbook bytes, keeping prior state on failure."""

        if not self._guard_idle():
            return False
        try:
            names = read_participant_names(data)
        except SpreadsheetFormatError as exc:
            self.report_status(str(exc))
            return False
        return self.load_participants(names)

    def import_prizes(self, data: bytes) -> bool:
        """Import prizes from workbook bytes, keeping prior state on failure."""

        if not self._guard_idle():
            return False
        try:
            specs = read_prizes(data)
        except SpreadsheetFormatError as exc:
            self.report_status(str(exc))
            return False
        return self.load_prizes(specs)

    def import_roster(self, data: bytes) -> bool:
        """Import participants (sheet 1) and prizes (sheet 2) from one workbook."""

        if not self._guard_idle():
            return False
        try:
            roster = read_participants_and_prizes(data)
        except SpreadsheetFormatError as exc:
            self.report_status(str(exc))
            return False
        return self.load_roster(roster.participant_names, roster.prizes)

    def update_prize_total(self, prize_id: str, total: Union[str, int, None]) -> bool:
        """Change a prize's total without revoking awarded units.

        Non-numeric or non-positive input keeps the current total.
        """

        if not self._guard_idle():
            return False
        prize = self._session.get(Prize, prize_id)
        if prize is None:
            return False

        applied = prize.retotal(parse_leading_int(total))
        self._commit()
        logger.debug(f"Prize {prize.id} total set to {applied}")
        self._ensure_selected_prize_valid()
        return True

    def select_prize(self, prize_id: Optional[str]) -> bool:
        if not self._guard_idle():
            return False
        self._selected_prize_id = prize_id
        self._ensure_selected_prize_valid()
        return True

    def set_exclude_winners(self, exclude: bool) -> bool:
        if not self._guard_idle():
            return False
        self._settings.exclude_winners = bool(exclude)
        self._refresh_displayed_candidates()
        return True

    def set_draw_count(self, raw: Union[str, int, DrawCount, None]) -> Optional[DrawCount]:
        """Change the requested draw count; returns the setting now in effect."""
        if not self._guard_idle():
            return None
        return self._settings.set_draw_count(raw)

    def set_display_mode(self, mode: Union[str, DisplayMode, None]) -> Optional[DisplayMode]:
        if not self._guard_idle():
            return None
        return self._settings.set_display_mode(mode)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_fresh(self) -> None:
        self._session.execute(delete(DrawRecord))
        self._session.execute(delete(Participant))
        self._session.execute(delete(Prize))
        self._session.add_all(Prize.defaults())
        self._commit()
        self._select_first_prize()
        self._refresh_displayed_candidates()

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise

    def _guard_idle(self) -> bool:
        if self._state is DrawState.IDLE:
            return True
        self.report_status("A draw is in progress; finish it first")
        return False

    def _check_ready(self) -> bool:
        if not self._guard_idle():
            return False
        if self.can_draw():
            return True
        if not self.remaining_participants():
            self.report_status("Import a participant list first")
        elif self.selected_prize() is None:
            self.report_status("Select a prize first")
        else:
            self.report_status("The selected prize has no units remaining")
        return False

    def _build_queue(self) -> list[PendingSelection]:
        prize = self.selected_prize()
        if prize is None:
            return []
        candidates = self.remaining_participants()
        count = resolve_draw_count(
            prize,
            len(candidates),
            self._settings.draw_count,
            self._settings.exclude_winners,
        )
        if count <= 0:
            return []
        return build_pending_queue(
            candidates,
            prize.id,
            count,
            exclude_winners=self._settings.exclude_winners,
            rng=self._rng,
        )

    def _commit_selections(
        self, selections: Iterable[PendingSelection]
    ) -> tuple[list[DrawRecord], int]:
        """Apply ``selections`` in order and commit them in one transaction.

        Each valid selection increments the winner's count, takes one unit off
        the prize and adds a :class:`DrawRecord`; invalid ones are skipped.
        """

        records: list[DrawRecord] = []
        skipped = 0
        for pending in selections:
            participant = self._session.get(Participant, pending.participant_id)
            prize = self._session.get(Prize, pending.prize_id)
            if participant is None or prize is None or prize.remaining <= 0:
                logger.debug(f"Skipping stale selection {pending}")
                skipped += 1
                continue
            if self._settings.exclude_winners and participant.has_won:
                logger.debug(f"Skipping selection of previous winner {participant.id}")
                skipped += 1
                continue

            participant.record_win()
            prize.award_unit()
            record = DrawRecord(participant_name=participant.name, prize_name=prize.name)
            self._session.add(record)
            records.append(record)

        if records:
            self._commit()
            for record in records:
                logger.info(
                    f"Committed draw #{record.id}: {record.participant_name} "
                    f"won {record.prize_name}"
                )
        return records, skipped

    def _replace_prizes(self, specs: list[PrizeSpec]) -> None:
        """Swap the prize table for ``specs``; totals that are not positive become 1."""

        prizes = Prize.from_specs(
            (spec.name, _positive_total(spec.total)) for spec in specs
        )
        self._session.execute(delete(Prize))
        self._session.add_all(prizes)

    def _apply_replacement(self, mutate: Callable[[], None]) -> bool:
        """Run ``mutate`` and commit, leaving the session untouched if it fails."""

        try:
            mutate()
        except ValueError as exc:
            self._session.rollback()
            logger.warning(f"Import rejected: {exc}")
            self.report_status(f"Import failed: {exc}")
            return False
        except SQLAlchemyError:
            self._session.rollback()
            raise
        self._commit()
        return True

    def _select_first_prize(self) -> None:
        prizes = self.prizes()
        self._selected_prize_id = prizes[0].id if prizes else None

    def _ensure_selected_prize_valid(self) -> None:
        prize = self.selected_prize()
        if prize is not None and prize.remaining > 0:
            return
        prizes = self.prizes()
        available = next((p for p in prizes if p.remaining > 0), None)
        if available is not None:
            self._selected_prize_id = available.id
        else:
            self._selected_prize_id = prizes[0].id if prizes else None

    def _refresh_displayed_candidates(self) -> None:
        self._displayed = [
            WheelSlice(label=participant.name, color=wheel_color_for_index(idx))
            for idx, participant in enumerate(self.remaining_participants())
        ]


__all__ = [
    "BatchDrawOutcome",
    "DrawSession",
    "DrawState",
    "StatusCallback",
    "WheelSlice",
    "wheel_color_for_index",
]
