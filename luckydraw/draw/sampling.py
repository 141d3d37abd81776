"""Selection algorithms used to pick raffle winners."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Optional, Sequence

from ..models import Participant


@dataclass(frozen=True)
class PendingSelection:
    """A winner chosen but not yet committed.

    Attributes
    ----------
    participant_id : str
        Identifier of the drawn participant.
    prize_id : str
        Identifier of the prize the participant is about to receive.
    reveal_index : int
        Position of the participant in the displayed candidate list, i.e. where
        the animation should stop.
    """

    participant_id: str
    prize_id: str
    reveal_index: int


_SYSTEM_RANDOM = random.SystemRandom()


def sample_without_replacement(
    candidates: Sequence[object],
    count: int,
    rng: Optional[random.Random] = None,
) -> list[int]:
    """Return up to ``count`` distinct positions of ``candidates`` in random order.

    The positions are shuffled with Fisher–Yates and the prefix is taken, so
    every ordering of every subset is equally likely under a uniform ``rng``.

    Parameters
    ----------
    candidates : Sequence[object]
        Pool to draw from; only its length is inspected.
    count : int
        Number of positions wanted. The result holds
        ``min(count, len(candidates))`` items; non-positive counts yield ``[]``.
    rng : Optional[random.Random], default: None
        Random source. ``random.SystemRandom`` is used when omitted.

    Returns
    -------
    list[int]
        Distinct indices into ``candidates``.
    """

    rng = rng or _SYSTEM_RANDOM
    indices = list(range(len(candidates)))
    for i in range(len(indices) - 1, 0, -1):
        j = rng.randrange(i + 1)
        indices[i], indices[j] = indices[j], indices[i]
    return indices[: max(count, 0)]


def sample_with_replacement(
    candidates_length: int,
    count: int,
    rng: Optional[random.Random] = None,
) -> list[int]:
    """Return ``count`` independent uniform indices in ``[0, candidates_length)``.

    Duplicates are allowed. An empty pool or a non-positive count yields ``[]``.
    """

    if candidates_length <= 0 or count <= 0:
        return []
    rng = rng or _SYSTEM_RANDOM
    return [rng.randrange(candidates_length) for _ in range(count)]


def build_pending_queue(
    candidates: Sequence[Participant],
    prize_id: str,
    count: int,
    *,
    exclude_winners: bool,
    rng: Optional[random.Random] = None,
) -> list[PendingSelection]:
    """Sample ``count`` winners from ``candidates`` and stage them in reveal order.

    Winners leave the pool when ``exclude_winners`` is on, so sampling is done
    without replacement; otherwise the same participant may be drawn again
    within the batch.
    """

    if not candidates or count <= 0:
        return []

    if exclude_winners:
        indices = sample_without_replacement(candidates, count, rng)
    else:
        indices = sample_with_replacement(len(candidates), count, rng)

    return [
        PendingSelection(
            participant_id=candidates[idx].id,
            prize_id=prize_id,
            reveal_index=idx,
        )
        for idx in indices
    ]


__all__ = [
    "PendingSelection",
    "build_pending_queue",
    "sample_with_replacement",
    "sample_without_replacement",
]
