"""Draw count and display mode settings."""

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Optional, Union

from ..models import Prize
from ..models.utils import parse_leading_int


class DisplayMode(str, enum.Enum):
    """How drawn winners are revealed."""

    AUTO = "auto"
    WHEEL = "wheel"
    MARQUEE = "marquee"

    @classmethod
    def parse(cls, value: Union[str, "DisplayMode", None]) -> "DisplayMode":
        """Return the mode named by ``value``; unknown names map to :attr:`AUTO`."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.AUTO


@dataclass(frozen=True)
class DrawCount:
    """Validated draw count setting: either "all" or a positive integer.

    Build instances with :meth:`parse` or :meth:`of`; ``value`` is ``None``
    exactly when the setting means "all remaining units".
    """

    value: Optional[int] = 1

    ALL_TOKEN = "all"

    @classmethod
    def all(cls) -> "DrawCount":
        return cls(value=None)

    @classmethod
    def of(cls, value: int) -> "DrawCount":
        return cls(value=value if value > 0 else 1)

    @classmethod
    def parse(cls, raw: Union[str, int, "DrawCount", None]) -> "DrawCount":
        """Parse operator input; invalid or non-positive input falls back to 1."""
        if isinstance(raw, DrawCount):
            return raw
        if isinstance(raw, str) and raw.strip().lower() == cls.ALL_TOKEN:
            return cls.all()
        parsed = parse_leading_int(raw)
        if parsed is None or parsed <= 0:
            return cls(value=1)
        return cls(value=parsed)

    @property
    def is_all(self) -> bool:
        return self.value is None

    def requested_for(self, prize: Prize) -> int:
        """Number of winners asked for before clamping against ``prize``."""
        return prize.remaining if self.value is None else self.value

    def __str__(self) -> str:
        return self.ALL_TOKEN if self.value is None else str(self.value)


def resolve_draw_count(
    prize: Prize,
    candidate_count: int,
    draw_count_setting: Union[str, int, DrawCount, None],
    exclude_winners: bool,
) -> int:
    """Compute how many winners to draw for ``prize`` this round.

    Never more than the units left on the prize and, when sampling without
    replacement, never more than the distinct candidates available. The
    result is at least 1.
    """

    setting = DrawCount.parse(draw_count_setting)
    requested = setting.requested_for(prize)
    if requested <= 0:
        requested = 1
    limits = [requested, prize.remaining]
    if exclude_winners:
        limits.append(candidate_count)
    return max(1, min(limits))


class DrawSettings:
    """Operator settings for the next draw with the wheel/draw-count coupling.

    The wheel shows one highlighted name at a time, so entering
    :attr:`DisplayMode.WHEEL` forces the draw count to 1 and leaving it
    restores whatever was configured before.
    """

    def __init__(
        self,
        *,
        exclude_winners: bool = True,
        draw_count: Union[str, int, DrawCount, None] = 1,
        display_mode: Union[str, DisplayMode, None] = DisplayMode.AUTO,
    ) -> None:
        self.exclude_winners = exclude_winners
        self._draw_count = DrawCount.parse(draw_count)
        self._last_non_wheel_draw_count: Optional[DrawCount] = self._draw_count
        self._display_mode = DisplayMode.AUTO
        self.set_display_mode(display_mode)

    @property
    def draw_count(self) -> DrawCount:
        return self._draw_count

    @property
    def display_mode(self) -> DisplayMode:
        return self._display_mode

    def set_draw_count(self, raw: Union[str, int, DrawCount, None]) -> DrawCount:
        if self._display_mode is DisplayMode.WHEEL:
            self._draw_count = DrawCount.of(1)
            return self._draw_count
        if isinstance(raw, str) and not raw.strip():
            raw = 1
        self._draw_count = DrawCount.parse(raw)
        self._last_non_wheel_draw_count = self._draw_count
        return self._draw_count

    def set_display_mode(self, mode: Union[str, DisplayMode, None]) -> DisplayMode:
        next_mode = DisplayMode.parse(mode)
        if next_mode is DisplayMode.WHEEL:
            if self._display_mode is not DisplayMode.WHEEL:
                self._last_non_wheel_draw_count = self._draw_count
            self._draw_count = DrawCount.of(1)
        elif self._display_mode is DisplayMode.WHEEL:
            self._draw_count = self._last_non_wheel_draw_count or DrawCount.of(1)
        self._display_mode = next_mode
        return next_mode

    def uses_marquee(self, resolved_count: int) -> bool:
        """Whether winners should be revealed simultaneously.

        Display hint only; it does not change what gets drawn.
        """
        if self._display_mode is DisplayMode.MARQUEE:
            return True
        return self._display_mode is DisplayMode.AUTO and resolved_count >= 2


__all__ = [
    "DisplayMode",
    "DrawCount",
    "DrawSettings",
    "resolve_draw_count",
]
