"""Session defaults read from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .settings import DisplayMode, DrawCount

load_dotenv()


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class DrawDefaults:
    """Initial settings of a new draw session."""

    exclude_winners: bool = True
    draw_count: DrawCount = DrawCount(1)
    display_mode: DisplayMode = DisplayMode.AUTO


def load_draw_defaults() -> DrawDefaults:
    """Build :class:`DrawDefaults` from ``LUCKYDRAW_*`` environment variables.

    Invalid values fall back to the built-in defaults.
    """
    return DrawDefaults(
        exclude_winners=_get_bool("LUCKYDRAW_EXCLUDE_WINNERS", True),
        draw_count=DrawCount.parse(os.getenv("LUCKYDRAW_DRAW_COUNT", "1")),
        display_mode=DisplayMode.parse(os.getenv("LUCKYDRAW_DISPLAY_MODE", "auto")),
    )
