"""Draw engine: sampling, settings and the stateful draw session."""

from .config import DrawDefaults, load_draw_defaults
from .sampling import (
    PendingSelection,
    build_pending_queue,
    sample_with_replacement,
    sample_without_replacement,
)
from .session import (
    BatchDrawOutcome,
    DrawSession,
    DrawState,
    WheelSlice,
    wheel_color_for_index,
)
from .settings import DisplayMode, DrawCount, DrawSettings, resolve_draw_count

__all__ = [
    "BatchDrawOutcome",
    "DisplayMode",
    "DrawCount",
    "DrawDefaults",
    "DrawSession",
    "DrawSettings",
    "DrawState",
    "PendingSelection",
    "WheelSlice",
    "build_pending_queue",
    "load_draw_defaults",
    "resolve_draw_count",
    "sample_with_replacement",
    "sample_without_replacement",
    "wheel_color_for_index",
]
