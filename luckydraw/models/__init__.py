from .base import Base

# import models so the metadata knows every table
from .participant import Participant  # noqa: F401
from .prize import DEFAULT_PRIZE_NAMES, Prize  # noqa: F401
from .draw_record import DrawRecord  # noqa: F401

__all__ = [
    "Base",
    "DEFAULT_PRIZE_NAMES",
    "DrawRecord",
    "Participant",
    "Prize",
]
