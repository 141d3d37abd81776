from pathlib import Path
from datetime import datetime
from typing import Optional

MEMORY_SQLITE_URL = "sqlite+pysqlite:///:memory:"


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    In-memory and non-SQLite URLs are returned unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


def is_memory_url(url: str) -> bool:
    """Return ``True`` when ``url`` points at a private in-memory SQLite database."""
    if not url.startswith("sqlite"):
        return False
    _, _, path = url.partition(":///")
    return path in ("", ":memory:")


def format_timestamp(dt: Optional[datetime] = None) -> str:
    """Render ``dt`` (default: now) as a local wall-clock string for draw records.

    Aware datetimes are converted to the local timezone first; naive ones are
    rendered as given.
    """
    if dt is None:
        dt = datetime.now().astimezone()
    elif dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime("%Y-%m-%d %H:%M:%S")
