import logging
from datetime import date
from pathlib import Path
from typing import Optional, Union

from .draw.session import DrawSession
from .spreadsheet.exporter import build_results_workbook, default_export_filename

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def import_participants_file(draw_session: DrawSession, path: PathLike) -> bool:
    """Load a participant workbook from ``path`` into ``draw_session``.

    Only the file read happens here; parsing, validation and the state change
    are delegated to :meth:`DrawSession.import_participants`.
    """
    return draw_session.import_participants(Path(path).read_bytes())


def import_prizes_file(draw_session: DrawSession, path: PathLike) -> bool:
    """Load a prize workbook from ``path`` into ``draw_session``."""
    return draw_session.import_prizes(Path(path).read_bytes())


def import_roster_file(draw_session: DrawSession, path: PathLike) -> bool:
    """Load a two-sheet workbook (participants, prizes) from ``path``."""
    return draw_session.import_roster(Path(path).read_bytes())


def export_results(
    draw_session: DrawSession,
    directory: PathLike,
    *,
    filename: Optional[str] = None,
    today: Optional[date] = None,
) -> Optional[Path]:
    """Write the winners list of ``draw_session`` to an ``.xlsx`` file.

    The history is snapshotted when the call starts, so this is safe while a
    draw is in progress and never changes draw state.

    Parameters
    ----------
    draw_session : DrawSession
        Session whose committed draws are exported.
    directory : PathLike
        Target directory; it must exist.
    filename : Optional[str]
        File name to use instead of :func:`default_export_filename`.
    today : Optional[date]
        Date embedded in the default file name. Defaults to today.

    Returns
    -------
    Optional[Path]
        The written file, or ``None`` when there was nothing to export.
    """
    records = draw_session.results_oldest_first()
    if not records:
        draw_session.report_status("No winners to export yet")
        return None

    payload = build_results_workbook(records)
    target = Path(directory) / (filename or default_export_filename(today))
    target.write_bytes(payload)
    logger.info(f"Exported {len(records)} draw record(s) to {target}")
    draw_session.report_status("Winners list exported")
    return target
