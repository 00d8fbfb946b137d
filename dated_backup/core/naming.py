"""Dated backup names."""

from datetime import datetime
from pathlib import PurePath

from .errors import ClockUnavailableError, NamelessPathError

DATED_SUFFIX_FORMAT = "_%Y-%m-%d-%Hh%M"


def current_time() -> datetime:
    """Return the current local time with its UTC offset attached.

    Raises:
        ClockUnavailableError: If the local offset cannot be determined.
    """
    try:
        now = datetime.now().astimezone()
    except (OSError, OverflowError, ValueError) as e:
        raise ClockUnavailableError("could not determine the local offset") from e
    if now.utcoffset() is None:
        raise ClockUnavailableError("could not determine the local offset")
    return now


def dated_suffix(now: datetime) -> str:
    """Render ``now`` as ``_YYYY-MM-DD-HHhMM`` in its own timezone."""
    return now.strftime(DATED_SUFFIX_FORMAT)


def compose(basename: str, suffix: str) -> str:
    """Append a dated suffix to a base name."""
    return basename + suffix


def dated_name(basename: str, now: datetime) -> str:
    """Return the dated name of ``basename`` at ``now``.

    Args:
        basename: Name of the source directory.
        now: Aware datetime giving the suffix.

    Returns:
        Name such as ``colors_2022-12-13-14h15``.
    """
    return compose(basename, dated_suffix(now))


def source_base_name(path) -> str:
    """Return the final component of ``path`` used to name its backups.

    A trailing separator is ignored, so ``foo/colors/`` gives ``colors``.

    Raises:
        NamelessPathError: For paths such as ``/``, ``.`` or ``foo/..``.
    """
    name = PurePath(path).name
    if name in ("", ".", ".."):
        raise NamelessPathError(f"{str(path)!r} does not have a name")
    return name
