"""Daily rotation of the activity sinks.

Renames `honeypot_activity.log` → `honeypot_activity_<YYYY-MM-DD>.log` and
`splunk_input.log` → `splunk_input_<YYYY-MM-DD>.log`. A running
ActivityLogger notices the rename and starts fresh files on its next write.

Usage:
    python -m honeypot.activity.rotation
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path

from honeypot.config import settings

logger = logging.getLogger(__name__)


def rotated_name(path: Path, day: date) -> Path:
    """First free `<stem>_<day><suffix>` name; `.1`, `.2`, … when already taken."""
    candidate = path.with_name(f"{path.stem}_{day.isoformat()}{path.suffix}")
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}_{day.isoformat()}{path.suffix}.{counter}")
        counter += 1
    return candidate


def rotate_logs(
    logs_dir: str | Path,
    activity_log_file: str = "honeypot_activity.log",
    structured_log_file: str = "splunk_input.log",
    day: date | None = None,
) -> list[Path]:
    """Rename both sinks for `day` (today, UTC, by default).

    Missing sinks are skipped. Returns the new paths.
    """
    day = day or datetime.now(UTC).date()
    directory = Path(logs_dir)
    rotated: list[Path] = []

    for name in (activity_log_file, structured_log_file):
        source = directory / name
        if not source.exists():
            logger.debug("Nothing to rotate at %s", source)
            continue
        target = rotated_name(source, day)
        source.rename(target)
        logger.info("Rotated %s to %s", source, target)
        rotated.append(target)

    return rotated


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-8s %(name)s — %(message)s")
    try:
        rotate_logs(
            settings.activity.logs_dir,
            activity_log_file=settings.activity.activity_log_file,
            structured_log_file=settings.activity.structured_log_file,
        )
    except OSError:
        logger.exception("Log rotation failed")
        sys.exit(1)
