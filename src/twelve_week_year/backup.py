"""
Snapshot backups of the tracker database.

Export writes the whole store as one opaque .db file; import validates a
file before it replaces the current store.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from twelve_week_year.errors import ImportValidationError
from twelve_week_year.models.database import Database

logger = logging.getLogger(__name__)


def backup_filename(day: Optional[date] = None) -> str:
    """File name of a backup taken on a given day."""
    day = day or date.today()
    return f"12-week-year-backup-{day.isoformat()}.db"


def export_to_file(db: Database, output_dir: Path, day: Optional[date] = None) -> Path:
    """
    Write a snapshot of the store into output_dir.

    Args:
        db: Store handle
        output_dir: Directory for the backup (created if missing)
        day: Date used in the file name (default: today)

    Returns:
        Path of the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    data = db.export_snapshot()
    path = output_dir / backup_filename(day)
    path.write_bytes(data)
    logger.info("Exported %d bytes to %s", len(data), path)
    return path


def import_from_file(db: Database, path: Path) -> None:
    """
    Replace the store with the snapshot in path.

    Raises:
        ImportValidationError: If the file is missing or not a tracker database
    """
    path = Path(path)
    if not path.is_file():
        raise ImportValidationError(f"Backup file not found: {path}")
    db.import_snapshot(path.read_bytes())
