"""Persistence utilities for the expense dashboard core services."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

# Column title on disk -> record field name.
COLUMNS = {
    "ID": "id",
    "Date": "date",
    "Category": "category",
    "Amount": "amount",
    "Comment": "comment",
}


class CSVStorage:
    """Flat CSV file storage with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = base_path
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load(self, resource: str) -> List[Dict[str, Optional[str]]]:
        path = self._base_path / resource
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                reader = csv.DictReader(handle)
                missing = set(COLUMNS) - set(reader.fieldnames or COLUMNS)
                if missing:
                    logger.warning(
                        "%s is missing columns: %s", path, ", ".join(sorted(missing))
                    )
                rows = [
                    {field: row.get(title) for title, field in COLUMNS.items()}
                    for row in reader
                ]
        except (csv.Error, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Corrupted CSV data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

        logger.debug("Loaded %d rows from %s", len(rows), path)
        return rows

    def save(self, resource: str, records: Iterable[Dict[str, object]]) -> None:
        path = self._base_path / resource
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle)
                writer.writerow(list(COLUMNS))
                for record in records:
                    writer.writerow([record.get(field, "") for field in COLUMNS.values()])
                handle.flush()
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {temp_path}") from exc
        try:
            # Use replace for atomic move on POSIX; ensures crash-safe persistence.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to replace {path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path
