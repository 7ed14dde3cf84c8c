# medstock/schemas/backup.py

from datetime import datetime
from typing import Any, Dict, List

from pydantic import Field

from medstock.schemas.base import RequestModel


class BackupSnapshot(RequestModel):
    """Full dump of every table, one list of row dicts per table."""

    version: int = 1
    exported_at: datetime | None = None
    tables: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)
