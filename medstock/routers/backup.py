# medstock/routers/backup.py

from fastapi import APIRouter, Depends

from medstock.schemas.backup import BackupSnapshot
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(prefix="/api/backup", tags=["Backup"])


@router.get("/export", response_model=BackupSnapshot)
def export_backup(storage: InventoryStorage = Depends(get_storage)):
    return storage.export_snapshot()


@router.post("/import")
def import_backup(
    snapshot: BackupSnapshot,
    storage: InventoryStorage = Depends(get_storage),
):
    counts = storage.import_snapshot(snapshot.tables)

    return {
        "success": True,
        "message": "Backup imported",
        "imported": counts,
    }
