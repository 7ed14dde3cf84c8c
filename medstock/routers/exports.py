# medstock/routers/exports.py

from datetime import datetime, timezone
from io import BytesIO

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(prefix="/api/exports", tags=["Exports"])


STATUS_FILLS = {
    "low-stock": PatternFill(start_color="FEF3C7", end_color="FEF3C7", fill_type="solid"),
    "out-of-stock": PatternFill(start_color="FEE2E2", end_color="FEE2E2", fill_type="solid"),
}


# =========================================================
# INVENTORY EXPORT
# =========================================================
@router.get("/inventory")
def export_inventory(
    ambulance_post_id: str | None = Query(None, alias="ambulancePostId"),
    storage: InventoryStorage = Depends(get_storage),
):
    locations = storage.list_item_locations(ambulance_post_id=ambulance_post_id)
    summary = storage.summary_by_cabinet(ambulance_post_id=ambulance_post_id)

    today = datetime.now(timezone.utc).date()
    suffix = ambulance_post_id or "all"

    return _build_excel(
        locations=locations,
        summary=summary,
        filename=f"inventory_{suffix}_{today}.xlsx",
    )


# =========================================================
# EXCEL BUILDER
# =========================================================
def _build_excel(locations, summary: list[dict], filename: str):

    workbook = Workbook()

    # =======================
    # SHEET 1 - LOCATIONS
    # =======================
    sheet = workbook.active
    sheet.title = "Inventory"

    sheet.append([
        "Item",
        "Category",
        "Ambulance Post",
        "Cabinet",
        "Drawer",
        "Stock Status",
        "Contact",
        "Expiry Date",
        "Discontinued",
    ])
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    for location in locations:
        item = location.item

        sheet.append([
            item.name,
            item.category,
            location.ambulance_post.name if location.ambulance_post else location.ambulance_post_id,
            location.cabinet.name if location.cabinet else location.cabinet_id,
            location.drawer.name if location.drawer else "",
            location.stock_status,
            location.contact_person.name if location.contact_person else "",
            item.expiry_date.isoformat() if item.expiry_date else "",
            "yes" if item.is_discontinued else "no",
        ])

        fill = STATUS_FILLS.get(location.stock_status)
        if fill is not None:
            for cell in sheet[sheet.max_row]:
                cell.fill = fill

    # =======================
    # SHEET 2 - CABINET SUMMARY
    # =======================
    cabinets = workbook.create_sheet(title="Cabinet Summary")

    cabinets.append(["Cabinet", "Name", "Total Items", "Needs Supply"])
    for cell in cabinets[1]:
        cell.font = Font(bold=True)

    for entry in summary:
        cabinets.append([
            entry["id"],
            entry["name"],
            entry["total_items"],
            entry["low_stock_items"],
        ])

    output = BytesIO()
    workbook.save(output)
    output.seek(0)

    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
