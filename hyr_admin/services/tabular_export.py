"""CSV/XLSX rendering shared by report exports and PILA downloads."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from dataclasses import dataclass
from io import BytesIO

from fastapi import HTTPException, status
from openpyxl import Workbook

EXPORT_FORMATS = {"csv", "xlsx"}
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


def normalize_format(format_name: str) -> str:
    normalized = format_name.strip().lower()
    if normalized not in EXPORT_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="format must be one of: csv, xlsx.",
        )
    return normalized


def render_table(
    *,
    base_filename: str,
    format_name: str,
    columns: Sequence[str],
    rows: Sequence[dict[str, object]],
    sheet_title: str = "report",
) -> ExportFilePayload:
    normalized = normalize_format(format_name)

    if normalized == "csv":
        sio = io.StringIO()
        writer = csv.DictWriter(sio, fieldnames=list(columns), extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)
        return ExportFilePayload(
            media_type="text/csv; charset=utf-8",
            filename=f"{base_filename}.csv",
            content=sio.getvalue().encode("utf-8"),
        )

    workbook = Workbook()
    sheet = workbook.active
    # Excel caps sheet titles at 31 characters.
    sheet.title = sheet_title[:31]
    sheet.append(list(columns))
    for row in rows:
        sheet.append(["" if row.get(column) is None else str(row.get(column)) for column in columns])

    output = BytesIO()
    workbook.save(output)
    return ExportFilePayload(
        media_type=XLSX_MEDIA_TYPE,
        filename=f"{base_filename}.xlsx",
        content=output.getvalue(),
    )
