"""
reports.exporters — turn a header row plus data rows into file bytes.

Two formats are supported:

- ``csv``  — ``csv.writer`` over UTF-8 text.  Cells that a spreadsheet
  would evaluate as a formula are prefixed with ``'``.
- ``xlsx`` — a single-sheet workbook written with ``openpyxl``.
"""

from __future__ import annotations

import csv
import datetime
import io
from typing import Any, Iterable, Sequence

from django.http import HttpResponse
from openpyxl import Workbook

CSV_CONTENT_TYPE = "text/csv"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

CSV_DANGEROUS_PREFIXES = ("=", "+", "-", "@")


def _csv_safe(value: str) -> str:
    if value and value.startswith(CSV_DANGEROUS_PREFIXES):
        return f"'{value}"
    return value


def _serialize_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    return str(value)


class CSVExporter:
    extension = "csv"
    content_type = CSV_CONTENT_TYPE

    def render(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> bytes:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(headers)
        for row in rows:
            writer.writerow([_csv_safe(_serialize_value(value)) for value in row])
        return output.getvalue().encode("utf-8")


class XLSXExporter:
    extension = "xlsx"
    content_type = XLSX_CONTENT_TYPE

    def __init__(self, sheet_title: str = "Report") -> None:
        self.sheet_title = sheet_title

    def render(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = self.sheet_title
        sheet.append(list(headers))
        for row in rows:
            sheet.append([_serialize_value(value) for value in row])

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()


EXPORTERS = {
    CSVExporter.extension: CSVExporter(),
    XLSXExporter.extension: XLSXExporter(),
}


def get_exporter(file_format: str):
    """Exporter for ``"csv"`` / ``"xlsx"``.  Raises ``KeyError`` otherwise."""
    return EXPORTERS[file_format]


def attachment_response(report_file) -> HttpResponse:
    """Wrap a ``ReportFile`` in a download response."""
    response = HttpResponse(report_file.content, content_type=report_file.content_type)
    response["Content-Disposition"] = f'attachment; filename="{report_file.filename}"'
    return response
