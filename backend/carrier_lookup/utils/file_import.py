"""Row parsing for bulk uploads (JSON, CSV, and Excel worksheets).

Every format comes out as the same thing: a list of flat dicts keyed by
canonical field names, with string values already stripped.  Header
spellings are matched loosely ("Service Name", "serviceName", "service_name"
all map to `service_name`).
"""

import csv
import io
import json
import os
from dataclasses import dataclass
from typing import Any

from openpyxl import Workbook, load_workbook

from carrier_lookup.middleware.exceptions import MalformedFileError

JSON_TYPES = {"application/json", "text/json"}
CSV_TYPES = {"text/csv", "application/csv"}
EXCEL_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
}

FORMAT_BY_EXTENSION = {
    ".json": "json",
    ".csv": "csv",
    ".xlsx": "excel",
    ".xlsm": "excel",
}


@dataclass
class FieldDef:
    """One logical column and the header spellings that map onto it."""
    name: str
    aliases: tuple[str, ...]
    header: str = ""


def normalize_header(value: Any) -> str:
    """'Service Name' / 'service_name' / 'serviceName' -> 'servicename'."""
    text = str(value or "").strip().lower()
    return "".join(ch for ch in text if ch.isalnum())


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def detect_format(filename: str | None, content_type: str | None) -> str:
    """Pick the parser from the declared content type, then the extension."""
    ctype = (content_type or "").split(";")[0].strip().lower()
    if ctype in JSON_TYPES:
        return "json"
    if ctype in CSV_TYPES:
        return "csv"
    if ctype in EXCEL_TYPES:
        return "excel"

    ext = os.path.splitext(filename or "")[1].lower()
    fmt = FORMAT_BY_EXTENSION.get(ext)
    if fmt:
        return fmt
    raise MalformedFileError(
        "Unsupported file type. Please upload Excel, CSV, or JSON files."
    )


def _build_alias_map(field_defs: list[FieldDef]) -> dict[str, str]:
    alias_map: dict[str, str] = {}
    for fd in field_defs:
        alias_map[normalize_header(fd.name)] = fd.name
        for alias in fd.aliases:
            alias_map[normalize_header(alias)] = fd.name
    return alias_map


def _canonical_rows(
    raw_rows: list[dict[Any, Any]],
    field_defs: list[FieldDef],
) -> list[dict[str, str]]:
    """Map raw header keys onto field names; drop unknown columns and blank rows."""
    alias_map = _build_alias_map(field_defs)
    rows: list[dict[str, str]] = []
    for raw in raw_rows:
        row = {fd.name: "" for fd in field_defs}
        for key, value in raw.items():
            field_name = alias_map.get(normalize_header(key))
            # First non-empty spelling wins when a file carries both "POL" and "pol"
            if field_name and not row[field_name]:
                row[field_name] = _cell_to_str(value)
        if any(row.values()):
            rows.append(row)
    return rows


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")  # handle BOM from Excel
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _read_json(content: bytes) -> list[dict[Any, Any]]:
    try:
        data = json.loads(_decode(content))
    except json.JSONDecodeError as exc:
        raise MalformedFileError(f"Invalid JSON format: {exc.msg}") from exc

    if not isinstance(data, list):
        raise MalformedFileError("JSON file must contain an array of rows")
    if not all(isinstance(item, dict) for item in data):
        raise MalformedFileError("Every JSON array entry must be an object")
    return data


def _read_csv(content: bytes) -> list[dict[Any, Any]]:
    text = _decode(content)
    try:
        reader = csv.DictReader(io.StringIO(text))
        if not reader.fieldnames or not any(h and h.strip() for h in reader.fieldnames):
            raise MalformedFileError("CSV file must have a header row")
        return [dict(row) for row in reader]
    except csv.Error as exc:
        raise MalformedFileError(f"Invalid CSV format: {exc}") from exc


def _read_excel(content: bytes) -> list[dict[Any, Any]]:
    """Read the first worksheet; row 1 is the header."""
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise MalformedFileError(f"Invalid workbook: {exc}") from exc

    try:
        sheet = workbook.worksheets[0]
        row_iter = sheet.iter_rows(values_only=True)
        header_row = next(row_iter, None)
        headers = [_cell_to_str(h) for h in (header_row or ())]
        if not any(headers):
            raise MalformedFileError("Worksheet must have a header row")

        rows = []
        for values in row_iter:
            rows.append({
                headers[i]: value
                for i, value in enumerate(values)
                if i < len(headers) and headers[i]
            })
        return rows
    finally:
        workbook.close()


_READERS = {
    "json": _read_json,
    "csv": _read_csv,
    "excel": _read_excel,
}


def parse_rows(
    content: bytes,
    field_defs: list[FieldDef],
    *,
    filename: str | None = None,
    content_type: str | None = None,
) -> list[dict[str, str]]:
    """Parse an uploaded file into canonical rows.

    Raises MalformedFileError for empty uploads, unknown types, or files that
    cannot be read.  Row-level problems (missing values) are left to the
    caller, which reports them per row.
    """
    if not content:
        raise MalformedFileError("Uploaded file is empty")

    fmt = detect_format(filename, content_type)
    raw_rows = _READERS[fmt](content)
    return _canonical_rows(raw_rows, field_defs)


def canonicalize(raw_rows: list[dict[Any, Any]], field_defs: list[FieldDef]) -> list[dict[str, str]]:
    """Same header mapping as parse_rows, for rows that arrive as a JSON body."""
    return _canonical_rows(raw_rows, field_defs)


# ── Templates ───────────────────────────────────────────────


def generate_template_csv(
    field_defs: list[FieldDef],
    sample_rows: list[dict[str, str]] | None = None,
) -> str:
    """CSV template with display headers and optional sample rows."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow([fd.header or fd.name for fd in field_defs])
    for row in sample_rows or []:
        writer.writerow([row.get(fd.name, "") for fd in field_defs])
    return output.getvalue()


def generate_template_xlsx(
    field_defs: list[FieldDef],
    sample_rows: list[dict[str, str]],
    *,
    sheet_title: str,
    instructions: list[tuple[str, str, str]] | None = None,
) -> bytes:
    """Excel template: a data sheet plus an optional Instructions sheet."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title
    sheet.append([fd.header or fd.name for fd in field_defs])
    for row in sample_rows:
        sheet.append([row.get(fd.name, "") for fd in field_defs])

    if instructions:
        notes = workbook.create_sheet("Instructions")
        notes.append(["Field", "Required", "Description"])
        for line in instructions:
            notes.append(list(line))

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
