from __future__ import annotations

import csv
from io import StringIO
from typing import Iterable, List, TextIO

from pydantic import ValidationError

from .models import TodoFields
from .schemas import TodoCreate

CSV_FIELDS = ("description", "status")


class InvalidCSVFormat(ValueError):
    """Raised when an uploaded CSV does not describe importable todos."""


# PUBLIC_INTERFACE
def parse_todos_csv(stream: TextIO) -> List[TodoFields]:
    """
    Parse CSV text with a header row into todo fields.

    The header may only name columns from CSV_FIELDS. Every row must carry a
    non-blank description; an empty or absent status becomes 'pending'.
    Nothing is returned unless every row is valid.

    Raises:
        InvalidCSVFormat: on a missing header, an unexpected column, a row with
            more values than the header, or a row failing todo validation.
    """
    reader = csv.DictReader(stream)
    if not reader.fieldnames:
        raise InvalidCSVFormat("missing header row")

    unexpected = set(reader.fieldnames) - set(CSV_FIELDS)
    if unexpected:
        raise InvalidCSVFormat(f"unexpected columns: {', '.join(sorted(unexpected))}")

    rows: List[TodoFields] = []
    for row in reader:
        # DictReader files surplus values under the None key
        if None in row:
            raise InvalidCSVFormat(f"line {reader.line_num} has more values than the header")
        try:
            todo = TodoCreate(description=row.get("description"), status=row.get("status"))
        except ValidationError as e:
            raise InvalidCSVFormat(f"line {reader.line_num}: {e.errors()[0]['msg']}") from e
        rows.append(todo.to_fields())
    return rows


# PUBLIC_INTERFACE
def read_todos_csv(path: str) -> List[TodoFields]:
    """Parse the CSV file at path; see parse_todos_csv."""
    with open(path, newline="", encoding="utf-8-sig") as f:
        return parse_todos_csv(f)


# PUBLIC_INTERFACE
def render_todos_csv(rows: Iterable[TodoFields]) -> str:
    """
    Serialize todos to CSV text with a 'description,status' header.
    Fields containing commas, quotes or newlines are quoted.
    """
    out = StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_FIELDS)
    for row in rows:
        writer.writerow([row.get(field, "") for field in CSV_FIELDS])
    return out.getvalue()
