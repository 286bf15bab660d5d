"""
Delimited-text reader for the catalog CSV sources.

Handles quoted fields (with embedded commas, quotes and line breaks) and
both LF and CRLF line endings. It knows nothing about column names or
types; callers map the header row themselves with header_index().
"""

from typing import Iterable

DELIMITER = ","
QUOTE = '"'


def parse_csv(src: str, drop_blank: bool = True) -> list[list[str]]:
    """
    Parse delimited text into rows of raw field strings.

    Args:
        src: Full text content
        drop_blank: Skip rows whose fields are all blank (e.g. ",,,")

    Returns:
        List of rows, each a list of field strings. The first row is the header.
    """
    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False

    i = 0
    n = len(src)
    while i < n:
        c = src[i]
        if c == "\r":
            # CR never lands in a field; CRLF ends a row via the LF
            pass
        elif in_quotes:
            if c == QUOTE:
                if i + 1 < n and src[i + 1] == QUOTE:
                    field.append(QUOTE)  # escaped quote
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(c)
        elif c == QUOTE:
            in_quotes = True
        elif c == DELIMITER:
            row.append("".join(field))
            field = []
        elif c == "\n":
            row.append("".join(field))
            rows.append(row)
            row = []
            field = []
        else:
            field.append(c)
        i += 1

    # Unterminated last row is still a row, unless it is completely empty
    row.append("".join(field))
    if len(row) > 1 or row[0] != "":
        rows.append(row)

    if drop_blank:
        rows = [r for r in rows if not is_blank_row(r)]
    return rows


def is_blank_row(row: Iterable[str]) -> bool:
    """True when every field in the row is empty or whitespace."""
    return all(not (cell or "").strip() for cell in row)


def header_index(header: list[str]) -> dict[str, int]:
    """Map trimmed column names to their position."""
    return {name.strip(): i for i, name in enumerate(header)}


def get_field(row: list[str], index: dict[str, int], column: str) -> str:
    """Trimmed field value for a named column ("" when the column or cell is absent)."""
    i = index.get(column)
    if i is None or i >= len(row):
        return ""
    return (row[i] or "").strip()


def quote_field(value: str) -> str:
    """Quote a field if it contains a delimiter, quote or line break."""
    if any(ch in value for ch in (DELIMITER, QUOTE, "\n", "\r")):
        return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE
    return value


def format_csv(rows: Iterable[Iterable[str]]) -> str:
    """Serialize rows back to delimited text (LF line endings)."""
    return "".join(
        DELIMITER.join(quote_field(str(cell)) for cell in row) + "\n" for row in rows
    )
