"""Header-driven CSV reader for Discogs collection exports.

Responsibilities:
  • UTF-8 / UTF-8-SIG decoding and BOM removal
  • Quoted fields with embedded commas, newlines and doubled quotes
  • CRLF and LF line endings (a bare CR outside quotes is dropped),
    last line without a trailing newline
  • Header trimming; blank header cells become ``column_<n>`` (1-based)
  • Dropping rows whose every field is blank

Parsing is lazy: :func:`parse_csv` is a generator, so callers that only
need the first rows never read the rest.  Empty input yields nothing; the
"empty CSV" decision belongs to the import pipeline, not to the parser.
An unterminated quote consumes the rest of the input into its field.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator

_BOM = "\ufeff"


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8-sig", errors="replace")
    return raw[1:] if raw.startswith(_BOM) else raw


def _drop_bare_carriage_returns(text: str) -> str:
    """Remove carriage returns outside quoted fields; quoted ones are kept."""
    if "\r" not in text:
        return text
    out: list[str] = []
    in_quotes = False
    at_field_start = True
    just_closed = False
    for ch in text:
        if in_quotes:
            if ch == '"':
                in_quotes = False
                just_closed = True
            out.append(ch)
            continue
        if ch == "\r":
            continue
        # Quotes open a field only at its start; a quote right after a
        # closing one is an escaped ``""``.  Quotes inside unquoted
        # values (``12" LP``) are literal.
        if ch == '"' and (at_field_start or just_closed):
            in_quotes = True
        at_field_start = ch in ",\n"
        just_closed = False
        out.append(ch)
    return "".join(out)


def _header_names(cells: list[str]) -> list[str]:
    headers: list[str] = []
    for index, cell in enumerate(cells, start=1):
        name = cell.replace(_BOM, "").strip()
        headers.append(name or f"column_{index}")
    return headers


def parse_csv(raw: str | bytes | None) -> Iterator[dict[str, str]]:
    """Yield one ``{header: value}`` dict per non-blank data row.

    Missing trailing cells are filled with ``""``; cells beyond the last
    header are ignored.  Values are returned exactly as written (no
    trimming); the row mapper decides what to trim.
    """
    if not raw:
        return
    text = _drop_bare_carriage_returns(_decode(raw))
    if not text:
        return

    reader = csv.reader(io.StringIO(text, newline=""), strict=False)
    header_cells = next(reader, None)
    if not header_cells:
        return
    headers = _header_names(header_cells)

    for cells in reader:
        if not any(cell.strip() for cell in cells):
            continue
        yield {
            header: (cells[index] if index < len(cells) else "")
            for index, header in enumerate(headers)
        }
