# spareparts_pos/modules/reporting/export.py
from __future__ import annotations

import csv
import html
import io
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, TextIO, Tuple

_log = logging.getLogger(__name__)

Column = Tuple[str, str, str]


def _cell(value, kind: str):
    if value is None:
        return ""
    if kind == "money":
        return f"{float(value):.2f}"
    if kind == "int":
        return int(value)
    return value


def write_csv(
    fh: TextIO,
    rows: Iterable[dict],
    columns: Optional[Sequence[Column]] = None,
) -> int:
    """
    Write `rows` as CSV with a header row. Without `columns` every key of
    the first row is exported as-is. Returns the number of data rows.
    """
    rows = list(rows)
    if columns is None:
        keys = list(rows[0].keys()) if rows else []
        columns = [(k, k, "text") for k in keys]
    w = csv.writer(fh)
    w.writerow([header for _key, header, _kind in columns])
    for r in rows:
        w.writerow([_cell(r.get(key), kind) for key, _header, kind in columns])
    return len(rows)


def to_csv_text(rows: Iterable[dict], columns: Optional[Sequence[Column]] = None) -> str:
    buf = io.StringIO()
    write_csv(buf, rows, columns)
    return buf.getvalue()


def export_csv(path: str | Path, rows: Iterable[dict], columns: Optional[Sequence[Column]] = None) -> int:
    """Write the CSV file at `path` (UTF-8); returns the number of data rows."""
    path = Path(path)
    with open(path, "w", newline="", encoding="utf-8") as f:
        n = write_csv(f, rows, columns)
    _log.info("exported %d rows to %s", n, path)
    return n


def to_html_table(
    rows: Iterable[dict],
    columns: Sequence[Column],
    title: str = "",
    footer: str = "",
) -> str:
    """Report rows as a bordered HTML table, money and counts right-aligned."""
    parts = []
    if title:
        parts.append(f"<h2>{html.escape(title)}</h2>")
    parts.append('<table border="1" cellspacing="0" cellpadding="4" width="100%">')
    parts.append("<thead><tr>")
    for _key, header, _kind in columns:
        parts.append(f"<th>{html.escape(header)}</th>")
    parts.append("</tr></thead><tbody>")
    for r in rows:
        parts.append("<tr>")
        for key, _header, kind in columns:
            align = ' align="right"' if kind in ("money", "int") else ""
            parts.append(f"<td{align}>{html.escape(str(_cell(r.get(key), kind)))}</td>")
        parts.append("</tr>")
    parts.append("</tbody></table>")
    if footer:
        parts.append(f"<p>{html.escape(footer)}</p>")
    return "".join(parts)


def export_pdf(
    path: str | Path,
    rows: Iterable[dict],
    columns: Sequence[Column],
    title: str = "",
    footer: str = "",
) -> int:
    """
    Print the report table to a PDF file at `path`. Needs a running
    QApplication. Returns the number of data rows.
    """
    from PySide6.QtCore import QMarginsF
    from PySide6.QtGui import QPageLayout, QTextDocument
    from PySide6.QtPrintSupport import QPrinter

    rows = list(rows)
    path = Path(path)
    doc = QTextDocument()
    doc.setHtml(to_html_table(rows, columns, title, footer))
    printer = QPrinter(QPrinter.HighResolution)
    printer.setOutputFormat(QPrinter.PdfFormat)
    printer.setOutputFileName(str(path))
    printer.setPageMargins(QMarginsF(12, 12, 12, 12), QPageLayout.Point)
    doc.print_(printer)
    if not path.exists():
        raise OSError(f"Could not write {path}")
    _log.info("exported %d rows to %s", len(rows), path)
    return len(rows)
