"""Embedded chart workbooks (``ppt/embeddings/WorkbookN.xlsx``).

openpyxl writes the workbook; the result is then re-packed so repeated
builds are byte-identical: document timestamps are pinned and every ZIP
entry gets the same ``date_time``.
"""

import io
import logging
import re
import zipfile
from datetime import datetime

from openpyxl import Workbook

from pptxforge.generator.charts import SHEET, series_layout
from pptxforge.schema.chart import Chart
from pptxforge.schema.presentation import DEFAULT_TIMESTAMP, ZIP_EPOCH

logger = logging.getLogger(__name__)

_CORE_PART = "docProps/core.xml"
_W3CDTF = re.compile(r"(<dcterms:(created|modified)[^>]*>)[^<]*(</dcterms:\2>)")


def build_worksheet(chart: Chart) -> Workbook:
    """Lay the chart data out the way the chart's formulas reference it."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET
    layouts = series_layout(chart)

    if chart.chart_type.is_xy:
        for lay in layouts:
            ws[f"{lay.x_col}1"] = f"{lay.series.name} X"
            ws[f"{lay.y_col}1"] = lay.series.name
            if lay.size_col:
                ws[f"{lay.size_col}1"] = f"{lay.series.name} Size"
            for row, value in enumerate(lay.series.x_values, start=2):
                ws[f"{lay.x_col}{row}"] = value
            for row, value in enumerate(lay.series.values, start=2):
                ws[f"{lay.y_col}{row}"] = value
            if lay.size_col:
                for row, value in enumerate(lay.series.sizes, start=2):
                    ws[f"{lay.size_col}{row}"] = value
        return wb

    for row, category in enumerate(chart.categories, start=2):
        ws[f"A{row}"] = category
    for lay in layouts:
        ws[f"{lay.y_col}1"] = lay.series.name
        for row, value in enumerate(lay.series.values, start=2):
            ws[f"{lay.y_col}{row}"] = value
    return wb


def _pin_core_dates(xml: bytes, stamp: datetime) -> bytes:
    text = stamp.strftime("%Y-%m-%dT%H:%M:%SZ")
    return _W3CDTF.sub(lambda m: f"{m.group(1)}{text}{m.group(3)}",
                       xml.decode("utf-8")).encode("utf-8")


def repack(data: bytes, timestamp: tuple = ZIP_EPOCH,
           stamp: datetime = DEFAULT_TIMESTAMP) -> bytes:
    """Rewrite an XLSX with fixed entry timestamps and pinned core dates."""
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as src, \
            zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as dst:
        for info in src.infolist():
            payload = src.read(info.filename)
            if info.filename == _CORE_PART:
                payload = _pin_core_dates(payload, stamp)
            entry = zipfile.ZipInfo(info.filename, date_time=timestamp)
            entry.compress_type = zipfile.ZIP_DEFLATED
            entry.external_attr = 0o600 << 16
            dst.writestr(entry, payload)
    return out.getvalue()


def workbook_bytes(chart: Chart, timestamp: tuple = ZIP_EPOCH,
                   stamp: datetime = DEFAULT_TIMESTAMP) -> bytes:
    wb = build_worksheet(chart)
    wb.properties.creator = "pptxforge"
    wb.properties.lastModifiedBy = "pptxforge"
    wb.properties.created = stamp
    wb.properties.modified = stamp
    raw = io.BytesIO()
    wb.save(raw)
    data = repack(raw.getvalue(), timestamp, stamp)
    logger.debug("Chart workbook: %d series, %d bytes", len(chart.series), len(data))
    return data
