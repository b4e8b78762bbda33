"""Tabular data ingestion. Turns CSV / Excel data into Table and Chart records.

Handles:
- CSV files in UTF-8 (comma-delimited) or UTF-16 LE with BOM (tab-delimited)
- Excel workbooks (.xlsx / .xlsm) through openpyxl
- Numeric cleanup of thousands separators and float artifacts
"""

from pathlib import Path

import pandas as pd

from pptxforge.errors import InvalidInputError, MissingAssetError, UnsupportedFormatError
from pptxforge.schema.chart import Chart, ChartSeries, ChartType
from pptxforge.schema.table import Table, TableCell, TableRow
from pptxforge.schema.units import Length, inches, parse_dimension


_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
_CSV_SUFFIXES = {".csv", ".tsv", ".txt"}


# ---------------------------------------------------------------------------
# Value parsers
# ---------------------------------------------------------------------------

def parse_numeric(value):
    """Parse a numeric value that may contain commas or float artifacts.

    Examples:
        "63,571" -> 63571.0
        "49,156.000000000" -> 49156.0
        42 -> 42.0
        "n/a" -> NaN
    """
    if pd.isna(value):
        return float("nan")
    if isinstance(value, (int, float)):
        return float(value)
    s = str(value).strip().replace(",", "")
    if not s:
        return float("nan")
    try:
        return float(s)
    except ValueError:
        return float("nan")


def format_cell(value) -> str:
    """Text for a table cell: blanks for NaN, integers without ``.0``."""
    if pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def clean_columns(df):
    """Strip whitespace from string column names."""
    df.columns = [c.strip() if isinstance(c, str) else c for c in df.columns]
    return df


def detect_encoding(path):
    """Detect whether a file is UTF-16 LE (with BOM) or UTF-8.

    Returns (encoding, delimiter) tuple.
    """
    with open(path, "rb") as f:
        raw = f.read(4)
    if raw[:2] == b"\xff\xfe":
        return "utf-16-le", "\t"
    if Path(path).suffix.lower() == ".tsv":
        return "utf-8", "\t"
    return "utf-8", ","


def read_csv_auto(path):
    """Read a CSV file with automatic encoding and delimiter detection."""
    encoding, sep = detect_encoding(path)
    df = pd.read_csv(path, encoding=encoding, sep=sep)
    return clean_columns(df)


def read_table_file(path: str | Path, sheet_name: str | int = 0) -> pd.DataFrame:
    """Read a CSV or Excel file into a DataFrame.

    Raises:
        MissingAssetError: If the file does not exist.
        UnsupportedFormatError: If the extension is not CSV/TSV/XLSX/XLSM.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in _EXCEL_SUFFIXES | _CSV_SUFFIXES:
        raise UnsupportedFormatError(f"Unsupported data file {path.name!r}")
    if not path.exists():
        raise MissingAssetError(f"Data file not found: {path}")
    if suffix in _EXCEL_SUFFIXES:
        df = pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl")
        return clean_columns(df)
    return read_csv_auto(path)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def table_from_frame(df: pd.DataFrame, x: Length = inches(0.5), y: Length = inches(1.5),
                     width: Length = inches(9), header: bool = True,
                     max_rows: int | None = None, **kwargs) -> Table:
    """Build a Table from a DataFrame; the column names become the header row.

    Args:
        df: Source data. Every value is rendered as text.
        header: Emit the column names as a styled first row.
        max_rows: Keep at most this many data rows.
    """
    if df.empty and not header:
        raise InvalidInputError("Cannot build a table from an empty DataFrame")
    if max_rows is not None:
        df = df.head(max_rows)
    rows = []
    if header:
        rows.append(TableRow([TableCell(str(c), bold=True) for c in df.columns]))
    for record in df.itertuples(index=False, name=None):
        rows.append(TableRow([TableCell(format_cell(v)) for v in record]))
    if not rows or not rows[0].cells:
        raise InvalidInputError("Cannot build a table from a DataFrame without columns")
    return Table(rows=rows, x=x, y=y, width=width, header=header, **kwargs)


def chart_from_frame(df: pd.DataFrame, chart_type: ChartType | str = ChartType.BAR,
                     category_column: str | None = None, title: str = "",
                     x: Length = inches(0.5), y: Length = inches(1.5),
                     width: Length = inches(9), height: Length = inches(5),
                     **kwargs) -> Chart:
    """Build a Chart from a DataFrame.

    The category column (default: the first column) supplies the labels;
    every other numeric column becomes a series. For scatter and bubble
    charts the category column supplies the X values instead, and for
    bubble charts each series column is followed by its size column.
    """
    if isinstance(chart_type, str):
        chart_type = ChartType(chart_type)
    if df.empty:
        raise InvalidInputError("Cannot build a chart from an empty DataFrame")
    category_column = category_column or df.columns[0]
    if category_column not in df.columns:
        raise InvalidInputError(f"Column {category_column!r} not in data")

    value_columns = [c for c in df.columns if c != category_column]
    numeric = df[value_columns].apply(lambda col: col.map(parse_numeric))
    numeric = numeric.loc[:, numeric.notna().any()].fillna(0.0)
    if numeric.empty:
        raise InvalidInputError("Data has no numeric columns to chart")

    if chart_type.is_xy:
        x_values = [parse_numeric(v) for v in df[category_column]]
        columns = list(numeric.columns)
        series = []
        step = 2 if chart_type is ChartType.BUBBLE else 1
        for i in range(0, len(columns) - step + 1, step):
            sizes = numeric[columns[i + 1]].tolist() if step == 2 else None
            series.append(ChartSeries(str(columns[i]), numeric[columns[i]].tolist(),
                                      x_values=x_values, sizes=sizes))
        categories: list[str] = []
    else:
        categories = [format_cell(v) for v in df[category_column]]
        series = [ChartSeries(str(col), numeric[col].tolist()) for col in numeric.columns]

    return Chart(chart_type=chart_type, title=title, categories=categories,
                 series=series, x=x, y=y, width=width, height=height, **kwargs)


# ---------------------------------------------------------------------------
# Deck-file entries
# ---------------------------------------------------------------------------

def _data_path(d: dict, base_dir: Path | None) -> Path:
    path = Path(d["data"])
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path


def _placement(d: dict, *keys: str) -> dict:
    return {k: parse_dimension(d[k]) for k in keys if k in d}


def load_table(d: dict, base_dir: Path | None = None) -> Table:
    """Build a Table from a deck-file entry whose ``data`` key names a CSV/Excel file.

    Example entry::

        tables:
          - data: regions.csv
            max_rows: 10
            x: 0.5in
            y: 1.5in
            width: 9in
    """
    df = read_table_file(_data_path(d, base_dir), sheet_name=d.get("sheet", 0))
    return table_from_frame(df, header=d.get("header", True), max_rows=d.get("max_rows"),
                            **_placement(d, "x", "y", "width"))


def load_chart(d: dict, base_dir: Path | None = None) -> Chart:
    """Build a Chart from a deck-file entry whose ``data`` key names a CSV/Excel file."""
    df = read_table_file(_data_path(d, base_dir), sheet_name=d.get("sheet", 0))
    return chart_from_frame(df, chart_type=d.get("type", ChartType.BAR.value),
                            category_column=d.get("category_column"),
                            title=d.get("title", ""),
                            **_placement(d, "x", "y", "width", "height"))
