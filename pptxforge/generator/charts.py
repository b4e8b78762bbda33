"""Chart parts: chart XML, chart style, chart color style, and the slide frame.

Each chart produces three coupled parts (``chartN.xml``, ``styleN.xml``,
``colorsN.xml``) plus an embedded workbook. The chart's rels are fixed:
``rId1`` the workbook, ``rId2`` the style part, ``rId3`` the color part.

Element order follows the chart schema: the plot area precedes the legend;
inside the plot area the type-specific group (series first) precedes the
axes; each series writes idx, order, tx, spPr, ..., cat/xVal, val/yVal.

Usage::

    from pptxforge.generator.charts import chart_xml

    xml = chart_xml(chart)       # ppt/charts/chart1.xml
"""

from dataclasses import dataclass

from openpyxl.utils import get_column_letter

from pptxforge.errors import InternalError
from pptxforge.generator.context import SlideContext
from pptxforge.generator.shapes import non_visual_props
from pptxforge.generator.xml import (
    NS_A,
    NS_C,
    NS_CS,
    NS_R,
    XML_DECLARATION,
    escape,
    solid_fill,
    xfrm,
)
from pptxforge.package.relationships import RT_CHART
from pptxforge.schema.chart import Chart, ChartSeries, ChartType
from pptxforge.schema.units import resolve_box


CHART_URI = "http://schemas.openxmlformats.org/drawingml/2006/chart"
SHEET = "Sheet1"

# Axis ids shared by every chart group in a plot area.
CAT_AX_ID = 500_000_001
VAL_AX_ID = 500_000_002

_BAR_LAYOUT = {
    ChartType.BAR: ("col", "clustered"),
    ChartType.BAR_HORIZONTAL: ("bar", "clustered"),
    ChartType.BAR_STACKED: ("col", "stacked"),
    ChartType.BAR_STACKED_100: ("col", "percentStacked"),
    ChartType.COMBO: ("col", "clustered"),
}

_LINE_GROUPING = {
    ChartType.LINE: "standard",
    ChartType.LINE_MARKERS: "standard",
    ChartType.LINE_STACKED: "stacked",
}

_AREA_GROUPING = {
    ChartType.AREA: "standard",
    ChartType.AREA_STACKED: "stacked",
    ChartType.AREA_STACKED_100: "percentStacked",
}

_SCATTER_STYLE = {
    ChartType.SCATTER: "marker",
    ChartType.SCATTER_LINES: "lineMarker",
    ChartType.SCATTER_SMOOTH: "smoothMarker",
    ChartType.BUBBLE: "marker",
}

_RADAR_STYLE = {
    ChartType.RADAR: "marker",
    ChartType.RADAR_FILLED: "filled",
}

_NO_MARKER = '<c:marker><c:symbol val="none"/></c:marker>'


# ---------------------------------------------------------------------------
# Worksheet layout shared with the embedded workbook
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SeriesLayout:
    """Where one series lives in the embedded worksheet."""
    series: ChartSeries
    index: int                  # 0-based emission order
    y_col: str
    x_col: str | None = None
    size_col: str | None = None

    @property
    def last_row(self) -> int:
        return len(self.series.values) + 1


def emission_order(chart: Chart) -> list[ChartSeries]:
    """Series in the order they are written; combo bars precede combo lines."""
    if chart.chart_type is ChartType.COMBO:
        return ([s for s in chart.series if not s.line]
                + [s for s in chart.series if s.line])
    return list(chart.series)


def series_layout(chart: Chart) -> list[SeriesLayout]:
    """Category charts: categories in A, series k in column B+k.

    Scatter and bubble: each series takes an X column then a Y column (then a
    size column for bubble), left to right from column A.
    """
    layouts = []
    ordered = emission_order(chart)
    if chart.chart_type.is_xy:
        width = 3 if chart.chart_type is ChartType.BUBBLE else 2
        for k, s in enumerate(ordered):
            base = k * width
            layouts.append(SeriesLayout(
                s, k,
                y_col=get_column_letter(base + 2),
                x_col=get_column_letter(base + 1),
                size_col=get_column_letter(base + 3) if width == 3 else None,
            ))
    else:
        for k, s in enumerate(ordered):
            layouts.append(SeriesLayout(s, k, y_col=get_column_letter(k + 2)))
    return layouts


def _ref(col: str, first: int, last: int) -> str:
    return f"{SHEET}!${col}${first}:${col}${last}"


def format_number(value: float) -> str:
    """Numeric cache text: integers without a decimal point, floats by repr."""
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


# ---------------------------------------------------------------------------
# Caches and references
# ---------------------------------------------------------------------------

def _str_ref(formula: str, values: list[str]) -> str:
    points = "".join(f'<c:pt idx="{i}"><c:v>{escape(v)}</c:v></c:pt>'
                     for i, v in enumerate(values))
    return (f"<c:strRef><c:f>{formula}</c:f><c:strCache>"
            f'<c:ptCount val="{len(values)}"/>{points}</c:strCache></c:strRef>')


def _num_ref(formula: str, values: list[float]) -> str:
    points = "".join(f'<c:pt idx="{i}"><c:v>{format_number(v)}</c:v></c:pt>'
                     for i, v in enumerate(values))
    return (f"<c:numRef><c:f>{formula}</c:f><c:numCache>"
            f"<c:formatCode>General</c:formatCode>"
            f'<c:ptCount val="{len(values)}"/>{points}</c:numCache></c:numRef>')


def _series_head(layout: SeriesLayout) -> str:
    name_ref = f"{SHEET}!${layout.y_col}$1"
    return (f'<c:idx val="{layout.index}"/><c:order val="{layout.index}"/>'
            f"<c:tx>{_str_ref(name_ref, [layout.series.name])}</c:tx>")


def _categories(chart: Chart) -> str:
    formula = _ref("A", 2, len(chart.categories) + 1)
    return f"<c:cat>{_str_ref(formula, chart.categories)}</c:cat>"


def _values(layout: SeriesLayout, tag: str = "c:val") -> str:
    formula = _ref(layout.y_col, 2, layout.last_row)
    return f"<{tag}>{_num_ref(formula, layout.series.values)}</{tag}>"


def _fill_sp_pr(series: ChartSeries) -> str:
    if series.color is None:
        return ""
    return f"<c:spPr>{solid_fill(series.color)}</c:spPr>"


def _line_sp_pr(series: ChartSeries, hidden: bool = False) -> str:
    if hidden:
        return '<c:spPr><a:ln w="19050"><a:noFill/></a:ln></c:spPr>'
    if series.color is None:
        return ""
    return (f'<c:spPr><a:ln w="28575" cap="rnd">{solid_fill(series.color)}'
            "<a:round/></a:ln></c:spPr>")


def _data_labels(chart: Chart) -> str:
    if not chart.data_labels:
        return ""
    percent = "1" if chart.chart_type.is_pie else "0"
    return (
        '<c:dLbls><c:showLegendKey val="0"/><c:showVal val="1"/>'
        '<c:showCatName val="0"/><c:showSerName val="0"/>'
        f'<c:showPercent val="{percent}"/><c:showBubbleSize val="0"/></c:dLbls>'
    )


def _ax_ids() -> str:
    return f'<c:axId val="{CAT_AX_ID}"/><c:axId val="{VAL_AX_ID}"/>'


# ---------------------------------------------------------------------------
# Series per chart family
# ---------------------------------------------------------------------------

def _bar_series(chart: Chart, layout: SeriesLayout) -> str:
    return (f"<c:ser>{_series_head(layout)}{_fill_sp_pr(layout.series)}"
            f'<c:invertIfNegative val="0"/>{_categories(chart)}{_values(layout)}</c:ser>')


def _line_series(chart: Chart, layout: SeriesLayout, markers: bool = False,
                 hidden_line: bool = False) -> str:
    marker = "" if markers else _NO_MARKER
    return (f"<c:ser>{_series_head(layout)}{_line_sp_pr(layout.series, hidden_line)}"
            f"{marker}{_categories(chart)}{_values(layout)}"
            '<c:smooth val="0"/></c:ser>')


def _area_series(chart: Chart, layout: SeriesLayout) -> str:
    return (f"<c:ser>{_series_head(layout)}{_fill_sp_pr(layout.series)}"
            f"{_categories(chart)}{_values(layout)}</c:ser>")


def _pie_series(chart: Chart, layout: SeriesLayout) -> str:
    return (f"<c:ser>{_series_head(layout)}{_fill_sp_pr(layout.series)}"
            f"{_categories(chart)}{_values(layout)}</c:ser>")


def _radar_series(chart: Chart, layout: SeriesLayout) -> str:
    filled = chart.chart_type is ChartType.RADAR_FILLED
    sp_pr = _fill_sp_pr(layout.series) if filled else _line_sp_pr(layout.series)
    return (f"<c:ser>{_series_head(layout)}{sp_pr}"
            f"{_NO_MARKER if filled else ''}{_categories(chart)}{_values(layout)}</c:ser>")


def _xy_values(layout: SeriesLayout) -> str:
    x_formula = _ref(layout.x_col, 2, layout.last_row)
    return (f"<c:xVal>{_num_ref(x_formula, layout.series.x_values)}</c:xVal>"
            f"{_values(layout, 'c:yVal')}")


def _scatter_series(chart: Chart, layout: SeriesLayout) -> str:
    markers_only = chart.chart_type is ChartType.SCATTER
    smooth = "1" if chart.chart_type is ChartType.SCATTER_SMOOTH else "0"
    marker = ""
    if markers_only:
        fill = solid_fill(layout.series.color) if layout.series.color else ""
        marker = ('<c:marker><c:symbol val="circle"/><c:size val="5"/>'
                  + (f"<c:spPr>{fill}</c:spPr>" if fill else "") + "</c:marker>")
    sp_pr = _line_sp_pr(layout.series, hidden=markers_only)
    return (f"<c:ser>{_series_head(layout)}{sp_pr}{marker}{_xy_values(layout)}"
            f'<c:smooth val="{smooth}"/></c:ser>')


def _bubble_series(chart: Chart, layout: SeriesLayout) -> str:
    size_formula = _ref(layout.size_col, 2, layout.last_row)
    return (f"<c:ser>{_series_head(layout)}{_fill_sp_pr(layout.series)}"
            f'<c:invertIfNegative val="0"/>{_xy_values(layout)}'
            f"<c:bubbleSize>{_num_ref(size_formula, layout.series.sizes)}</c:bubbleSize>"
            '<c:bubble3D val="0"/></c:ser>')


# ---------------------------------------------------------------------------
# Chart groups
# ---------------------------------------------------------------------------

def _bar_group(chart: Chart, layouts: list[SeriesLayout]) -> str:
    direction, grouping = _BAR_LAYOUT[chart.chart_type]
    series = "".join(_bar_series(chart, lay) for lay in layouts)
    overlap = '<c:overlap val="100"/>' if grouping != "clustered" else ""
    return (f'<c:barChart><c:barDir val="{direction}"/><c:grouping val="{grouping}"/>'
            f'<c:varyColors val="0"/>{series}{_data_labels(chart)}'
            f'<c:gapWidth val="150"/>{overlap}{_ax_ids()}</c:barChart>')


def _line_group(chart: Chart, layouts: list[SeriesLayout], grouping: str,
                markers: bool) -> str:
    series = "".join(_line_series(chart, lay, markers) for lay in layouts)
    return (f'<c:lineChart><c:grouping val="{grouping}"/><c:varyColors val="0"/>'
            f'{series}{_data_labels(chart)}<c:marker val="1"/>{_ax_ids()}</c:lineChart>')


def _plot_groups(chart: Chart, layouts: list[SeriesLayout]) -> str:
    ct = chart.chart_type
    labels = _data_labels(chart)
    if ct in _BAR_LAYOUT and ct is not ChartType.COMBO:
        return _bar_group(chart, layouts)
    if ct in _LINE_GROUPING:
        return _line_group(chart, layouts, _LINE_GROUPING[ct], ct is ChartType.LINE_MARKERS)
    if ct in _AREA_GROUPING:
        series = "".join(_area_series(chart, lay) for lay in layouts)
        return (f'<c:areaChart><c:grouping val="{_AREA_GROUPING[ct]}"/>'
                f'<c:varyColors val="0"/>{series}{labels}{_ax_ids()}</c:areaChart>')
    if ct is ChartType.PIE:
        series = "".join(_pie_series(chart, lay) for lay in layouts)
        return (f'<c:pieChart><c:varyColors val="1"/>{series}{labels}'
                '<c:firstSliceAng val="0"/></c:pieChart>')
    if ct is ChartType.DOUGHNUT:
        series = "".join(_pie_series(chart, lay) for lay in layouts)
        return (f'<c:doughnutChart><c:varyColors val="1"/>{series}{labels}'
                '<c:firstSliceAng val="0"/><c:holeSize val="50"/></c:doughnutChart>')
    if ct is ChartType.BUBBLE:
        series = "".join(_bubble_series(chart, lay) for lay in layouts)
        return (f'<c:bubbleChart><c:varyColors val="0"/>{series}{labels}'
                '<c:bubbleScale val="100"/><c:showNegBubbles val="0"/>'
                f"{_ax_ids()}</c:bubbleChart>")
    if ct in _SCATTER_STYLE:
        series = "".join(_scatter_series(chart, lay) for lay in layouts)
        return (f'<c:scatterChart><c:scatterStyle val="{_SCATTER_STYLE[ct]}"/>'
                f'<c:varyColors val="0"/>{series}{labels}{_ax_ids()}</c:scatterChart>')
    if ct in _RADAR_STYLE:
        series = "".join(_radar_series(chart, lay) for lay in layouts)
        return (f'<c:radarChart><c:radarStyle val="{_RADAR_STYLE[ct]}"/>'
                f'<c:varyColors val="0"/>{series}{labels}{_ax_ids()}</c:radarChart>')
    if ct.is_stock:
        series = "".join(_line_series(chart, lay, hidden_line=True) for lay in layouts)
        up_down = ""
        if ct is ChartType.STOCK_OHLC:
            up_down = ('<c:upDownBars><c:gapWidth val="150"/>'
                       "<c:upBars/><c:downBars/></c:upDownBars>")
        return (f"<c:stockChart>{series}{labels}<c:hiLowLines/>{up_down}"
                f"{_ax_ids()}</c:stockChart>")
    if ct is ChartType.COMBO:
        bars = [lay for lay in layouts if not lay.series.line]
        lines = [lay for lay in layouts if lay.series.line]
        return _bar_group(chart, bars) + _line_group(chart, lines, "standard", True)
    raise InternalError(f"Unhandled chart type {ct}")


# ---------------------------------------------------------------------------
# Axes, title, legend
# ---------------------------------------------------------------------------

def _rich_text(text: str, size: int, bold: bool = False) -> str:
    b = ' b="1"' if bold else ' b="0"'
    return (f"<c:tx><c:rich><a:bodyPr/><a:lstStyle/><a:p><a:pPr><a:defRPr/></a:pPr>"
            f'<a:r><a:rPr lang="en-US" sz="{size}"{b}/><a:t>{escape(text)}</a:t></a:r>'
            "</a:p></c:rich></c:tx>")


def _title(text: str, size: int = 1400) -> str:
    return f'<c:title>{_rich_text(text, size)}<c:overlay val="0"/></c:title>'


def _axis_common(ax_id: int, cross_id: int, position: str, title: str | None,
                 gridlines: bool, number_format: str = "General") -> str:
    return (
        f'<c:axId val="{ax_id}"/><c:scaling><c:orientation val="minMax"/></c:scaling>'
        f'<c:delete val="0"/><c:axPos val="{position}"/>'
        + ("<c:majorGridlines/>" if gridlines else "")
        + (_title(title, 1000) if title else "")
        + f'<c:numFmt formatCode="{number_format}" sourceLinked="1"/>'
        '<c:majorTickMark val="out"/><c:minorTickMark val="none"/>'
        '<c:tickLblPos val="nextTo"/>'
        f'<c:crossAx val="{cross_id}"/><c:crosses val="autoZero"/>'
    )


def _axes(chart: Chart) -> str:
    ct = chart.chart_type
    if ct.is_pie:
        return ""
    horizontal = ct is ChartType.BAR_HORIZONTAL
    cat_pos, val_pos = ("l", "b") if horizontal else ("b", "l")
    between = "between" if ct in _BAR_LAYOUT or ct.is_stock else "midCat"
    if ct.is_xy:
        x_axis = (f"<c:valAx>{_axis_common(CAT_AX_ID, VAL_AX_ID, 'b', chart.x_axis_title, False)}"
                  '<c:crossBetween val="midCat"/></c:valAx>')
    else:
        x_axis = (f"<c:catAx>{_axis_common(CAT_AX_ID, VAL_AX_ID, cat_pos, chart.x_axis_title, False)}"
                  '<c:auto val="1"/><c:lblAlgn val="ctr"/><c:lblOffset val="100"/>'
                  '<c:noMultiLvlLbl val="0"/></c:catAx>')
    y_format = "0%" if ct in (ChartType.BAR_STACKED_100, ChartType.AREA_STACKED_100) \
        else "General"
    y_axis = (f"<c:valAx>{_axis_common(VAL_AX_ID, CAT_AX_ID, val_pos, chart.y_axis_title, True, y_format)}"
              f'<c:crossBetween val="{between}"/></c:valAx>')
    return x_axis + y_axis


def _legend(chart: Chart) -> str:
    if chart.legend is None:
        return ""
    return (f'<c:legend><c:legendPos val="{chart.legend.value}"/>'
            '<c:overlay val="0"/></c:legend>')


def chart_xml(chart: Chart, workbook_rid: str = "rId1") -> str:
    """``ppt/charts/chartN.xml``."""
    chart.validate()
    layouts = series_layout(chart)
    title = (_title(chart.title) + '<c:autoTitleDeleted val="0"/>') if chart.title \
        else '<c:autoTitleDeleted val="1"/>'
    return (
        f"{XML_DECLARATION}\n"
        f'<c:chartSpace xmlns:c="{NS_C}" xmlns:a="{NS_A}" xmlns:r="{NS_R}">'
        '<c:date1904 val="0"/><c:lang val="en-US"/><c:roundedCorners val="0"/>'
        f"<c:chart>{title}"
        f"<c:plotArea><c:layout/>{_plot_groups(chart, layouts)}{_axes(chart)}</c:plotArea>"
        f"{_legend(chart)}"
        '<c:plotVisOnly val="1"/><c:dispBlanksAs val="gap"/></c:chart>'
        f'<c:externalData r:id="{workbook_rid}"><c:autoUpdate val="0"/></c:externalData>'
        "</c:chartSpace>"
    )


# ---------------------------------------------------------------------------
# Style and color parts
# ---------------------------------------------------------------------------

_STYLE_ENTRIES = [
    "axisTitle", "categoryAxis", "chartArea", "dataLabel", "dataPoint",
    "dataPoint3D", "dataPointLine", "dataPointMarker", "dataPointWireframe",
    "dataTable", "downBar", "dropLine", "errorBar", "floor", "gridlineMajor",
    "hiLoLine", "leaderLine", "legend", "plotArea", "plotArea3D",
    "seriesAxis", "seriesLine", "title", "trendline", "trendlineLabel",
    "upBar", "valueAxis", "wall",
]

_STYLE_SP_PR = {
    "chartArea": ('<cs:spPr><a:solidFill><a:schemeClr val="bg1"/></a:solidFill>'
                  "<a:ln><a:noFill/></a:ln></cs:spPr>"),
    "dataPoint": '<cs:spPr><a:solidFill><a:schemeClr val="phClr"/></a:solidFill></cs:spPr>',
    "dataPointLine": ('<cs:spPr><a:ln w="28575" cap="rnd"><a:solidFill>'
                      '<a:schemeClr val="phClr"/></a:solidFill><a:round/></a:ln></cs:spPr>'),
    "gridlineMajor": ('<cs:spPr><a:ln w="9525"><a:solidFill><a:schemeClr val="tx1">'
                      '<a:lumMod val="15000"/><a:lumOff val="85000"/></a:schemeClr>'
                      "</a:solidFill></a:ln></cs:spPr>"),
}

_STYLE_DEF_RPR = {
    "axisTitle": '<cs:defRPr sz="1000"/>',
    "categoryAxis": '<cs:defRPr sz="900"/>',
    "dataLabel": '<cs:defRPr sz="900"/>',
    "legend": '<cs:defRPr sz="900"/>',
    "title": '<cs:defRPr sz="1400"/>',
    "valueAxis": '<cs:defRPr sz="900"/>',
}


def chart_style_xml() -> str:
    """``ppt/charts/styleN.xml`` - minimal chart style defaults."""
    entries = []
    for name in _STYLE_ENTRIES:
        entries.append(
            f'<cs:{name}><cs:lnRef idx="0"/><cs:fillRef idx="0"/>'
            '<cs:effectRef idx="0"/><cs:fontRef idx="minor">'
            '<a:schemeClr val="tx1"/></cs:fontRef>'
            f"{_STYLE_SP_PR.get(name, '')}{_STYLE_DEF_RPR.get(name, '')}</cs:{name}>"
        )
    return (f"{XML_DECLARATION}\n"
            f'<cs:chartStyle xmlns:cs="{NS_CS}" xmlns:a="{NS_A}" id="201">'
            + "".join(entries) + "</cs:chartStyle>")


def chart_colors_xml() -> str:
    """``ppt/charts/colorsN.xml`` - cycle through the six theme accents."""
    accents = "".join(f'<a:schemeClr val="accent{i}"/>' for i in range(1, 7))
    variations = ("<cs:variation/>"
                  '<cs:variation><a:lumMod val="60000"/></cs:variation>'
                  '<cs:variation><a:lumMod val="80000"/><a:lumOff val="20000"/></cs:variation>')
    return (f"{XML_DECLARATION}\n"
            f'<cs:colorStyle xmlns:cs="{NS_CS}" xmlns:a="{NS_A}" meth="cycle" id="10">'
            f"{accents}{variations}</cs:colorStyle>")


# ---------------------------------------------------------------------------
# Slide graphic frame
# ---------------------------------------------------------------------------

def chart_frame_xml(chart: Chart, ctx: SlideContext) -> str:
    """Graphic frame on the slide; registers the chart part and its rel."""
    shape_id = ctx.next_shape_id(chart.name)
    name = chart.name or f"Chart {shape_id}"
    rid = ctx.relate(RT_CHART, ctx.assets.add_chart(chart))
    box = resolve_box(chart.x, chart.y, chart.width, chart.height, ctx.slide_size)
    return "".join([
        "<p:graphicFrame>",
        "<p:nvGraphicFramePr>",
        non_visual_props(shape_id, name),
        "<p:cNvGraphicFramePr/><p:nvPr/></p:nvGraphicFramePr>",
        xfrm(box, tag="p:xfrm"),
        f'<a:graphic><a:graphicData uri="{CHART_URI}">',
        f'<c:chart xmlns:c="{NS_C}" r:id="{rid}"/>',
        "</a:graphicData></a:graphic>",
        "</p:graphicFrame>",
    ])
