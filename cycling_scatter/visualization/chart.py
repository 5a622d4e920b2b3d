"""Scatter chart of climb times: SVG surface, tooltip and pointer interaction.

ChartRenderer owns one SVG drawing surface and one tooltip element. render()
draws one circular mark per record plus axes, an axis label and a legend; the
pointer handlers (enter / leave / click) take the hovered record and an explicit
PointerEvent and mutate only this renderer's surface and tooltip.

Guide lines are swept globally on pointer-leave: every `line.line` on the
surface is removed, not just the hovered mark's. This assumes one pointer.
"""

from __future__ import annotations

import html
import json
import logging
import webbrowser
from typing import Callable, NamedTuple, Sequence
from xml.etree.ElementTree import Element, SubElement, tostring

from cycling_scatter.data_pipeline.load_records import RaceRecord, fetch_records
from cycling_scatter.utils.config import (
    DATA_URL,
    GUIDE_LINE_GAP,
    HEIGHT,
    LEGEND_DATA,
    LEGEND_LINE_HEIGHT,
    LEGEND_SWATCH_SIDE,
    LEGEND_TEXT_MARGIN,
    LEGEND_X,
    LEGEND_Y,
    MARK_RADIUS,
    PADDING,
    SUBTITLE,
    TICK_SIZE,
    TITLE,
    TOOLTIP_FADE_IN_MS,
    TOOLTIP_FADE_OUT_MS,
    TOOLTIP_OFFSET_X,
    TOOLTIP_OFFSET_Y,
    TOOLTIP_OPACITY,
    WIDTH,
    X_TICK_PADDING,
    Y_AXIS_LABEL,
    Y_TICK_PADDING,
)
from cycling_scatter.visualization.scales import (
    LinearScale,
    TimeScale,
    build_x_scale,
    build_y_scale,
    format_clock,
    format_year,
)

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
NO_ALLEGATIONS = "No allegations"


class PointerEvent(NamedTuple):
    """Pointer position in page coordinates."""

    page_x: float
    page_y: float


def mark_color(record: RaceRecord, legend_data: dict | None = None) -> str:
    """Clean colour iff the record has no doping note, allegation colour otherwise."""
    legend = legend_data if legend_data is not None else LEGEND_DATA
    if record.doping_note == "":
        return legend["clean"]["color"]
    return legend["dope"]["color"]


def _num(value: float) -> str:
    """Compact attribute number: at most 3 decimals, no trailing zeros."""
    text = f"{float(value):.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _parse_style(el: Element) -> dict[str, str]:
    style = {}
    for part in (el.get("style") or "").split(";"):
        if ":" in part:
            key, val = part.split(":", 1)
            style[key.strip()] = val.strip()
    return style


def _set_style(el: Element, **styles: str) -> None:
    style = _parse_style(el)
    style.update({k.replace("_", "-"): v for k, v in styles.items()})
    el.set("style", "; ".join(f"{k}: {v}" for k, v in style.items()))


def _tooltip_nodes(record: RaceRecord) -> list[Element]:
    """Tooltip body: name, year | time, doping note (or 'No allegations')."""
    name = Element("span", {"class": "name"})
    name.text = record.name
    name.tail = f" {record.year} | {record.time}min"
    label = Element("strong")
    label.text = "Doping:"
    label.tail = f" {record.doping_note or NO_ALLEGATIONS}"
    return [name, Element("br"), label, Element("br")]


def format_tooltip_html(record: RaceRecord) -> str:
    """Tooltip markup for one record; text content is HTML-escaped."""
    return "".join(
        tostring(node, encoding="unicode", method="html")
        for node in _tooltip_nodes(record)
    )


class ChartRenderer:
    """
    Scatter chart renderer: one SVG surface, one tooltip, pointer handlers.

    Parameters
    ----------
    width, height : int
        Surface size in pixels.
    padding : int
        Uniform margin on all sides, used as axis padding.
    title, subtitle : str
        Static text anchored top-right.
    navigate : callable, optional
        Called with a record's profile URL on click. Default opens a new
        browser tab.
    """

    def __init__(
        self,
        *,
        width: int = WIDTH,
        height: int = HEIGHT,
        padding: int = PADDING,
        title: str = TITLE,
        subtitle: str = SUBTITLE,
        mark_radius: float = MARK_RADIUS,
        legend_data: dict | None = None,
        navigate: Callable[[str], object] | None = None,
    ):
        self.width = width
        self.height = height
        self.padding = padding
        self.title = title
        self.subtitle = subtitle
        self.mark_radius = mark_radius
        self.legend_data = legend_data if legend_data is not None else LEGEND_DATA
        self.navigate = navigate if navigate is not None else webbrowser.open_new_tab
        self.records: list[RaceRecord] = []
        self.x_scale: LinearScale | None = None
        self.y_scale: TimeScale | None = None
        self.initialize()

    def initialize(self) -> None:
        """Create the empty surface (title, subtitle) and a hidden tooltip."""
        self.surface = Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": str(self.width),
                "height": str(self.height),
            },
        )
        for el_id, text, dy in (("title", self.title, 14), ("subtitle", self.subtitle, 40)):
            node = SubElement(
                self.surface,
                "text",
                {
                    "id": el_id,
                    "x": _num(self.width - 35),
                    "y": _num(self.padding / 2 + dy),
                    "text-anchor": "end",
                },
            )
            node.text = text
        self.tooltip = Element("div", {"id": "tooltip"})
        _set_style(self.tooltip, opacity="0")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def load_and_render(self, source_url: str = DATA_URL, **fetch_kwargs) -> None:
        """Fetch records from source_url and render them. Errors propagate."""
        records = fetch_records(source_url, **fetch_kwargs)
        self.render(records)

    def render(self, records: Sequence[RaceRecord]) -> None:
        """Draw marks, axes, axis label and legend for records."""
        x_scale = build_x_scale(records, self.padding, self.width)
        y_scale = build_y_scale(records, self.padding, self.height)
        self._clear()
        self.records = list(records)
        self.x_scale = x_scale
        self.y_scale = y_scale
        self._draw_marks()
        self._draw_x_axis()
        self._draw_y_axis()
        label = SubElement(
            self.surface,
            "text",
            {
                "x": _num(self.padding - 45),
                "y": _num(self.padding - 25),
                "class": "axis-label",
                "style": "text-anchor: start",
            },
        )
        label.text = Y_AXIS_LABEL
        self._draw_legend()
        logger.debug(
            "Rendered %d marks; x domain %s, y domain %s",
            len(self.records),
            x_scale.domain,
            y_scale.domain,
        )

    def _clear(self) -> None:
        for child in list(self.surface):
            if child.get("id") not in ("title", "subtitle"):
                self.surface.remove(child)
        self.tooltip.clear()
        self.tooltip.set("id", "tooltip")
        _set_style(self.tooltip, opacity="0")

    def _draw_marks(self) -> None:
        for i, record in enumerate(self.records):
            SubElement(
                self.surface,
                "circle",
                {
                    "class": "dot",
                    "cx": _num(self.x_scale(record.year)),
                    "cy": _num(self.y_scale(record.timestamp)),
                    "r": _num(self.mark_radius),
                    "data-xvalue": str(record.year),
                    "data-yvalue": record.timestamp.isoformat(),
                    "data-index": str(i),
                    "style": (
                        f"fill: {mark_color(record, self.legend_data)}; "
                        "stroke: white; stroke-width: 1; opacity: 1"
                    ),
                },
            )

    def _axis_group(self, el_id: str, transform: str, anchor: str) -> Element:
        return SubElement(
            self.surface,
            "g",
            {
                "id": el_id,
                "transform": transform,
                "fill": "none",
                "font-size": "10",
                "font-family": "sans-serif",
                "text-anchor": anchor,
            },
        )

    def _draw_x_axis(self) -> None:
        r0, r1 = self.x_scale.range
        axis = self._axis_group(
            "x-axis", f"translate(0, {_num(self.height - self.padding)})", "middle"
        )
        SubElement(
            axis,
            "path",
            {
                "class": "domain",
                "stroke": "currentColor",
                "d": f"M{_num(r0)},{TICK_SIZE}V0H{_num(r1)}V{TICK_SIZE}",
            },
        )
        for value in self.x_scale.ticks():
            tick = SubElement(
                axis,
                "g",
                {"class": "tick", "transform": f"translate({_num(self.x_scale(value))},0)"},
            )
            SubElement(tick, "line", {"stroke": "currentColor", "y2": str(TICK_SIZE)})
            text = SubElement(
                tick,
                "text",
                {"fill": "currentColor", "y": str(TICK_SIZE + X_TICK_PADDING), "dy": "0.71em"},
            )
            text.text = format_year(value)

    def _draw_y_axis(self) -> None:
        r0, r1 = self.y_scale.range
        axis = self._axis_group("y-axis", f"translate({_num(self.padding)}, 0)", "end")
        SubElement(
            axis,
            "path",
            {
                "class": "domain",
                "stroke": "currentColor",
                "d": f"M-{TICK_SIZE},{_num(r0)}H0V{_num(r1)}H-{TICK_SIZE}",
            },
        )
        for ts in self.y_scale.ticks():
            tick = SubElement(
                axis,
                "g",
                {"class": "tick", "transform": f"translate(0,{_num(self.y_scale(ts))})"},
            )
            SubElement(tick, "line", {"stroke": "currentColor", "x2": f"-{TICK_SIZE}"})
            text = SubElement(
                tick,
                "text",
                {
                    "fill": "currentColor",
                    "x": f"-{TICK_SIZE + Y_TICK_PADDING}",
                    "dy": "0.32em",
                },
            )
            text.text = format_clock(ts)

    def _draw_legend(self) -> None:
        legend = SubElement(self.surface, "g", {"id": "legend"})
        side = LEGEND_SWATCH_SIDE
        for i, entry in enumerate(self.legend_data.values()):
            y = LEGEND_Y + (side + LEGEND_LINE_HEIGHT) * i
            SubElement(
                legend,
                "rect",
                {
                    "x": _num(LEGEND_X),
                    "y": _num(y),
                    "width": _num(side),
                    "height": _num(side),
                    "style": f"fill: {entry['color']}",
                },
            )
            text = SubElement(
                legend,
                "text",
                {
                    "class": "legend-text",
                    "x": _num(LEGEND_X + side + LEGEND_TEXT_MARGIN),
                    "y": _num(y + 14),
                },
            )
            text.text = entry["description"]

    # ------------------------------------------------------------------
    # Pointer interaction
    # ------------------------------------------------------------------

    def _position(self, record: RaceRecord) -> tuple[float, float]:
        if self.x_scale is None or self.y_scale is None:
            raise RuntimeError("Chart has not been rendered; call render() first")
        return self.x_scale(record.year), self.y_scale(record.timestamp)

    def on_pointer_enter(self, record: RaceRecord, event: PointerEvent) -> None:
        """Fade in the tooltip near the pointer and draw guide lines to both axes."""
        cx, cy = self._position(record)
        self.tooltip.clear()
        self.tooltip.set("id", "tooltip")
        for node in _tooltip_nodes(record):
            self.tooltip.append(node)
        self.tooltip.set("data-year", str(record.year))
        _set_style(
            self.tooltip,
            opacity=str(TOOLTIP_OPACITY),
            transition=f"opacity {TOOLTIP_FADE_IN_MS}ms",
            left=f"{_num(event.page_x + TOOLTIP_OFFSET_X)}px",
            top=f"{_num(event.page_y + TOOLTIP_OFFSET_Y)}px",
        )
        guide_style = {"class": "line", "stroke-width": "1", "stroke": "white"}
        SubElement(
            self.surface,
            "line",
            {
                **guide_style,
                "x1": _num(cx - GUIDE_LINE_GAP),
                "y1": _num(cy),
                "x2": _num(self.padding + 1),
                "y2": _num(cy),
            },
        )
        SubElement(
            self.surface,
            "line",
            {
                **guide_style,
                "x1": _num(cx),
                "y1": _num(cy + GUIDE_LINE_GAP),
                "x2": _num(cx),
                "y2": _num(self.height - self.padding),
            },
        )

    def on_pointer_leave(self, record: RaceRecord, event: PointerEvent) -> None:
        """Fade out the tooltip and remove every guide line on the surface."""
        _set_style(
            self.tooltip,
            opacity="0",
            transition=f"opacity {TOOLTIP_FADE_OUT_MS}ms",
        )
        for line in self.guide_lines():
            self.surface.remove(line)

    def on_click(self, record: RaceRecord, event: PointerEvent) -> None:
        """Open the record's profile URL, unmodified."""
        logger.debug("Opening %s", record.profile_url)
        self.navigate(record.profile_url)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def marks(self) -> list[Element]:
        return [el for el in self.surface if el.tag == "circle" and el.get("class") == "dot"]

    def guide_lines(self) -> list[Element]:
        return [el for el in self.surface if el.tag == "line" and el.get("class") == "line"]

    def find(self, el_id: str) -> Element | None:
        for el in self.surface.iter():
            if el.get("id") == el_id:
                return el
        return None

    @property
    def tooltip_opacity(self) -> float:
        return float(_parse_style(self.tooltip).get("opacity", "0"))

    def tooltip_text(self) -> str:
        return "".join(self.tooltip.itertext())

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_svg(self) -> str:
        """Serialized drawing surface (standalone SVG document)."""
        return tostring(self.surface, encoding="unicode")

    def to_html(self) -> str:
        """Standalone HTML page: surface, tooltip and pointer interaction script."""
        entries = [
            {"html": format_tooltip_html(r), "year": r.year, "url": r.profile_url}
            for r in self.records
        ]
        blob = json.dumps(entries, separators=(",", ":")).replace("</", "<\\/")
        tooltip = tostring(self.tooltip, encoding="unicode", method="html")
        return _HTML_TEMPLATE.format(
            title=html.escape(self.title),
            svg=self.to_svg(),
            tooltip=tooltip,
            data=blob,
            script=_build_interaction_js(self),
        )


def _build_interaction_js(renderer: ChartRenderer) -> str:
    """Browser-side pointer handlers mirroring on_pointer_enter/leave and on_click."""
    config_js = json.dumps(
        {
            "height": renderer.height,
            "padding": renderer.padding,
            "gap": GUIDE_LINE_GAP,
            "offsetX": TOOLTIP_OFFSET_X,
            "offsetY": TOOLTIP_OFFSET_Y,
            "opacity": TOOLTIP_OPACITY,
            "fadeIn": TOOLTIP_FADE_IN_MS,
            "fadeOut": TOOLTIP_FADE_OUT_MS,
        }
    )
    return (
        "(function () {\n"
        "  'use strict';\n"
        f"  var CFG = {config_js};\n"
        "  var RECORDS = JSON.parse(document.getElementById('race-data').textContent);\n"
        "  var svg = document.querySelector('svg');\n"
        "  var tooltip = document.getElementById('tooltip');\n"
        "  var NS = 'http://www.w3.org/2000/svg';\n"
        "  function guide(x1, y1, x2, y2) {\n"
        "    var line = document.createElementNS(NS, 'line');\n"
        "    line.setAttribute('class', 'line');\n"
        "    line.setAttribute('x1', x1); line.setAttribute('y1', y1);\n"
        "    line.setAttribute('x2', x2); line.setAttribute('y2', y2);\n"
        "    line.setAttribute('stroke-width', 1); line.setAttribute('stroke', 'white');\n"
        "    svg.appendChild(line);\n"
        "  }\n"
        "  svg.querySelectorAll('.dot').forEach(function (dot) {\n"
        "    var d = RECORDS[+dot.getAttribute('data-index')];\n"
        "    var cx = +dot.getAttribute('cx');\n"
        "    var cy = +dot.getAttribute('cy');\n"
        "    dot.addEventListener('mouseover', function (event) {\n"
        "      tooltip.style.transition = 'opacity ' + CFG.fadeIn + 'ms';\n"
        "      tooltip.style.opacity = CFG.opacity;\n"
        "      tooltip.innerHTML = d.html;\n"
        "      tooltip.style.left = (event.pageX + CFG.offsetX) + 'px';\n"
        "      tooltip.style.top = (event.pageY + CFG.offsetY) + 'px';\n"
        "      tooltip.setAttribute('data-year', d.year);\n"
        "      guide(cx - CFG.gap, cy, CFG.padding + 1, cy);\n"
        "      guide(cx, cy + CFG.gap, cx, CFG.height - CFG.padding);\n"
        "    });\n"
        "    dot.addEventListener('mouseout', function () {\n"
        "      tooltip.style.transition = 'opacity ' + CFG.fadeOut + 'ms';\n"
        "      tooltip.style.opacity = 0;\n"
        "      svg.querySelectorAll('.line').forEach(function (l) { l.remove(); });\n"
        "    });\n"
        "    dot.addEventListener('click', function () { window.open(d.url); });\n"
        "  });\n"
        "})();"
    )


_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: sans-serif; background: #2b2b2b; color: #eee; }}
svg {{ display: block; margin: 40px auto; background: #333; }}
#title {{ font-size: 24px; fill: #eee; }}
#subtitle, .axis-label, .legend-text {{ font-size: 14px; fill: #eee; }}
.dot {{ cursor: pointer; }}
#tooltip {{ position: absolute; pointer-events: none; padding: 8px;
  background: rgba(0, 0, 0, 0.8); border-radius: 4px; font-size: 12px; }}
#tooltip .name {{ font-weight: bold; }}
</style>
</head>
<body>
{svg}
{tooltip}
<script type="application/json" id="race-data">{data}</script>
<script>
{script}
</script>
</body>
</html>
"""
