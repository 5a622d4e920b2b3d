"""Visualization: scales, SVG scatter chart with pointer interaction, exports."""

from cycling_scatter.visualization.chart import (
    ChartRenderer,
    PointerEvent,
    format_tooltip_html,
    mark_color,
)
from cycling_scatter.visualization.export_utils import (
    export_figure_png,
    export_html,
    export_plotly_html,
    export_svg,
)
from cycling_scatter.visualization.race_time_plots import (
    plot_race_times,
    plot_race_times_plotly,
)
from cycling_scatter.visualization.scales import (
    LinearScale,
    TimeScale,
    build_x_scale,
    build_y_scale,
    format_clock,
    format_year,
)

__all__ = [
    "ChartRenderer",
    "PointerEvent",
    "format_tooltip_html",
    "mark_color",
    "LinearScale",
    "TimeScale",
    "build_x_scale",
    "build_y_scale",
    "format_clock",
    "format_year",
    "plot_race_times",
    "plot_race_times_plotly",
    "export_svg",
    "export_html",
    "export_figure_png",
    "export_plotly_html",
]
