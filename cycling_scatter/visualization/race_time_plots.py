"""Race time plots: matplotlib and plotly renditions of the climb-time scatter.

Same data, colour rule and axis formats as ChartRenderer, for static PNG export
(matplotlib) and an interactive plotly page. All records are passed in; no
hardcoded rider or year assumptions.
"""

from __future__ import annotations

import html
from typing import Sequence

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import pandas as pd

from cycling_scatter.data_pipeline.load_records import RaceRecord, records_to_frame
from cycling_scatter.utils.config import LEGEND_DATA, SUBTITLE, TITLE, Y_AXIS_LABEL
from cycling_scatter.visualization.chart import NO_ALLEGATIONS

# Default figure size: 800 x 500 px at 100 dpi, same as the SVG surface
DEFAULT_FIGSIZE = (8, 5)


def _split_by_category(records: Sequence[RaceRecord]) -> dict[str, pd.DataFrame]:
    """Frames keyed by legend category ('dope', 'clean'); empty categories dropped."""
    df = records_to_frame(records)
    if df.empty:
        return {}
    clean = df["doping_note"] == ""
    parts = {"dope": df[~clean], "clean": df[clean]}
    return {key: part for key, part in parts.items() if not part.empty}


def plot_race_times(
    records: Sequence[RaceRecord],
    *,
    ax: plt.Axes | None = None,
    figsize: tuple[float, float] = DEFAULT_FIGSIZE,
    title: str | None = TITLE,
    xlabel: str = "Year",
    ylabel: str = Y_AXIS_LABEL,
    legend_data: dict | None = None,
) -> plt.Axes:
    """
    Scatter of climb time against year, coloured by doping allegation.

    Parameters
    ----------
    records : sequence of RaceRecord
        Loaded records (timestamps already derived).
    ax : matplotlib Axes, optional
        Axes to plot on; if None, a new figure.
    title : str, optional
        Plot title; the subtitle is appended on a second line.
    xlabel, ylabel : str
        Axis labels.
    legend_data : dict, optional
        Category -> {"color", "description"}. Default: config.LEGEND_DATA.

    Returns
    -------
    matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    legend = legend_data if legend_data is not None else LEGEND_DATA
    parts = _split_by_category(records)
    if not parts:
        return ax
    for key, part in parts.items():
        ax.scatter(
            part["year"].values,
            part["timestamp"].values,
            s=36,
            color=legend[key]["color"],
            edgecolors="white",
            linewidths=1,
            label=legend[key]["description"],
            zorder=3,
        )
    years = [r.year for r in records]
    ax.set_xlim(min(years) - 1, max(years) + 1)
    ax.xaxis.set_major_locator(mticker.MaxNLocator(integer=True))
    ax.xaxis.set_major_formatter(mticker.FormatStrFormatter("%d"))
    ax.yaxis.set_major_formatter(mdates.DateFormatter("%M:%S"))
    # Fastest times at the top
    ax.invert_yaxis()
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    if title:
        ax.set_title(f"{title}\n{SUBTITLE}")
    ax.legend(loc="upper right", fontsize=8)
    ax.grid(True, alpha=0.3)
    return ax


def _hover_text(record: RaceRecord) -> str:
    """Plotly hover markup; name and note are HTML-escaped."""
    note = html.escape(record.doping_note or NO_ALLEGATIONS)
    return f"<b>{html.escape(record.name)}</b> {record.year} | {record.time}min<br>Doping: {note}"


def plot_race_times_plotly(
    records: Sequence[RaceRecord],
    *,
    title: str | None = None,
    xlabel: str = "Year",
    ylabel: str = Y_AXIS_LABEL,
    legend_data: dict | None = None,
):
    """
    Build an interactive plotly figure: climb time vs year, one trace per category.
    Hover shows the tooltip text; each point's customdata is the profile URL.
    Use with export_plotly_html(fig, path).
    """
    try:
        import plotly.graph_objects as go
    except ImportError:
        raise ImportError("plotly is required for HTML export; pip install plotly") from None
    legend = legend_data if legend_data is not None else LEGEND_DATA
    fig = go.Figure()
    by_key = {"dope": [], "clean": []}
    for r in records:
        by_key["clean" if r.doping_note == "" else "dope"].append(r)
    for key, group in by_key.items():
        if not group:
            continue
        fig.add_trace(
            go.Scatter(
                x=[r.year for r in group],
                y=[r.timestamp.to_pydatetime() for r in group],
                mode="markers",
                name=legend[key]["description"],
                marker=dict(size=12, color=legend[key]["color"], line=dict(color="white", width=1)),
                text=[_hover_text(r) for r in group],
                customdata=[r.profile_url for r in group],
                hovertemplate="%{text}<extra></extra>",
            )
        )
    fig.update_layout(
        title=title or f"{TITLE}<br><sup>{SUBTITLE}</sup>",
        xaxis_title=xlabel,
        yaxis_title=ylabel,
        xaxis=dict(tickformat="d"),
        yaxis=dict(tickformat="%M:%S", autorange="reversed"),
        legend=dict(yanchor="top", y=0.99, xanchor="right", x=0.99),
        font=dict(size=12),
        margin=dict(l=70, r=70, t=70, b=70),
    )
    return fig
