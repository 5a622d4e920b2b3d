"""Export helpers: SVG and interactive HTML from ChartRenderer, PNG and plotly HTML."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import matplotlib.figure

    from cycling_scatter.visualization.chart import ChartRenderer


def _prepare(path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def export_svg(renderer: ChartRenderer, path: str | Path) -> Path:
    """Write the renderer's surface as a standalone .svg file; return resolved path."""
    path = _prepare(path)
    path.write_text(renderer.to_svg(), encoding="utf-8")
    return path.resolve()


def export_html(renderer: ChartRenderer, path: str | Path) -> Path:
    """
    Write the chart as a standalone HTML page with hover tooltip, guide lines
    and click-through to each rider's profile.

    Returns
    -------
    Path
        Resolved output path.
    """
    path = _prepare(path)
    path.write_text(renderer.to_html(), encoding="utf-8")
    return path.resolve()


def export_figure_png(
    fig: matplotlib.figure.Figure,
    path: str | Path,
    *,
    dpi: int = 100,
    bbox_inches: str = "tight",
) -> Path:
    """
    Save a matplotlib Figure as PNG.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
        Figure to save (e.g. ax.get_figure()).
    path : str or Path
        Output file path (.png).
    dpi : int
        Resolution (default 100: 8 x 5 in figure -> 800 x 500 px).
    bbox_inches : str
        Passed to savefig (default "tight").

    Returns
    -------
    Path
        Resolved output path.
    """
    path = _prepare(path)
    fig.savefig(path, dpi=dpi, bbox_inches=bbox_inches)
    return path.resolve()


def export_plotly_html(
    fig,  # plotly.graph_objects.Figure
    path: str | Path,
    *,
    config: dict | None = None,
) -> Path:
    """Save a plotly Figure as standalone interactive HTML; return resolved path."""
    path = _prepare(path)
    fig.write_html(str(path), config=config or {})
    return path.resolve()
