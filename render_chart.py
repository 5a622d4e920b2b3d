"""CLI entry point: render the Alpe d'Huez doping scatter chart.

Example:
    python render_chart.py
    python render_chart.py --input data/raw/cyclist-data.json --formats svg html
    python render_chart.py --formats html png plotly --out-dir out/ --open
"""

from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

import requests

FORMATS = ("svg", "html", "png", "plotly")

OUTPUT_NAMES = {
    "svg": "race_times.svg",
    "html": "race_times.html",
    "png": "race_times.png",
    "plotly": "race_times_plotly.html",
}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    from cycling_scatter.utils.config import DATA_URL, FIGURES_DIR

    parser = argparse.ArgumentParser(
        description="Render the 35 fastest times up Alpe d'Huez, coloured by doping allegation.",
        epilog="Fetches the race records once, renders the chart and writes the requested formats.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--url", type=str, default=DATA_URL, help="JSON endpoint (default: freeCodeCamp cyclist data)"
    )
    source.add_argument(
        "--input", type=Path, default=None, help="Local JSON file instead of fetching --url"
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=FIGURES_DIR,
        help=f"Output directory (default: {FIGURES_DIR})",
    )
    parser.add_argument(
        "--formats",
        nargs="+",
        choices=FORMATS,
        default=["svg", "html"],
        help="Outputs to write (default: svg html)",
    )
    parser.add_argument(
        "--open", action="store_true", help="Open the HTML chart in a browser when done"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from cycling_scatter.data_pipeline import fetch_records, load_records_from_file
    from cycling_scatter.visualization import ChartRenderer

    # 1. Load records
    try:
        if args.input is not None:
            records = load_records_from_file(args.input)
        else:
            records = fetch_records(args.url)
    except requests.RequestException as e:
        print(f"Error fetching race data: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading race data: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not records:
        print("Error: No race records in the data source.", file=sys.stderr)
        return 1

    # 2. Render the SVG chart
    renderer = ChartRenderer()
    renderer.render(records)

    # 3. Export
    from cycling_scatter.visualization import (
        export_figure_png,
        export_html,
        export_plotly_html,
        export_svg,
    )

    written = {}
    out_dir = args.out_dir
    if "svg" in args.formats:
        written["svg"] = export_svg(renderer, out_dir / OUTPUT_NAMES["svg"])
    if "html" in args.formats:
        written["html"] = export_html(renderer, out_dir / OUTPUT_NAMES["html"])
    if "png" in args.formats:
        import matplotlib.pyplot as plt

        from cycling_scatter.visualization import plot_race_times

        ax = plot_race_times(records)
        fig = ax.get_figure()
        written["png"] = export_figure_png(fig, out_dir / OUTPUT_NAMES["png"])
        plt.close(fig)
    if "plotly" in args.formats:
        try:
            from cycling_scatter.visualization import plot_race_times_plotly

            fig = plot_race_times_plotly(records)
            written["plotly"] = export_plotly_html(fig, out_dir / OUTPUT_NAMES["plotly"])
        except ImportError as e:
            print(f"Warning: {e}", file=sys.stderr)

    clean = sum(1 for r in records if r.doping_note == "")
    print(f"Records: {len(records)}  |  With allegations: {len(records) - clean}  |  Clean: {clean}")
    for fmt, path in written.items():
        print(f"  {fmt}: {path}")

    if args.open and "html" in written:
        webbrowser.open_new_tab(written["html"].as_uri())
    return 0


if __name__ == "__main__":
    sys.exit(main())
