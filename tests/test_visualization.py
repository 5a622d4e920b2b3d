"""Tests for the matplotlib/plotly renditions and the export helpers."""

import matplotlib.pyplot as plt

from cycling_scatter.utils.config import LEGEND_DATA, TITLE
from cycling_scatter.visualization import (
    export_figure_png,
    export_html,
    export_plotly_html,
    export_svg,
    plot_race_times,
    plot_race_times_plotly,
)


def test_plot_race_times_returns_axes(sample_records):
    """plot_race_times draws one scatter collection per category."""
    ax = plot_race_times(sample_records)
    assert ax is not None
    assert TITLE in ax.get_title()
    assert len(ax.collections) == 2
    assert ax.get_xlim() == (1994, 2013)
    # Time axis inverted: fastest at the top
    bottom, top = ax.get_ylim()
    assert bottom > top
    plt.close(ax.get_figure())


def test_plot_race_times_single_category(sample_records):
    clean_only = [r for r in sample_records if r.doping_note == ""]
    ax = plot_race_times(clean_only, title=None)
    assert len(ax.collections) == 1
    assert ax.get_title() == ""
    plt.close(ax.get_figure())


def test_plot_race_times_empty_records():
    ax = plot_race_times([])
    assert len(ax.collections) == 0
    plt.close(ax.get_figure())


def test_plot_race_times_plotly_traces(sample_records):
    fig = plot_race_times_plotly(sample_records, title="Test")
    assert fig.layout.title.text == "Test"
    names = [trace.name for trace in fig.data]
    assert names == [LEGEND_DATA["dope"]["description"], LEGEND_DATA["clean"]["description"]]
    dope, clean = fig.data
    assert dope.marker.color == LEGEND_DATA["dope"]["color"]
    assert list(dope.customdata) == ["https://example.org/b-rider", ""]
    assert any("No allegations" in text for text in clean.text)


def test_export_svg_and_html(tmp_path, rendered):
    svg_path = export_svg(rendered, tmp_path / "nested" / "race_times.svg")
    html_path = export_html(rendered, tmp_path / "race_times.html")
    assert svg_path.exists()
    assert svg_path.read_text(encoding="utf-8").startswith("<svg")
    assert "race-data" in html_path.read_text(encoding="utf-8")


def test_export_png_and_plotly(tmp_path, sample_records):
    ax = plot_race_times(sample_records)
    png = export_figure_png(ax.get_figure(), tmp_path / "race_times.png")
    plt.close(ax.get_figure())
    assert png.exists()
    assert png.stat().st_size > 0

    fig = plot_race_times_plotly(sample_records)
    html = export_plotly_html(fig, tmp_path / "race_times_plotly.html")
    assert html.exists()


def test_plot_race_times_plotly_escapes_hover_text(sample_records):
    """Name and doping note reach plotly hover text HTML-escaped."""
    record = sample_records[1]._replace(name="<img src=x>", doping_note="<b>EPO</b> & more")
    fig = plot_race_times_plotly([record])
    (text,) = fig.data[0].text
    assert "&lt;img src=x&gt;" in text
    assert "&lt;b&gt;EPO&lt;/b&gt; &amp; more" in text
    assert "<img" not in text
