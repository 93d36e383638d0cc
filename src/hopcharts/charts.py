"""Matplotlib-based chart generation from aggregated series.

This module renders each chart series to an inline SVG string. The root
``<svg>`` element carries data-* attributes (chart title, kind, theme, plot
area and the plotted values) that the page script reads to show tooltips on
hover.
"""

import io
import json
import re
from dataclasses import dataclass
from typing import Any, Literal, Optional

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for server-side rendering
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
from matplotlib.lines import Line2D
from matplotlib.patches import Patch
import numpy as np

from .aggregate import BarSeries, ChartSeries, LineSeries, ParallelSeries
from . import log


# Type alias for theme names
ThemeName = Literal["light", "dark"]

ChartKind = Literal["line", "parallel", "bar"]

# Interpolated samples between two neighbouring points of a smoothed line
SMOOTH_SAMPLES = 8


@dataclass(frozen=True)
class ChartTheme:
    """Color palette for chart rendering."""

    name: str
    # Colors as hex values (without #)
    background: str
    canvas: str
    text: str
    axis: str
    grid: str
    line: str
    # Bar colours, one per series in order
    palette: tuple[str, ...]


CHART_THEMES: dict[ThemeName, ChartTheme] = {
    "light": ChartTheme(
        name="light",
        background="faf8f5",  # Warm cream paper
        canvas="ffffff",
        text="1a1915",  # Charcoal
        axis="8a857a",  # Muted text
        grid="e8e4dc",  # Subtle border
        line="b45309",  # Burnt orange
        palette=("b45309", "0f766e", "6d28d9", "be123c"),
    ),
    "dark": ChartTheme(
        name="dark",
        background="0f1114",  # Deep night
        canvas="161a1e",
        text="f0efe8",  # Light text
        axis="706d62",  # Muted text
        grid="252a30",  # Subtle border
        line="f59e0b",  # Bright amber
        palette=("f59e0b", "2dd4bf", "a78bfa", "fb7185"),
    ),
}


def get_theme(name: str) -> ChartTheme:
    """Look up a theme by name, falling back to light."""
    theme = CHART_THEMES.get(name)
    if theme is None:
        log.warn(f"Unknown chart theme {name!r}, using light")
        return CHART_THEMES["light"]
    return theme


def smooth_curve(
    x: list[float],
    y: list[float],
    samples: int = SMOOTH_SAMPLES,
) -> tuple[np.ndarray, np.ndarray]:
    """Interpolate a Catmull-Rom spline through the points.

    The curve passes through every input point. Fewer than three points are
    returned unchanged.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if len(xs) < 3:
        return xs, ys

    pts = np.column_stack([xs, ys])
    # Duplicate the end points so the first and last segments have neighbours
    padded = np.vstack([pts[0], pts, pts[-1]])
    t = np.linspace(0.0, 1.0, samples, endpoint=False)[:, None]
    t2 = t * t
    t3 = t2 * t

    segments = []
    for i in range(1, len(padded) - 2):
        p0, p1, p2, p3 = padded[i - 1], padded[i], padded[i + 1], padded[i + 2]
        segments.append(0.5 * (
            2 * p1
            + (p2 - p0) * t
            + (2 * p0 - 5 * p1 + 4 * p2 - p3) * t2
            + (3 * p1 - p0 - 3 * p2 + p3) * t3
        ))
    segments.append(pts[-1:])

    curve = np.vstack(segments)
    return curve[:, 0], curve[:, 1]


def _new_figure(theme: ChartTheme, width: int, height: int):
    dpi = 100
    fig, ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)

    # Apply theme colors
    fig.patch.set_facecolor(f"#{theme.background}")
    ax.set_facecolor(f"#{theme.canvas}")

    # Configure axes
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
    ax.spines['left'].set_color(f"#{theme.grid}")
    ax.spines['bottom'].set_color(f"#{theme.grid}")

    ax.tick_params(colors=f"#{theme.axis}", labelsize=10)
    ax.xaxis.label.set_color(f"#{theme.text}")
    ax.yaxis.label.set_color(f"#{theme.text}")

    ax.grid(True, linestyle='-', alpha=0.5, color=f"#{theme.grid}")
    ax.set_axisbelow(True)
    return fig, ax


def _set_title(ax, title: str, theme: ChartTheme) -> None:
    ax.set_title(title, loc="left", fontsize=12, color=f"#{theme.text}")


def _show_legend(ax, theme: ChartTheme, handles=None) -> None:
    legend = ax.legend(
        handles=handles,
        loc="upper right",
        frameon=False,
        fontsize=9,
    )
    for text in legend.get_texts():
        text.set_color(f"#{theme.text}")


def _show_empty(ax, theme: ChartTheme) -> None:
    ax.text(
        0.5, 0.5, "No data available",
        transform=ax.transAxes,
        ha='center', va='center',
        fontsize=12,
        color=f"#{theme.axis}"
    )


def _to_svg(fig, ax) -> tuple[str, tuple[float, float, float, float]]:
    """Serialize the figure and return it with the plot area's extent.

    The extent is (x0, x1, y0, y1) as fractions of the figure size, y measured
    from the bottom, so the page script can map mouse positions to data.
    """
    try:
        fig.tight_layout(pad=0.8)
        bbox = ax.get_position()
        svg_buffer = io.StringIO()
        fig.savefig(svg_buffer, format='svg')
        return svg_buffer.getvalue(), (bbox.x0, bbox.x1, bbox.y0, bbox.y1)
    finally:
        # Ensure figure is closed to prevent memory leaks
        plt.close(fig)


def _inject_data_attributes(
    svg: str,
    title: str,
    kind: ChartKind,
    theme_name: str,
    plot_extent: tuple[float, float, float, float],
    points: list[Any],
    extra: Optional[dict[str, Any]] = None,
) -> str:
    """Add data-* attributes to the root <svg> for tooltip support."""
    data_points_attr = json.dumps(points).replace('"', '&quot;')
    title_attr = (
        title.replace("&", "&amp;").replace('"', "&quot;").replace("<", "&lt;")
    )
    x0, x1, y0, y1 = plot_extent
    attrs = (
        f'<svg data-chart="{title_attr}" data-kind="{kind}" data-theme="{theme_name}" '
        f'data-plot-x0="{x0:.4f}" data-plot-x1="{x1:.4f}" '
        f'data-plot-y0="{y0:.4f}" data-plot-y1="{y1:.4f}" '
    )
    for key, value in (extra or {}).items():
        value_attr = json.dumps(value).replace("&", "&amp;").replace('"', '&quot;')
        attrs += f'data-{key}="{value_attr}" '
    return re.sub(
        r'<svg\b',
        lambda _: attrs + f'data-points="{data_points_attr}"',
        svg,
        count=1,
    )


def render_line_svg(
    series: LineSeries,
    theme: ChartTheme,
    width: int = 800,
    height: int = 320,
) -> str:
    """Render a line series with a translucent area fill beneath it."""
    fig, ax = _new_figure(theme, width, height)
    try:
        _set_title(ax, series.title, theme)
        ax.set_xlabel(series.x_name)
        ax.set_ylabel(series.y_name)

        if series.is_empty:
            _show_empty(ax, theme)
        else:
            if series.smooth:
                xs, ys = smooth_curve(series.x, series.y)
            else:
                xs = np.asarray(series.x, dtype=float)
                ys = np.asarray(series.y, dtype=float)

            ax.fill_between(xs, ys, alpha=series.area_opacity, color=f"#{theme.line}")
            ax.plot(xs, ys, color=f"#{theme.line}", linewidth=2, label=series.series_name)
            ax.scatter(series.x, series.y, s=10, color=f"#{theme.line}", zorder=3)

            # Pin the x range to the index range so hover positions map to points
            ax.set_xlim(0, max(len(series.x) - 1, 1))
            _show_legend(ax, theme)
    except Exception:
        plt.close(fig)
        raise

    svg, extent = _to_svg(fig, ax)
    points = [{"x": x, "v": y} for x, y in zip(series.x, series.y)]
    return _inject_data_attributes(svg, series.title, "line", theme.name, extent, points)


def _normalize(values: list[float]) -> list[float]:
    lo, hi = min(values), max(values)
    if hi == lo:
        return [0.5 for _ in values]
    return [(v - lo) / (hi - lo) for v in values]


def render_parallel_svg(
    series: ParallelSeries,
    theme: ChartTheme,
    width: int = 800,
    height: int = 320,
) -> str:
    """Render a parallel-coordinates chart, one vertical axis per dimension.

    Each axis is scaled to its own value range; every point becomes a
    polyline crossing all axes.
    """
    fig, ax = _new_figure(theme, width, height)
    dims = len(series.axes)
    try:
        _set_title(ax, series.title, theme)
        ax.grid(False)
        ax.spines['left'].set_visible(False)
        ax.spines['bottom'].set_visible(False)
        ax.set_yticks([])
        ax.set_xticks(range(dims))
        ax.set_xticklabels([axis.name for axis in series.axes])
        ax.set_xlim(-0.25, dims - 0.75)
        ax.set_ylim(-0.08, 1.08)

        for axis in series.axes:
            ax.axvline(axis.dim, color=f"#{theme.axis}", linewidth=1)

        if series.is_empty:
            _show_empty(ax, theme)
        else:
            columns = [
                _normalize([float(p[axis.dim]) for p in series.points])
                for axis in series.axes
            ]
            lines = [
                [(axis.dim, columns[i][row]) for i, axis in enumerate(series.axes)]
                for row in range(len(series.points))
            ]
            ax.add_collection(LineCollection(
                lines, colors=f"#{theme.line}", linewidths=1, alpha=0.5,
            ))

            # Range labels at the ends of each axis
            for axis in series.axes:
                values = [p[axis.dim] for p in series.points]
                ax.text(axis.dim, 1.04, f" {max(values)}", ha='left', va='bottom',
                        fontsize=9, color=f"#{theme.axis}")
                ax.text(axis.dim, -0.04, f" {min(values)}", ha='left', va='top',
                        fontsize=9, color=f"#{theme.axis}")

            handle = Line2D([], [], color=f"#{theme.line}", label=series.series_name)
            _show_legend(ax, theme, handles=[handle])
    except Exception:
        plt.close(fig)
        raise

    # Data coordinates of the plot edges, for hit-testing polylines on hover
    view = {
        "axes": [axis.name for axis in series.axes],
        "xlim": [float(v) for v in ax.get_xlim()],
        "ylim": [float(v) for v in ax.get_ylim()],
    }
    svg, extent = _to_svg(fig, ax)
    points = [{"v": list(p)} for p in series.points]
    return _inject_data_attributes(
        svg, series.title, "parallel", theme.name, extent, points, extra=view,
    )


def render_bar_svg(
    series: BarSeries,
    theme: ChartTheme,
    width: int = 800,
    height: int = 320,
) -> str:
    """Render grouped bars, one group per category.

    The i-th value of a series is drawn in the i-th category; values beyond
    the last category are not drawn.
    """
    fig, ax = _new_figure(theme, width, height)
    n_categories = len(series.categories)
    n_series = max(len(series.series), 1)
    bar_width = 0.8 / n_series
    plotted = []
    handles = []
    try:
        _set_title(ax, series.title, theme)
        ax.set_xticks(range(n_categories))
        ax.set_xticklabels(series.categories)
        ax.set_xlim(-0.5, n_categories - 0.5)

        for i, (name, values) in enumerate(series.series.items()):
            shown = values[:n_categories]
            offset = (i - (n_series - 1) / 2) * bar_width
            color = theme.palette[i % len(theme.palette)]
            ax.bar(
                [c + offset for c in range(len(shown))],
                shown,
                width=bar_width,
                color=f"#{color}",
                label=name,
            )
            handles.append(Patch(color=f"#{color}", label=name))
            plotted.extend(
                {"series": name, "category": series.categories[c], "v": v}
                for c, v in enumerate(shown)
            )

        if series.is_empty:
            _show_empty(ax, theme)
        if handles:
            _show_legend(ax, theme, handles=handles)
    except Exception:
        plt.close(fig)
        raise

    svg, extent = _to_svg(fig, ax)
    return _inject_data_attributes(svg, series.title, "bar", theme.name, extent, plotted)


def render_series_svg(series: ChartSeries, theme: ChartTheme) -> str:
    """Render any chart series with the renderer for its kind."""
    if isinstance(series, LineSeries):
        return render_line_svg(series, theme)
    if isinstance(series, ParallelSeries):
        return render_parallel_svg(series, theme)
    if isinstance(series, BarSeries):
        return render_bar_svg(series, theme)
    raise TypeError(f"Unsupported chart series: {type(series).__name__}")
