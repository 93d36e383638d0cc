"""HTML rendering helpers using Jinja2 templates."""

import os
import re
import shutil
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from .aggregate import (
    BATTERY_BUCKETS,
    ChartSeries,
    battery_consumption,
    matrix_charts,
)
from .charts import get_theme, render_series_svg
from .env import get_config
from .errors import PageWriteError
from .formatters import format_bytes, format_duration, format_number
from .loader import load_battery_measurements, load_matrix
from .models import Matrix, Measurement
from . import log


# Matrix logs, rendered in this order
MATRIX_PAGES = (
    "zero_host_downloader",
    "zero_client_uploader",
    "five_host_downloader",
    "five_client_uploader",
)

BATTERY_PAGE = "battery_measurements"

MATRIX_PAGE_TITLE = "Datahop Matrix Charts"
BATTERY_PAGE_TITLE = "Datahop Battery Charts"

# Page labels for headings and the index
PAGE_LABELS = {
    "zero_host_downloader": "Zero-hop host (downloader)",
    "zero_client_uploader": "Zero-hop client (uploader)",
    "five_host_downloader": "Five-hop host (downloader)",
    "five_client_uploader": "Five-hop client (uploader)",
    "battery_measurements": "Battery measurements",
}

# Singleton Jinja2 environment
_jinja_env: Optional[Environment] = None


def get_jinja_env() -> Environment:
    """Get or create the singleton Jinja2 environment.

    Uses PackageLoader to load templates from src/hopcharts/templates/
    with autoescape enabled for security.
    """
    global _jinja_env
    if _jinja_env is not None:
        return _jinja_env

    env = Environment(
        loader=PackageLoader("hopcharts", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )

    _jinja_env = env
    return env


def page_label(name: str) -> str:
    return PAGE_LABELS.get(name, name.replace("_", " ").capitalize())


def build_matrix_summary(matrix: Matrix) -> list[dict[str, str]]:
    """Build headline figures for a matrix page sidebar."""
    nodes = matrix.node_matrix.values()
    contents = matrix.content_matrix.values()

    return [
        {"label": "Nodes discovered", "value": format_number(len(matrix.node_matrix))},
        {
            "label": "Connections alive",
            "value": format_number(sum(1 for n in nodes if n.connection_alive)),
        },
        {
            "label": "Successful connections",
            "value": format_number(sum(n.connection_success_count for n in nodes)),
        },
        {
            "label": "Failed connections",
            "value": format_number(sum(n.connection_failure_count for n in nodes)),
        },
        {"label": "Content items", "value": format_number(len(matrix.content_matrix))},
        {
            "label": "Content size",
            "value": format_bytes(sum(c.size for c in contents)),
        },
        {"label": "Total uptime", "value": format_duration(matrix.total_uptime)},
    ]


def build_battery_summary(measurements: list[Measurement]) -> list[dict[str, str]]:
    """Build headline figures for the battery page sidebar."""
    summary = [{"label": "Measurements", "value": format_number(len(measurements))}]
    for transfer, name in BATTERY_BUCKETS.items():
        count = sum(1 for m in measurements if m.data_transfer == transfer)
        summary.append({"label": f"{name} transfers", "value": format_number(count)})
    return summary


def inline_svg(svg: str) -> str:
    """Strip the XML prolog and doctype so an SVG can be embedded in HTML."""
    match = re.search(r"<svg\b", svg)
    return svg[match.start():] if match else svg


def build_chart_context(series: ChartSeries, theme_name: str) -> dict[str, Any]:
    """Render one series and describe it for the page template."""
    svg = render_series_svg(series, get_theme(theme_name))
    return {
        "title": series.title,
        "svg": inline_svg(svg),
    }


def render_page(
    name: str,
    title: str,
    charts: list[ChartSeries],
    summary: Optional[list[dict[str, str]]] = None,
    theme_name: Optional[str] = None,
) -> str:
    """Compose one HTML document holding every chart of a page."""
    if theme_name is None:
        theme_name = get_config().chart_theme

    env = get_jinja_env()
    template = env.get_template("page.html")
    return template.render(
        title=title,
        page_name=name,
        page_label=page_label(name),
        summary=summary or [],
        charts=[build_chart_context(series, theme_name) for series in charts],
        theme=theme_name,
    )


def render_matrix_page(name: str, matrix: Matrix) -> str:
    """Render a connectivity/transfer matrix page."""
    return render_page(
        name,
        MATRIX_PAGE_TITLE,
        matrix_charts(matrix),
        summary=build_matrix_summary(matrix),
    )


def render_battery_page(name: str, measurements: list[Measurement]) -> str:
    """Render the battery consumption page."""
    return render_page(
        name,
        BATTERY_PAGE_TITLE,
        [battery_consumption(measurements)],
        summary=build_battery_summary(measurements),
    )


def render_index(pages: list[str]) -> str:
    """Render the index page linking every chart page."""
    env = get_jinja_env()
    template = env.get_template("index.html")
    return template.render(
        title=MATRIX_PAGE_TITLE,
        pages=[
            {"name": name, "label": page_label(name), "href": f"{name}.html"}
            for name in pages
        ],
    )


def write_page(path: Path, html: str) -> Path:
    """Write a page, replacing any previous version in one step.

    The content goes to a temporary sibling first so an interrupted or failed
    write never leaves a truncated page behind.
    """
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        tmp_path.write_text(html, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise PageWriteError(path, e.strerror or str(e)) from e
    return path


def copy_styles(html_dir: Path) -> Path:
    """Copy styles.css to the output directory."""
    # styles.css lives alongside templates in src/hopcharts/templates/
    src = Path(__file__).parent / "templates" / "styles.css"
    dst = html_dir / "styles.css"
    try:
        shutil.copy2(src, dst)
    except OSError as e:
        raise PageWriteError(dst, e.strerror or str(e)) from e
    log.debug(f"Copied {src} to {dst}")
    return dst


def render_site(
    logs_dir: Optional[Path] = None,
    html_dir: Optional[Path] = None,
) -> list[Path]:
    """
    Render every chart page and write the static site.

    All pages are loaded and rendered in memory before anything is written,
    so a missing or malformed log aborts the run without touching the
    output directory.

    Returns list of written paths.

    Raises:
        LogReadError: A log file is missing or unreadable
        LogParseError: A log file does not have the expected shape
        PageWriteError: The output directory or a page cannot be written
    """
    cfg = get_config()
    if logs_dir is None:
        logs_dir = cfg.logs_dir
    if html_dir is None:
        html_dir = cfg.html_dir
    html_dir = Path(html_dir)

    rendered: list[tuple[str, str]] = []

    for name in MATRIX_PAGES:
        matrix = load_matrix(name, logs_dir)
        rendered.append((name, render_matrix_page(name, matrix)))
        log.info(f"Rendered {name}")

    measurements = load_battery_measurements(BATTERY_PAGE, logs_dir)
    rendered.append((BATTERY_PAGE, render_battery_page(BATTERY_PAGE, measurements)))
    log.info(f"Rendered {BATTERY_PAGE}")

    try:
        html_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PageWriteError(html_dir, e.strerror or str(e)) from e

    written = []
    for name, html in rendered:
        page_path = write_page(html_dir / f"{name}.html", html)
        written.append(page_path)
        log.debug(f"Wrote {page_path}")

    index_path = write_page(html_dir / "index.html", render_index([n for n, _ in rendered]))
    written.append(index_path)
    written.append(copy_styles(html_dir))

    return written
