#!/usr/bin/env python3
"""
Render the static chart site, then serve it.

Runs the same rendering pass as render_site.py and, once every page has
been written, serves HTML_DIR on SERVE_HOST:SERVE_PORT (localhost:8089 by
default) until interrupted.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hopcharts import log
from hopcharts.env import get_config
from hopcharts.errors import HopchartsError
from hopcharts.html import render_site
from hopcharts.server import serve


def main():
    """Render all pages and start the static server."""
    cfg = get_config()

    try:
        pages = render_site()
    except HopchartsError as e:
        log.fatal(f"Page render failed: {e}")

    log.info(f"Wrote {len(pages)} files to {cfg.html_dir}")
    try:
        serve(cfg.html_dir, cfg.serve_host, cfg.serve_port)
    except OSError as e:
        log.fatal(f"Cannot start server on {cfg.serve_host}:{cfg.serve_port}: {e}")


if __name__ == "__main__":
    main()
