#!/usr/bin/env python3
"""
Render the static chart site.

Loads every measurement log from LOGS_DIR, renders one HTML page of charts
per log into HTML_DIR and exits. Any missing, unreadable or malformed log
aborts the run with exit status 1 before a page is written.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hopcharts import log
from hopcharts.env import get_config
from hopcharts.errors import HopchartsError
from hopcharts.html import render_site


def main():
    """Render static site."""
    cfg = get_config()

    log.info(f"Rendering charts from {cfg.logs_dir}...")

    try:
        pages = render_site()
    except HopchartsError as e:
        log.fatal(f"Page render failed: {e}")

    log.info(f"Wrote {len(pages)} files to {cfg.html_dir}")
    log.info("Site rendering complete")


if __name__ == "__main__":
    main()
