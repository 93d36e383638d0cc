"""Static file server for the rendered chart pages."""

from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional

from .env import get_config
from . import log


class RequestLoggingHandler(SimpleHTTPRequestHandler):
    """Serve files from a directory, logging every request."""

    def log_request(self, code="-", size="-"):
        log.info(f"{self.client_address[0]} {self.command} {self.path}")
        log.debug(f'"{self.requestline}" {code} {size}')

    def log_message(self, format, *args):
        log.debug(format % args)

    def log_error(self, format, *args):
        log.warn(format % args)


def make_server(directory: Path, host: str, port: int) -> ThreadingHTTPServer:
    """Bind a threaded HTTP server serving ``directory``."""
    handler = partial(RequestLoggingHandler, directory=str(directory))
    return ThreadingHTTPServer((host, port), handler)


def serve(
    directory: Optional[Path] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    """Serve the rendered site until interrupted."""
    cfg = get_config()
    if directory is None:
        directory = cfg.html_dir
    if host is None:
        host = cfg.serve_host
    if port is None:
        port = cfg.serve_port

    with make_server(directory, host, port) as httpd:
        log.info(f"running server at http://{host}:{port}")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            log.info("Server stopped")
