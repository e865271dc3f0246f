"""
The /metrics endpoint Prometheus scrapes.

    wls-exporter serve --config config.yml --target localhost:7001

Each GET runs one scrape on its own thread. Credentials on the inbound
request are passed through to the management server, and its
authentication answers are passed back to Prometheus unchanged.
"""

from __future__ import annotations

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional

from wls_exporter.collector.exposition import CONTENT_TYPE
from wls_exporter.collector.wls_collector import WLSCollector
from wls_exporter.errors import AuthenticationChallengeError, NotAuthorizedError

log = logging.getLogger(__name__)

METRICS_PATH = "/metrics"


class ExporterServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, collector: WLSCollector):
        super().__init__(address, _ExporterHandler)
        self.collector = collector


class _ExporterHandler(BaseHTTPRequestHandler):
    server: ExporterServer

    def do_GET(self):
        if self.path.split("?", 1)[0] != METRICS_PATH:
            self.send_response(404)
            self.end_headers()
            return

        try:
            body, set_cookie = self.server.collector.exposition(self.headers)
        except NotAuthorizedError as e:
            log.warning("Scrape refused: %s", e)
            self._send_empty(403)
            return
        except AuthenticationChallengeError as e:
            log.info("Management server requested authentication for realm %s", e.realm)
            self._send_empty(401, {"WWW-Authenticate": f'Basic realm="{e.realm}"'})
            return

        payload = body.encode()
        self.send_response(200)
        self.send_header("Content-Type", CONTENT_TYPE)
        self.send_header("Content-Length", str(len(payload)))
        if set_cookie:
            self.send_header("Set-Cookie", set_cookie)
        self.end_headers()
        self.wfile.write(payload)

    def _send_empty(self, status: int, headers: Optional[dict] = None):
        self.send_response(status)
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


def run_exporter(collector: WLSCollector, host: str = "0.0.0.0", port: int = 8080):
    server = ExporterServer((host, port), collector)
    log.info("Serving %s on http://%s:%d%s", collector.name(), host, port, METRICS_PATH)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
