"""
Fake WebLogic REST management server for running the exporter without
a WebLogic domain.

    python -m wls_exporter.mock.fake_wls_server
    wls-exporter serve --config config.yml --target 127.0.0.1:7001

Answers search requests against a small in-memory server runtime whose
counters move a little on every request. Collections are wrapped as
{"items": [...]} the way the real API returns them.
"""

from __future__ import annotations

import json
import random
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Dict, Optional

SERVER_SEARCH_PATH = "/management/weblogic/latest/serverRuntime/search"
DOMAIN_SEARCH_PATH = "/management/weblogic/latest/domainRuntime/search"

SESSION_COOKIE = "JSESSIONID=fake-wls-session; Path=/; HttpOnly"


class FakeRuntime:
    """In-memory server runtime MBean tree."""

    def __init__(self, seed: int = 42, server_name: str = "managed-server-1"):
        self._rng = random.Random(seed)
        self._tick = 0
        self._invocations = {"JspServlet": 0, "AccountServlet": 0, "FileServlet": 0}
        self._sessions_opened = 0
        self.server_name = server_name

    def server_runtime(self) -> Dict[str, Any]:
        """One reading of the server runtime, advancing the counters."""
        self._tick += 1
        for servlet in self._invocations:
            self._invocations[servlet] += self._rng.randint(0, 25)
        self._sessions_opened += self._rng.randint(0, 4)

        heap_size = 512 * 1024 * 1024
        return {
            "name": self.server_name,
            "state": "RUNNING",
            "openSocketsCurrentCount": self._rng.randint(2, 40),
            "activationTime": 1700000000000,
            "JVMRuntime": {
                "name": self.server_name,
                "heapSizeCurrent": heap_size,
                "heapFreeCurrent": int(heap_size * self._rng.uniform(0.2, 0.7)),
                "processCpuLoad": round(self._rng.uniform(0.01, 0.6), 4),
                "uptime": self._tick * 1000,
            },
            "applicationRuntimes": [
                {
                    "name": "bank",
                    "healthState": {"state": "ok"},
                    "componentRuntimes": [
                        {
                            "name": "bank-web",
                            "type": "WebAppComponentRuntime",
                            "contextRoot": "/bank",
                            "deploymentState": 2,
                            "openSessionsCurrentCount": self._rng.randint(0, 30),
                            "sessionsOpenedTotalCount": self._sessions_opened,
                            "servlets": [
                                {
                                    "servletName": name,
                                    "invocationTotalCount": count,
                                    "executionTimeAverage": round(self._rng.uniform(0.5, 40.0), 2),
                                }
                                for name, count in self._invocations.items()
                            ],
                        },
                        {
                            "name": "bank-ejb",
                            "type": "EJBComponentRuntime",
                            "deploymentState": 2,
                        },
                    ],
                },
            ],
        }

    def domain_runtime(self) -> Dict[str, Any]:
        return {"name": "base_domain", "serverRuntimes": [self.server_runtime()]}


def apply_query(query: Dict[str, Any], mbean: Dict[str, Any]) -> Dict[str, Any]:
    """Select the requested fields and children of one MBean."""
    fields = query.get("fields")
    if fields is None:
        result = {k: v for k, v in mbean.items() if not isinstance(v, (dict, list))}
    else:
        result = {f: mbean[f] for f in fields if f in mbean}

    for name, child_query in (query.get("children") or {}).items():
        child = mbean.get(name)
        if isinstance(child, list):
            result[name] = {"items": [apply_query(child_query, item) for item in child]}
        elif isinstance(child, dict):
            result[name] = apply_query(child_query, child)
    return result


class FakeWLSServer(HTTPServer):
    """Set `authorization` to require that exact Authorization header."""

    def __init__(self, address, runtime: Optional[FakeRuntime] = None,
                 authorization: Optional[str] = None, realm: str = "myrealm"):
        super().__init__(address, _SearchHandler)
        self.runtime = runtime or FakeRuntime()
        self.authorization = authorization
        self.realm = realm
        self.last_query: Optional[Dict[str, Any]] = None
        self.last_headers: Dict[str, str] = {}


class _SearchHandler(BaseHTTPRequestHandler):
    server: FakeWLSServer

    def do_POST(self):
        if self.path == SERVER_SEARCH_PATH:
            root = self.server.runtime.server_runtime
        elif self.path == DOMAIN_SEARCH_PATH:
            root = self.server.runtime.domain_runtime
        else:
            self._reply(404)
            return

        expected = self.server.authorization
        if expected is not None:
            supplied = self.headers.get("Authorization")
            if supplied is None:
                self._reply(401, headers={"WWW-Authenticate": f'Basic realm="{self.server.realm}"'})
                return
            if supplied != expected:
                self._reply(403)
                return

        length = int(self.headers.get("Content-Length", 0))
        try:
            query = json.loads(self.rfile.read(length) or b"{}")
        except ValueError:
            self._reply(400)
            return

        self.server.last_query = query
        self.server.last_headers = dict(self.headers.items())
        body = json.dumps(apply_query(query, root())).encode()
        self._reply(200, body, {"Content-Type": "application/json", "Set-Cookie": SESSION_COOKIE})

    def _reply(self, status: int, body: bytes = b"", headers: Optional[Dict[str, str]] = None):
        self.send_response(status)
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


def run_fake_server(host: str = "127.0.0.1", port: int = 7001):
    server = FakeWLSServer((host, port))
    print(f"Fake WebLogic management server running at http://{host}:{port}{SERVER_SEARCH_PATH}")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
