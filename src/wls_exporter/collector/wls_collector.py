"""
Collector for a live WebLogic server. Sends one search request per
configured query to the server-runtime REST endpoint and translates each
JSON response into samples.

A query whose exchange fails is dropped with a comment in the output;
the other queries still run. Authentication failures end the scrape,
since every query carries the same credentials.
"""

from __future__ import annotations

import logging
import time
from typing import Mapping, Optional, Tuple

import httpx

from wls_exporter.collector.base import MetricsCollector
from wls_exporter.collector.client import WebClient, search_url
from wls_exporter.collector.exposition import NO_CONFIGURATION, render, render_comments
from wls_exporter.config import ExporterConfig, LiveConfiguration
from wls_exporter.engine.naming import NameFormatter
from wls_exporter.engine.query import compile_selector, request_body
from wls_exporter.engine.walker import translate
from wls_exporter.errors import ConfigurationError, ResponseFormatError, TransportError
from wls_exporter.metrics import ScrapeCounters, ScrapeResult

log = logging.getLogger(__name__)


class WLSCollector(MetricsCollector):

    def __init__(
        self,
        configuration: LiveConfiguration,
        host: str = "localhost",
        port: int = 7001,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._configuration = configuration
        self._host = host
        self._port = port
        self._timeout = timeout_seconds
        self._transport = transport

    @property
    def instance(self) -> str:
        return f"{self._host}:{self._port}"

    @property
    def url(self) -> str:
        return search_url(self._host, self._port)

    def collect(self, headers: Optional[Mapping[str, str]] = None) -> Optional[ScrapeResult]:
        """Scrape with the configuration in force right now.

        Raises ConfigurationError if the configuration failed to load, and
        lets authentication errors from the server propagate.
        """
        self._configuration.refresh()
        config, error = self._configuration.snapshot()
        if error:
            raise ConfigurationError(error)
        if config is None or not config.has_queries():
            return None
        return self.scrape(config, headers)

    def scrape(self, config: ExporterConfig, headers: Optional[Mapping[str, str]] = None) -> ScrapeResult:
        formatter = NameFormatter(snake_case=config.metrics_name_snake_case)
        result = ScrapeResult(counters=ScrapeCounters(instance=self.instance))

        start = time.perf_counter()
        cpu_start = time.thread_time()

        client = WebClient(self.url, timeout_seconds=self._timeout, transport=self._transport)
        client.forward_headers(headers or {})
        try:
            for index, tree in enumerate(config.queries, 1):
                body = request_body(compile_selector(tree))
                try:
                    response = client.query(body)
                    samples, rows = translate(tree, response, formatter, self.instance)
                except (TransportError, ResponseFormatError) as e:
                    log.warning("Query %d failed: %s", index, e)
                    result.comments.append(f"Query {index} failed: {_one_line(e)}")
                    continue
                result.samples.extend(samples)
                result.counters.mbeans += rows
        finally:
            client.close()

        result.set_cookie = client.set_cookie
        result.counters.duration_seconds = time.perf_counter() - start
        result.counters.cpu_seconds = time.thread_time() - cpu_start
        log.debug("Scraped %d samples from %d MBeans", len(result.samples), result.counters.mbeans)
        return result

    def exposition(self, headers: Optional[Mapping[str, str]] = None) -> Tuple[str, Optional[str]]:
        """Text body for one scrape plus the Set-Cookie header to forward, if any."""
        try:
            result = self.collect(headers)
        except ConfigurationError as e:
            return render_comments([f"Unable to load configuration: {_one_line(e)}"]), None
        if result is None:
            return render_comments([NO_CONFIGURATION]), None
        return render(result), result.set_cookie

    def name(self) -> str:
        return f"WebLogic ({self.url})"


def _one_line(error: Exception) -> str:
    return " ".join(str(error).split())
