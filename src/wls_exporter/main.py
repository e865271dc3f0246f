"""
wls-exporter entry point.

Usage:
    wls-exporter serve --config config.yml --target localhost:7001
    wls-exporter scrape --config config.yml --target localhost:7001 [--table]
    wls-exporter request --config config.yml
    wls-exporter fake-server --port 7001
"""

from __future__ import annotations

import base64
import logging
from typing import Tuple

import click

from wls_exporter import __version__
from wls_exporter.collector.client import DOMAIN_SEARCH_PATH
from wls_exporter.collector.exposition import render
from wls_exporter.collector.wls_collector import WLSCollector
from wls_exporter.config import LiveConfiguration
from wls_exporter.engine.query import compile_query, request_body
from wls_exporter.errors import ConfigurationError, ExchangeError


def _parse_target(target: str) -> Tuple[str, int]:
    host, sep, port = target.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise click.BadParameter(f"expected host:port, got '{target}'", param_hint="--target")
    return host, int(port)


@click.group()
@click.version_option(version=__version__, prog_name="wls-exporter")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose: bool):
    """wls-exporter - WebLogic MBeans as Prometheus metrics."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)


@cli.command()
@click.option("--config", "config_path", required=True, type=click.Path(dir_okay=False),
              help="YAML query configuration (reloaded when it changes)")
@click.option("--target", default="localhost:7001", help="Management server as host:port")
@click.option("--host", default="0.0.0.0", help="Address to listen on")
@click.option("--port", default=8080, help="Port to listen on")
@click.option("--timeout", default=5.0, help="Management request timeout in seconds")
def serve(config_path: str, target: str, host: str, port: int, timeout: float):
    """Serve /metrics for Prometheus."""
    from wls_exporter.server import run_exporter

    target_host, target_port = _parse_target(target)
    collector = WLSCollector(LiveConfiguration(config_path), target_host, target_port, timeout_seconds=timeout)
    click.echo(f"Exporting {collector.name()} on http://{host}:{port}/metrics")
    run_exporter(collector, host=host, port=port)


@cli.command()
@click.option("--config", "config_path", required=True, type=click.Path(exists=True, dir_okay=False),
              help="YAML query configuration")
@click.option("--target", default="localhost:7001", help="Management server as host:port")
@click.option("--user", default=None, help="Basic auth as user:password")
@click.option("--table", is_flag=True, default=False, help="Show a table instead of exposition text")
def scrape(config_path: str, target: str, user: str, table: bool):
    """Run one scrape and print the result."""
    target_host, target_port = _parse_target(target)
    configuration = LiveConfiguration(config_path)
    collector = WLSCollector(configuration, target_host, target_port)

    headers = {}
    if user:
        headers["Authorization"] = "Basic " + base64.b64encode(user.encode()).decode()

    try:
        result = collector.collect(headers)
    except (ConfigurationError, ExchangeError) as e:
        click.echo(f"Scrape failed: {e}", err=True)
        raise SystemExit(1)

    if table:
        from wls_exporter.dashboard.terminal import show_result
        show_result(result, collector.name())
    elif result is None:
        click.echo("# No configuration defined.")
    else:
        click.echo(render(result), nl=False)


@cli.command()
@click.option("--config", "config_path", required=True, type=click.Path(exists=True, dir_okay=False),
              help="YAML query configuration")
def request(config_path: str):
    """Print the domain-wide search body for each configured query."""
    config, error = LiveConfiguration(config_path).snapshot()
    if error:
        click.echo(f"Invalid configuration: {error}", err=True)
        raise SystemExit(1)
    if config is None or not config.has_queries():
        click.echo("No queries configured.", err=True)
        return

    for tree in config.queries:
        click.echo(f"POST {DOMAIN_SEARCH_PATH}")
        click.echo(request_body(compile_query(tree)))


@cli.command("fake-server")
@click.option("--host", default="127.0.0.1")
@click.option("--port", default=7001)
def fake_server(host: str, port: int):
    """Run a fake management server for local testing."""
    from wls_exporter.mock.fake_wls_server import run_fake_server
    run_fake_server(host=host, port=port)


if __name__ == "__main__":
    cli()
