#!/usr/bin/env python3
"""
PON-HEALTHCHECKER CLI Interface
"""

import click
import logging
import signal
import sys

from prometheus_client import start_http_server

from .auth import DeviceLogin
from .exceptions import HealthCheckerException, ValidationError
from .metrics import HealthMetrics, MetricRegistry
from .models import DEFAULT_COUNTERS_URL, DEFAULT_LOGIN_URL, DEFAULT_STATUS_URL, Settings
from .prober import Prober
from .scheduler import Scheduler
from .utils import parse_interval, setup_logging

logger = logging.getLogger(__name__)


def _force_quit(signum, frame):
    logger.info("received sigterm, force quitting.")
    sys.exit(1)


@click.command()
@click.option('--interval', default='10s', show_default=True,
              help='Interval for the healthchecks, in seconds or as a duration (10s, 1m30s, 500ms)')
@click.option('--url', 'urls', multiple=True,
              help='URLs to perform health checks against. Can be included multiple times for additional URLs')
@click.option('--timeout', type=float, default=None, help='Request timeout in seconds (default: no timeout)')
@click.option('--workers', type=int, default=1, show_default=True,
              help='Targets probed concurrently within one pass (1 keeps strict sequential order)')
@click.option('--port', type=int, default=2112, show_default=True, help='Port serving /metrics')
@click.option('--status-url', default=DEFAULT_STATUS_URL, show_default=True, help='ONT optical status page')
@click.option('--counters-url', default=DEFAULT_COUNTERS_URL, show_default=True, help='ONT PON statistics page')
@click.option('--login-url', default=DEFAULT_LOGIN_URL, show_default=True, help='ONT login form endpoint')
@click.option('--username', default='admin', show_default=True, help='ONT login username')
@click.option('--password', default='admin', envvar='PON_HEALTHCHECKER_PASSWORD', help='ONT login password')
@click.option('--no-login', is_flag=True, help='Do not log in to the ONT before scraping its pages')
@click.option('--once', is_flag=True, help='Run one round of checks, print the metrics and exit')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--quiet', is_flag=True, help='Suppress output except errors')
def cli(interval, urls, timeout, workers, port, status_url, counters_url, login_url, username, password,
        no_login, once, debug, quiet):
    """PON-HEALTHCHECKER: HTTP health checks and SFP ONT readings as Prometheus gauges"""

    # Set up logging
    if debug:
        setup_logging(logging.DEBUG)
    elif quiet:
        setup_logging(logging.ERROR)
    else:
        setup_logging(logging.INFO)

    try:
        settings = Settings(
            interval=parse_interval(interval),
            urls=urls,
            timeout=timeout,
            max_workers=workers,
            status_url=status_url,
            counters_url=counters_url,
            login_enabled=not no_login,
            login_url=login_url,
            login_username=username,
            login_password=password,
            metrics_port=port,
        ).validate()
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    logger.info(f"app.config {settings.describe()}")
    if not settings.urls:
        logger.warning("No --url given, only empty series will be published")

    try:
        registry = MetricRegistry()
        metrics = HealthMetrics(registry)
    except HealthCheckerException as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    prober = Prober(metrics, settings)
    login = DeviceLogin(settings) if settings.login_enabled else None
    scheduler = Scheduler(prober, settings, login=login)

    if once:
        scheduler.tick()
        click.echo(registry.exposition().decode("utf-8"), nl=False)
        return

    start_http_server(settings.metrics_port, registry=registry.registry)
    logger.info(f"Serving metrics on :{settings.metrics_port}/metrics")

    signal.signal(signal.SIGTERM, _force_quit)
    scheduler.start()
    try:
        while scheduler.is_running:
            scheduler.join(timeout=0.5)
    except KeyboardInterrupt:
        logger.info("received interrupt, shutting down.")
        scheduler.stop()


if __name__ == '__main__':
    cli()
