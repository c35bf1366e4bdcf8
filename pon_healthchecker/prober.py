#!/usr/bin/env python3
"""
Instrumented Prober
Issues one timed GET per target and publishes the outcome as gauges
"""

import logging
from typing import Optional

import requests

from .exceptions import ExtractionError
from .extractors import extract_counters, extract_status
from .metrics import HealthMetrics
from .models import ProbeResult, Settings
from .tracing import PhaseTrace, TracingAdapter, activate

logger = logging.getLogger(__name__)

USER_AGENT = "PonHealthChecker/1.0"


def build_session() -> requests.Session:
    """Session with phase tracing on both schemes and no retries"""
    session = requests.Session()
    # Targets are always dialled directly, never through an environment proxy
    session.trust_env = False
    adapter = TracingAdapter(max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({'User-Agent': USER_AGENT})
    return session


class Prober:
    """
    Probes a single URL per call.

    Every call writes the five generic series for the url, whatever the
    outcome. Device pages configured in ``settings`` additionally get their
    fields extracted and written when the response is 2xx.
    """

    def __init__(self, metrics: HealthMetrics, settings: Settings, session: Optional[requests.Session] = None):
        self.metrics = metrics
        self.settings = settings
        self.session = session or build_session()

        if settings.timeout is None:
            logger.warning("No request timeout configured, a hung target will stall the probe cycle")

    def probe(self, url: str) -> ProbeResult:
        result = ProbeResult(url=url)
        trace = PhaseTrace()
        body = None

        with activate(trace):
            trace.begin()
            try:
                response = self.session.get(url, timeout=self.settings.timeout, stream=True)
            except requests.exceptions.RequestException as e:
                logger.warning(f"error/timeout getting http request {url}: {e}")
                result.error = str(e)
            else:
                with response:
                    result.status_code = response.status_code
                    if 200 <= response.status_code <= 299:
                        result.status = 1
                        body = self._read_body(url, response)
                    else:
                        logger.debug(f"{url} answered HTTP {response.status_code}")
                    result.total_ms = trace.total_ms()

        result.dns_ms = trace.dns_ms
        result.connect_ms = trace.connect_ms
        result.first_byte_ms = trace.first_byte_ms

        if body is not None:
            self._extract_device_fields(result, body)

        self.metrics.update_probe(result)
        return result

    def _read_body(self, url: str, response: requests.Response) -> Optional[str]:
        try:
            return response.text
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed reading body from {url}, skipping extraction this cycle: {e}")
            return None

    def _extract_device_fields(self, result: ProbeResult, body: str) -> None:
        url = result.url
        try:
            if url == self.settings.status_url:
                result.status_sample = extract_status(body)
            elif url == self.settings.counters_url:
                result.counter_sample = extract_counters(body)
        except ExtractionError as e:
            logger.error(f"Skipping device metrics for {url}: {e}")
            return

        if result.status_sample is not None:
            self.metrics.update_status(url, result.status_sample)
        if result.counter_sample is not None:
            self.metrics.update_counters(url, result.counter_sample)
