#!/usr/bin/env python3
"""
Metric Registry
Owns the Prometheus gauge series published by the health checker
"""

import logging
from dataclasses import fields
from typing import Dict, Optional, Tuple

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from .exceptions import RegistrationError
from .models import DeviceCounterSample, DeviceStatusSample, ProbeResult

logger = logging.getLogger(__name__)

URL_LABEL = "url"

# (result attribute, metric name, help text)
GENERIC_GAUGES: Tuple[Tuple[str, str, str], ...] = (
    ("status", "url_up", "Status of the URL as a integer value"),
    ("total_ms", "url_response_ms", "Response time in milliseconds it took for the URL to respond."),
    ("dns_ms", "url_dns_ms", "Response time in milliseconds it took for the DNS request to take place."),
    ("first_byte_ms", "url_first_byte_ms", "Response time in milliseconds it took to retrive the first byte."),
    ("connect_ms", "url_connect_time_ms", "Response time in milliseconds it took to establish the inital connection."),
)

STATUS_GAUGES: Tuple[Tuple[str, str, str], ...] = (
    ("voltage", "pon_voltage", "Voltage of the SFP ONT"),
    ("temperature", "pon_temperature", "temperature of the SFP ONT"),
    ("tx_power", "pon_tx_power", "SFP ONT TX Power"),
    ("rx_power", "pon_rx_power", "SFP ONT RX Power"),
    ("bias_current", "pon_bias_current", "SFP ONT Bias Current"),
)

# Names are published as-is, dashboards depend on the "receieved" spelling
COUNTER_GAUGES: Tuple[Tuple[str, str, str], ...] = (
    ("sent_bytes", "pon_sent_bytes", "Bytes sent over PON network"),
    ("received_bytes", "pon_receieved_bytes", "Bytes received over PON network"),
    ("sent_packets", "pon_sent_packets", "Packetes sent over PON network"),
    ("received_packets", "pon_receieved_packets", "Packets received over PON network"),
    ("sent_unicast_packets", "pon_sent_unicast_packets", "Unicast packets sent over PON network"),
    ("received_unicast_packets", "pon_received_unicast_packets", "Unicast packets received over PON network"),
    ("sent_multicast_packets", "pon_sent_multicast_packets", "Mutlicast packets sent over PON network"),
    ("received_multicast_packets", "pon_received_multicast_packets", "Mutlicast packets received over PON network"),
    ("sent_broadcast_packets", "pon_sent_broadcast_packets", "Broadcast packets sent over PON network"),
    ("received_broadcast_packets", "pon_received_broadcast_packets", "Broadcast packets Received over PON network"),
    ("fec_errors", "pon_fec_errors", "FEC errors on the pon network"),
    ("hec_errors", "pon_hec_errors", "HEC errors on the pon network"),
    ("packets_dropped", "pon_packets_dropped", "Packets dropped on the pon network"),
    ("pause_packets_sent", "pon_pause_packets_sent", "Pause packets sent on the pon network"),
    ("pause_packets_received", "pon_pause_packets_received", "Pause packets received on the pon network"),
)


class MetricRegistry:
    """
    Explicit wrapper around a prometheus_client CollectorRegistry.

    Every series carries the single ``url`` label. All writes go through
    :meth:`set`, so a value for a given url is simply replaced on each update.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.handles: Dict[str, Gauge] = {}

    def register(self, dimension: str, help_text: str, namespace: str = "", subsystem: str = "") -> Gauge:
        """
        Create and register a labeled gauge

        Args:
            dimension: Metric name without namespace/subsystem
            help_text: HELP line published with the series
            namespace: Optional metric namespace prefix
            subsystem: Optional metric subsystem prefix

        Returns:
            Gauge handle to pass to :meth:`set`
        """
        full_name = "_".join(part for part in (namespace, subsystem, dimension) if part)
        try:
            gauge = Gauge(
                dimension,
                help_text,
                [URL_LABEL],
                namespace=namespace,
                subsystem=subsystem,
                registry=self.registry,
            )
        except ValueError as e:
            raise RegistrationError(full_name, str(e)) from e

        self.handles[full_name] = gauge
        return gauge

    def set(self, handle: Gauge, label_value: str, value: float) -> None:
        handle.labels(**{URL_LABEL: label_value}).set(value)

    def get(self, name: str, label_value: str) -> Optional[float]:
        """Current value of a series for one url, None if never written"""
        return self.registry.get_sample_value(name, {URL_LABEL: label_value})

    def exposition(self) -> bytes:
        return generate_latest(self.registry)


class HealthMetrics:
    """The full gauge set, registered once at construction"""

    def __init__(self, registry: MetricRegistry):
        self.registry = registry
        self.generic_gauges = self._register_all(GENERIC_GAUGES, "sample", "external")
        self.status_gauges = self._register_all(STATUS_GAUGES, "pon", "external")
        self.counter_gauges = self._register_all(COUNTER_GAUGES, "pon", "external")

        self._check_table(self.status_gauges, DeviceStatusSample)
        self._check_table(self.counter_gauges, DeviceCounterSample)

    def _register_all(self, table, namespace: str, subsystem: str) -> Dict[str, Gauge]:
        return {
            attribute: self.registry.register(name, help_text, namespace=namespace, subsystem=subsystem)
            for attribute, name, help_text in table
        }

    @staticmethod
    def _check_table(gauges: Dict[str, Gauge], sample_type) -> None:
        expected = {f.name for f in fields(sample_type)}
        if set(gauges) != expected:
            raise RegistrationError(sample_type.__name__, f"gauge table does not cover {sorted(expected - set(gauges))}")

    def update_probe(self, result: ProbeResult) -> None:
        """Write the five generic series for the probed url"""
        logger.info(
            f"Updating custom metrics: url: {result.url}, connectMS: {result.connect_ms:.0f}, "
            f"dnsMS: {result.dns_ms:.0f}, firstbyteMS: {result.first_byte_ms:.0f}, "
            f"totalMS: {result.total_ms:.0f}, status: {result.status}"
        )
        for attribute, gauge in self.generic_gauges.items():
            self.registry.set(gauge, result.url, float(getattr(result, attribute)))

    def update_status(self, url: str, sample: DeviceStatusSample) -> None:
        logger.info(
            f"Updating PON status: url: {url}, voltage: {sample.voltage:.2f}, temp: {sample.temperature:.2f}, "
            f"rxpower: {sample.rx_power:.2f}, txpower: {sample.tx_power:.2f}, biascurrent: {sample.bias_current:.2f}"
        )
        for attribute, gauge in self.status_gauges.items():
            self.registry.set(gauge, url, getattr(sample, attribute))

    def update_counters(self, url: str, sample: DeviceCounterSample) -> None:
        logger.info(
            f"Updating PON statistics: url: {url}, "
            + ", ".join(f"{attribute}: {getattr(sample, attribute):.0f}" for attribute in self.counter_gauges)
        )
        for attribute, gauge in self.counter_gauges.items():
            self.registry.set(gauge, url, getattr(sample, attribute))
