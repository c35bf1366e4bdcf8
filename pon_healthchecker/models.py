#!/usr/bin/env python3
"""
Health Checker Data Models
Data structures for probe results, device samples and runtime settings
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Tuple

from .exceptions import ValidationError

DEFAULT_STATUS_URL = "http://192.168.1.1/status_pon.asp"
DEFAULT_COUNTERS_URL = "http://192.168.1.1/admin/pon-stats.asp"
DEFAULT_LOGIN_URL = "http://192.168.1.1/boaform/admin/formLogin"


@dataclass
class DeviceStatusSample:
    """Optical module readings from the ONT live status page"""
    voltage: float = 0.0
    temperature: float = 0.0
    tx_power: float = 0.0
    rx_power: float = 0.0
    bias_current: float = 0.0


@dataclass
class DeviceCounterSample:
    """Traffic counters from the ONT PON statistics page"""
    sent_bytes: float = 0.0
    received_bytes: float = 0.0
    sent_packets: float = 0.0
    received_packets: float = 0.0
    sent_unicast_packets: float = 0.0
    received_unicast_packets: float = 0.0
    sent_multicast_packets: float = 0.0
    received_multicast_packets: float = 0.0
    sent_broadcast_packets: float = 0.0
    received_broadcast_packets: float = 0.0
    fec_errors: float = 0.0
    hec_errors: float = 0.0
    packets_dropped: float = 0.0
    pause_packets_sent: float = 0.0
    pause_packets_received: float = 0.0


@dataclass
class ProbeResult:
    """Outcome of a single instrumented GET"""
    url: str
    status: int = 0

    # Phase timings in whole milliseconds, zero when the phase never completed
    total_ms: float = 0.0
    dns_ms: float = 0.0
    first_byte_ms: float = 0.0
    connect_ms: float = 0.0

    status_code: Optional[int] = None
    error: Optional[str] = None
    status_sample: Optional[DeviceStatusSample] = None
    counter_sample: Optional[DeviceCounterSample] = None

    @property
    def ok(self) -> bool:
        return self.status == 1

    def timings(self) -> Dict[str, float]:
        return {
            "total_ms": self.total_ms,
            "dns_ms": self.dns_ms,
            "first_byte_ms": self.first_byte_ms,
            "connect_ms": self.connect_ms,
        }


@dataclass
class Settings:
    """Runtime configuration, fixed for the lifetime of the process"""
    interval: float = 10.0
    urls: Tuple[str, ...] = field(default_factory=tuple)

    # None keeps the transport default (no timeout at all)
    timeout: Optional[float] = None
    max_workers: int = 1

    # Device pages that get positional extraction
    status_url: str = DEFAULT_STATUS_URL
    counters_url: str = DEFAULT_COUNTERS_URL

    # Best-effort device login before scraping device pages
    login_enabled: bool = True
    login_url: str = DEFAULT_LOGIN_URL
    login_username: str = "admin"
    login_password: str = "admin"
    login_timeout: float = 5.0

    metrics_port: int = 2112

    def __post_init__(self):
        self.urls = tuple(self.urls)

    def is_device_page(self, url: str) -> bool:
        return url in (self.status_url, self.counters_url)

    def validate(self) -> "Settings":
        """Reject configurations that cannot be run"""
        if not math.isfinite(self.interval) or self.interval <= 0:
            raise ValidationError(f"interval must be positive, got {self.interval}")
        if self.max_workers < 1:
            raise ValidationError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.timeout is not None and (not math.isfinite(self.timeout) or self.timeout <= 0):
            raise ValidationError(f"timeout must be positive, got {self.timeout}")
        for url in self.urls:
            if not url or not url.strip():
                raise ValidationError("empty URL in target list")
        return self

    def describe(self) -> Dict:
        """Settings as a dict with the password masked, for the startup log line"""
        data = asdict(self)
        data["login_password"] = "***"
        return data
