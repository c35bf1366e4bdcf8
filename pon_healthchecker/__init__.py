"""
PON-HEALTHCHECKER: HTTP health checks with phase timings and SFP ONT readings as Prometheus gauges
"""

from .models import ProbeResult, DeviceStatusSample, DeviceCounterSample, Settings
from .metrics import MetricRegistry, HealthMetrics
from .prober import Prober, build_session
from .auth import DeviceLogin
from .scheduler import Scheduler, SchedulerState
from .extractors import extract_status, extract_counters
from .utils import setup_logging, parse_interval
from .exceptions import *


__version__ = "1.0.0"
__author__ = "PON Healthchecker Team"

__all__ = [
    "ProbeResult",
    "DeviceStatusSample",
    "DeviceCounterSample",
    "Settings",
    "MetricRegistry",
    "HealthMetrics",
    "Prober",
    "build_session",
    "DeviceLogin",
    "Scheduler",
    "SchedulerState",
    "extract_status",
    "extract_counters",
    "setup_logging",
    "parse_interval",
    "HealthCheckerException",
    "RegistrationError",
    "ExtractionError",
    "SchedulerError",
    "ValidationError"
]
