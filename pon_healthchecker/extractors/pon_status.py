#!/usr/bin/env python3
"""
PON Status Extractor
Optical module readings from the ONT status_pon.asp page
"""

from ..models import DeviceStatusSample
from .positional import FieldTable, extract_fields

# Labels and values alternate in <font> elements, values sit on even positions
STATUS_TABLE = FieldTable(
    page="status_pon",
    tag="font",
    fields=(
        (4, "temperature"),
        (6, "voltage"),
        (8, "tx_power"),
        (10, "rx_power"),
        (12, "bias_current"),
    ),
)


def extract_status(html: str) -> DeviceStatusSample:
    return DeviceStatusSample(**extract_fields(html, STATUS_TABLE))
