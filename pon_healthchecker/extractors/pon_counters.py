#!/usr/bin/env python3
"""
PON Counters Extractor
Traffic statistics from the ONT admin/pon-stats.asp page
"""

from ..models import DeviceCounterSample
from .positional import FieldTable, extract_fields

# Cell 0 is skipped, counters follow in page order
COUNTERS_TABLE = FieldTable(
    page="pon_stats",
    tag="td",
    fields=(
        (1, "sent_bytes"),
        (2, "received_bytes"),
        (3, "sent_packets"),
        (4, "received_packets"),
        (5, "sent_unicast_packets"),
        (6, "received_unicast_packets"),
        (7, "sent_multicast_packets"),
        (8, "received_multicast_packets"),
        (9, "sent_broadcast_packets"),
        (10, "received_broadcast_packets"),
        (11, "fec_errors"),
        (12, "hec_errors"),
        (13, "packets_dropped"),
        (14, "pause_packets_sent"),
        (15, "pause_packets_received"),
    ),
)


def extract_counters(html: str) -> DeviceCounterSample:
    return DeviceCounterSample(**extract_fields(html, COUNTERS_TABLE))
