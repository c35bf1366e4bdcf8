#!/usr/bin/env python3
"""
Basic usage example for PON-HEALTHCHECKER library
"""

from pon_healthchecker import HealthMetrics, MetricRegistry, Prober, Settings, setup_logging

def main():
    setup_logging()

    settings = Settings(urls=("https://www.google.com", "http://192.168.1.1/status_pon.asp"), timeout=5)
    registry = MetricRegistry()
    prober = Prober(HealthMetrics(registry), settings)

    # Probe each target once
    for url in settings.urls:
        result = prober.probe(url)
        status = "UP" if result.ok else "DOWN"
        print(f"{status} {url}: dns={result.dns_ms:.0f}ms connect={result.connect_ms:.0f}ms "
              f"first_byte={result.first_byte_ms:.0f}ms total={result.total_ms:.0f}ms")
        if result.status_sample:
            print(f"  ONT rx power: {result.status_sample.rx_power} dBm")

    # Current exposition, as served on /metrics
    print(registry.exposition().decode("utf-8"))

if __name__ == "__main__":
    main()
