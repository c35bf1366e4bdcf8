"""
Tests for the instrumented prober
"""

import logging
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
import requests

from pon_healthchecker.models import Settings
from pon_healthchecker.prober import Prober

from .pages import COUNTER_VALUES, COUNTERS_PAGE, STATUS_PAGE

GENERIC = [
    "sample_external_url_up",
    "sample_external_url_response_ms",
    "sample_external_url_dns_ms",
    "sample_external_url_first_byte_ms",
    "sample_external_url_connect_time_ms",
]

STATUS_PATH = "/status_pon.asp"
COUNTERS_PATH = "/admin/pon-stats.asp"


@pytest.fixture
def device_settings(server):
    return Settings(
        status_url=server.url(STATUS_PATH),
        counters_url=server.url(COUNTERS_PATH),
    )


@pytest.fixture
def prober(metrics, device_settings):
    prober = Prober(metrics, device_settings)
    yield prober
    prober.session.close()


def count_writes(set_spy, handles):
    handles = list(handles)
    return sum(1 for call in set_spy.call_args_list if any(call.args[0] is h for h in handles))


class TestStatusClassification:
    """Test 2xx classification"""

    @pytest.mark.parametrize("code", [200, 201, 204, 299])
    def test_2xx_is_up(self, server, prober, registry, code):
        server.routes["/check"] = (code, "")
        url = server.url("/check")

        result = prober.probe(url)

        assert result.status == 1
        assert result.status_code == code
        assert registry.get("sample_external_url_up", url) == 1.0

    @pytest.mark.parametrize("code", [300, 404, 500, 503])
    def test_other_codes_are_down(self, server, prober, registry, code):
        server.routes["/check"] = (code, "nope")
        url = server.url("/check")

        result = prober.probe(url)

        assert result.status == 0
        assert result.status_code == code
        for name in GENERIC:
            assert registry.get(name, url) is not None
        assert registry.get("sample_external_url_up", url) == 0.0

    def test_repeated_probe_overwrites(self, server, prober, registry):
        url = server.url("/flaky")
        server.routes["/flaky"] = (200, "ok")
        prober.probe(url)
        server.routes["/flaky"] = (500, "down")
        prober.probe(url)

        assert registry.get("sample_external_url_up", url) == 0.0


class TestGenericSeries:
    """Every probe writes the five generic series exactly once"""

    def test_success_writes_each_generic_series_once(self, server, prober, metrics, registry):
        server.routes["/200"] = (200, "")
        url = server.url("/200")

        with patch.object(registry, "set", wraps=registry.set) as set_spy:
            prober.probe(url)

        for handle in metrics.generic_gauges.values():
            assert count_writes(set_spy, [handle]) == 1
        assert set_spy.call_count == 5
        assert all(call.args[1] == url for call in set_spy.call_args_list)

    def test_failure_writes_each_generic_series_once(self, refused_url, prober, metrics, registry):
        with patch.object(registry, "set", wraps=registry.set) as set_spy:
            prober.probe(refused_url)

        for handle in metrics.generic_gauges.values():
            assert count_writes(set_spy, [handle]) == 1
        assert set_spy.call_count == 5

    def test_timings_recorded_on_success(self, server, prober, registry):
        server.routes["/200"] = (200, "hello")
        url = server.url("/200")

        result = prober.probe(url)

        assert result.dns_ms == 0.0
        assert result.total_ms >= result.first_byte_ms >= 0.0
        assert registry.get("sample_external_url_response_ms", url) == result.total_ms
        assert registry.get("sample_external_url_first_byte_ms", url) == result.first_byte_ms


class TestScenarios:
    """End to end probe scenarios"""

    def test_empty_200_on_unknown_url(self, server, prober, registry):
        server.routes["/empty"] = (200, "")
        url = server.url("/empty")

        with patch("pon_healthchecker.prober.extract_status") as status_mock, \
                patch("pon_healthchecker.prober.extract_counters") as counters_mock:
            result = prober.probe(url)

        assert result.status == 1
        status_mock.assert_not_called()
        counters_mock.assert_not_called()
        assert result.status_sample is None
        assert result.counter_sample is None
        assert registry.get("pon_external_pon_voltage", url) is None
        assert registry.get("pon_external_pon_sent_bytes", url) is None

    def test_connection_refused(self, refused_url, prober, registry):
        with patch("pon_healthchecker.prober.extract_status") as status_mock:
            result = prober.probe(refused_url)

        assert result.status == 0
        assert result.status_code is None
        assert result.error
        assert result.timings() == {"total_ms": 0.0, "dns_ms": 0.0, "first_byte_ms": 0.0, "connect_ms": 0.0}
        status_mock.assert_not_called()
        assert registry.get("sample_external_url_up", refused_url) == 0.0
        assert registry.get("sample_external_url_connect_time_ms", refused_url) == 0.0

    def test_transport_error_is_logged(self, refused_url, prober, caplog):
        with caplog.at_level(logging.WARNING, logger="pon_healthchecker.prober"):
            prober.probe(refused_url)

        assert "error/timeout getting http request" in caplog.text


class TestDevicePages:
    """Device pages get their fields extracted on success"""

    def test_status_page_writes_five_device_series(self, server, prober, metrics, registry):
        server.routes[STATUS_PATH] = (200, STATUS_PAGE)
        url = server.url(STATUS_PATH)

        with patch.object(registry, "set", wraps=registry.set) as set_spy:
            result = prober.probe(url)

        assert count_writes(set_spy, metrics.status_gauges.values()) == 5
        assert count_writes(set_spy, metrics.counter_gauges.values()) == 0
        assert count_writes(set_spy, metrics.generic_gauges.values()) == 5
        assert result.status_sample.voltage == 3.27
        assert registry.get("pon_external_pon_temperature", url) == 45.5
        assert registry.get("pon_external_pon_rx_power", url) == -18.4

    def test_counters_page_writes_fifteen_device_series(self, server, prober, metrics, registry):
        server.routes[COUNTERS_PATH] = (200, COUNTERS_PAGE)
        url = server.url(COUNTERS_PATH)

        with patch.object(registry, "set", wraps=registry.set) as set_spy:
            result = prober.probe(url)

        assert count_writes(set_spy, metrics.counter_gauges.values()) == 15
        assert count_writes(set_spy, metrics.status_gauges.values()) == 0
        assert result.counter_sample.fec_errors == float(COUNTER_VALUES[10])
        assert registry.get("pon_external_pon_sent_bytes", url) == float(COUNTER_VALUES[0])
        assert registry.get("pon_external_pon_pause_packets_received", url) == float(COUNTER_VALUES[14])

    def test_device_page_error_status_skips_extraction(self, server, prober, registry):
        server.routes[STATUS_PATH] = (503, STATUS_PAGE)
        url = server.url(STATUS_PATH)

        with patch("pon_healthchecker.prober.extract_status") as status_mock:
            result = prober.probe(url)

        assert result.status == 0
        status_mock.assert_not_called()

    def test_malformed_page_keeps_previous_values(self, server, prober, registry, caplog):
        url = server.url(STATUS_PATH)
        server.routes[STATUS_PATH] = (200, STATUS_PAGE)
        prober.probe(url)

        server.routes[STATUS_PATH] = (200, "<html><body><font>maintenance</font></body></html>")
        with caplog.at_level(logging.ERROR, logger="pon_healthchecker.prober"):
            result = prober.probe(url)

        assert result.status == 1
        assert result.status_sample is None
        assert "Skipping device metrics" in caplog.text
        assert registry.get("sample_external_url_up", url) == 1.0
        assert registry.get("pon_external_pon_voltage", url) == 3.27

    def test_body_read_failure_skips_extraction(self, server, prober, registry):
        server.routes[STATUS_PATH] = (200, STATUS_PAGE)
        url = server.url(STATUS_PATH)
        failure = requests.exceptions.ChunkedEncodingError("connection broken")

        with patch.object(requests.models.Response, "text", new_callable=PropertyMock, side_effect=failure), \
                patch("pon_healthchecker.prober.extract_status") as status_mock:
            result = prober.probe(url)

        assert result.status == 1
        status_mock.assert_not_called()
        assert registry.get("sample_external_url_up", url) == 1.0
        assert registry.get("pon_external_pon_voltage", url) is None


class TestProberConfiguration:
    """Test request options"""

    def test_warns_without_timeout(self, metrics, caplog):
        with caplog.at_level(logging.WARNING, logger="pon_healthchecker.prober"):
            Prober(metrics, Settings())

        assert "No request timeout configured" in caplog.text

    def test_timeout_is_passed_through(self, metrics):
        session = MagicMock()
        session.get.return_value.status_code = 503
        prober = Prober(metrics, Settings(timeout=2.5), session=session)

        prober.probe("http://example.test/")

        session.get.assert_called_once_with("http://example.test/", timeout=2.5, stream=True)
