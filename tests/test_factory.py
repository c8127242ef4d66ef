# ============================================================================
# FACTORY TESTS
# ============================================================================
# STATUS: Tests - Descriptor to checker construction
# PURPOSE: Verify headers, variable resolution, defaults and error wrapping
# CREATED: 19 OCT 2026
# ============================================================================
"""
Factory Tests

Covers:
1. create_http_headers (format, duplicates, trimming, resolution)
2. build_checkers (order, defaults, intervals, names)
3. Error wrapping for headers, status codes and construction failures

Run with:
    pytest tests/test_factory.py -v
"""

import logging
import pytest

from checkers import (
    ConfigurationError,
    HTTPChecker,
    ICMPChecker,
    TCPChecker,
    UnsupportedCheckTypeError,
)
from core.config.defaults import CheckDefaults
from core.models import CheckerDescriptor
from services import CheckerWithInterval, build_checkers, create_http_headers


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def defaults():
    return CheckDefaults(tcp_timeout=3.0, http_timeout=4.0, icmp_read_timeout=5.0)


def http(id="api", **kwargs):
    kwargs.setdefault("address", "http://api.local/healthz")
    return CheckerDescriptor(type="http", id=id, **kwargs)


# ============================================================================
# HEADERS
# ============================================================================

class TestCreateHTTPHeaders:
    """Test KEY=VALUE header parsing."""

    def test_simple(self):
        assert create_http_headers(["Accept=application/json"], False) == (
            ("Accept", "application/json"),
        )

    def test_trims_and_splits_on_first_equals(self):
        headers = create_http_headers(["  Authorization = Bearer a=b  "], False)
        assert headers == (("Authorization", "Bearer a=b"),)

    def test_empty_value_allowed(self):
        assert create_http_headers(["X-Empty="], False) == (("X-Empty", ""),)

    def test_order_preserved(self):
        headers = create_http_headers(["B=2", "A=1"], False)
        assert [k for k, _ in headers] == ["B", "A"]

    @pytest.mark.parametrize("raw", ["NoEquals", "=value", "  =value"])
    def test_invalid_format(self, raw):
        with pytest.raises(ValueError) as exc_info:
            create_http_headers([raw], False)
        assert str(exc_info.value) == f'invalid header format: "{raw}"'

    def test_duplicate_rejected(self):
        with pytest.raises(ValueError) as exc_info:
            create_http_headers(["X-Tag=a", "x-tag=b"], False)
        assert str(exc_info.value) == 'duplicate header: "x-tag=b"'

    def test_duplicate_allowed(self):
        headers = create_http_headers(["X-Tag=a", "X-Tag=b"], True)
        assert headers == (("X-Tag", "a"), ("X-Tag", "b"))

    def test_none_rejected(self):
        with pytest.raises(ValueError):
            create_http_headers(None, False)

    def test_value_resolved_from_env(self, monkeypatch):
        monkeypatch.setenv("API_TOKEN", "s3cret")
        headers = create_http_headers(["Authorization=env:API_TOKEN"], False)
        assert headers == (("Authorization", "s3cret"),)

    def test_unresolvable_value(self, monkeypatch):
        monkeypatch.delenv("MISSING_TOKEN", raising=False)
        with pytest.raises(ValueError, match="MISSING_TOKEN"):
            create_http_headers(["Authorization=env:MISSING_TOKEN"], False)


# ============================================================================
# BUILD
# ============================================================================

class TestBuildCheckers:
    """Test descriptor -> checker construction."""

    def test_builds_in_order(self, defaults):
        built = build_checkers(
            [
                http(),
                CheckerDescriptor(type="TCP", id="db", address="127.0.0.1:5432"),
                CheckerDescriptor(type="icmp", id="gw", address="127.0.0.1"),
            ],
            default_interval=2.0,
            defaults=defaults,
        )

        assert [type(b.checker) for b in built] == [HTTPChecker, TCPChecker, ICMPChecker]
        assert all(isinstance(b, CheckerWithInterval) for b in built)

    def test_interval_defaulting(self, defaults):
        built = build_checkers(
            [http(id="a"), http(id="b", interval="250ms")],
            default_interval=1.5,
            defaults=defaults,
        )
        assert [b.interval for b in built] == [1.5, 0.25]

    def test_name_defaults_to_id(self, defaults):
        built = build_checkers([http(), http(id="web", name="Website")], 1.0, defaults)
        assert [b.checker.name for b in built] == ["api", "Website"]

    def test_build_logged_as_factory_component(self, caplog, defaults):
        caplog.set_level(logging.DEBUG, logger="services.factory")
        build_checkers([http()], 1.0, defaults)

        records = [r for r in caplog.records if r.name == "services.factory"]
        assert records
        assert records[0].extra["component"] == "factory"
        assert "Built HTTP checker 'api'" in records[0].getMessage()

    def test_option_defaults_applied(self, defaults):
        built = build_checkers(
            [
                http(),
                CheckerDescriptor(type="tcp", id="db", address="127.0.0.1:5432"),
                CheckerDescriptor(type="icmp", id="gw", address="127.0.0.1"),
            ],
            1.0,
            defaults,
        )
        http_checker, tcp_checker, icmp_checker = (b.checker for b in built)
        assert http_checker.config.timeout == 4.0
        assert http_checker.config.method == "GET"
        assert http_checker.config.expected_status_codes == {200}
        assert tcp_checker.config.timeout == 3.0
        assert icmp_checker.config.read_timeout == 5.0

    def test_http_options(self, defaults):
        built = build_checkers(
            [http(
                method="post",
                headers=["X-A=1", "X-A=2"],
                allow_duplicate_headers=True,
                expected_status_codes="200-204",
                skip_tls_verify=True,
                timeout="750ms",
            )],
            1.0,
            defaults,
        )
        config = built[0].checker.config
        assert config.method == "POST"
        assert config.headers == (("X-A", "1"), ("X-A", "2"))
        assert config.expected_status_codes == set(range(200, 205))
        assert config.skip_tls_verify is True
        assert config.timeout == 0.75

    def test_address_resolved(self, monkeypatch, defaults):
        monkeypatch.setenv("DB_ADDR", "127.0.0.1:6543")
        built = build_checkers(
            [CheckerDescriptor(type="tcp", id="db", address="env:DB_ADDR")], 1.0, defaults
        )
        assert built[0].checker.address == "127.0.0.1:6543"

    def test_unresolvable_address(self, monkeypatch, defaults):
        monkeypatch.delenv("NOPE", raising=False)
        with pytest.raises(ConfigurationError, match="invalid variable in address"):
            build_checkers(
                [CheckerDescriptor(type="tcp", id="db", address="env:NOPE")], 1.0, defaults
            )

    def test_unsupported_type(self, defaults):
        with pytest.raises(UnsupportedCheckTypeError) as exc_info:
            build_checkers(
                [CheckerDescriptor(type="udp", id="x", address="x:1")], 1.0, defaults
            )
        assert str(exc_info.value) == "unsupported check type: udp"

    def test_header_error_names_flag(self, defaults):
        with pytest.raises(ConfigurationError) as exc_info:
            build_checkers([http(headers=["broken"])], 1.0, defaults)
        assert str(exc_info.value) == (
            'invalid "--http.api.header": invalid header format: "broken"'
        )

    def test_status_code_error_names_flag(self, defaults):
        with pytest.raises(ConfigurationError) as exc_info:
            build_checkers([http(expected_status_codes="299-200")], 1.0, defaults)
        assert str(exc_info.value).startswith('invalid "--http.api.expected-status-codes": ')

    def test_construction_error_wrapped(self, monkeypatch, defaults):
        monkeypatch.setenv("BAD_URL", "ftp://api.local/")
        with pytest.raises(ConfigurationError) as exc_info:
            build_checkers([http(address="env:BAD_URL")], 1.0, defaults)
        assert str(exc_info.value).startswith("failed to create HTTP checker: ")

    def test_unresolvable_icmp_host_wrapped(self, defaults):
        with pytest.raises(ConfigurationError, match="failed to create ICMP checker"):
            build_checkers(
                [CheckerDescriptor(type="icmp", id="gw", address="nonexistent-host.invalid")],
                1.0,
                defaults,
            )
