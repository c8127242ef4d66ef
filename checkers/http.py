# ============================================================================
# HTTP CHECKER
# ============================================================================
# STATUS: Infrastructure - HTTP request probe
# PURPOSE: Ready when an HTTP request returns an accepted status code
# CREATED: 19 OCT 2026
# ============================================================================
"""
HTTP Checker

One attempt = one request with the configured method and headers.
A fresh client is opened per attempt and closed before returning, so no
connection outlives the attempt.

Accepted status codes are a set built from a spec string:
    "200"             -> {200}
    "200,204"         -> {200, 204}
    "200-299,301"     -> {200..299, 301}
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

import httpx

from core.context import ReadinessContext
from core.logging import ComponentType, get_logger
from core.contracts import CheckType
from checkers.core import Checker, CheckError, InvalidAddressError, InvalidConfigError
from checkers.registry import register_checker

logger = get_logger(__name__, ComponentType.CHECKER)

MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 599


def parse_status_codes(spec: str) -> FrozenSet[int]:
    """
    Parse a comma-separated list of status codes and ranges.

    Raises:
        ValueError: Non-numeric part, code outside 100-599, or a range
            whose start is greater than its end
    """
    codes = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            raise ValueError(f"empty status code in {spec!r}")

        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start, end = _parse_code(start_text.strip()), _parse_code(end_text.strip())
            if start > end:
                raise ValueError(f"invalid status code range: {part}")
            codes.update(range(start, end + 1))
        else:
            codes.add(_parse_code(part))
    return frozenset(codes)


def _parse_code(text: str) -> int:
    try:
        code = int(text)
    except ValueError:
        raise ValueError(f"invalid status code: {text!r}") from None
    if not MIN_STATUS_CODE <= code <= MAX_STATUS_CODE:
        raise ValueError(f"status code out of range: {code}")
    return code


def _describe_codes(codes: FrozenSet[int]) -> str:
    """Compact description: {200, 201, 202, 204} -> "200-202,204"."""
    ordered = sorted(codes)
    ranges = []
    start = prev = ordered[0]
    for code in ordered[1:]:
        if code == prev + 1:
            prev = code
            continue
        ranges.append((start, prev))
        start = prev = code
    ranges.append((start, prev))
    return ",".join(str(a) if a == b else f"{a}-{b}" for a, b in ranges)


@dataclass(frozen=True)
class HTTPConfig:
    """Options for HTTP checks."""
    method: str = "GET"
    headers: Tuple[Tuple[str, str], ...] = ()  # ordered; duplicates allowed
    expected_status_codes: FrozenSet[int] = field(default_factory=lambda: frozenset({200}))
    skip_tls_verify: bool = False
    timeout: float = 2.0  # whole-request timeout, seconds

    def __post_init__(self):
        if not self.method or not self.method.strip():
            raise InvalidConfigError("method must not be empty")
        if self.timeout <= 0:
            raise InvalidConfigError("timeout must be positive")
        if not self.expected_status_codes:
            raise InvalidConfigError("expected status codes must not be empty")
        for code in self.expected_status_codes:
            if not MIN_STATUS_CODE <= code <= MAX_STATUS_CODE:
                raise InvalidConfigError(f"status code out of range: {code}")
        object.__setattr__(self, "method", self.method.strip().upper())


@register_checker(CheckType.HTTP)
class HTTPChecker(Checker):
    """
    HTTP request check.

    Args:
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    check_type = CheckType.HTTP
    config_class = HTTPConfig

    def __init__(
        self,
        name: str,
        address: str,
        config: Optional[HTTPConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(name, address)
        self.config = config or HTTPConfig()
        self._transport = transport
        try:
            url = httpx.URL(address)
        except httpx.InvalidURL as e:
            raise InvalidAddressError(address, f"invalid URL ({e})") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidAddressError(address, "invalid URL")

    async def check(self, ctx: ReadinessContext) -> None:
        timeout = ctx.bound(self.config.timeout)
        client = httpx.AsyncClient(
            timeout=timeout,
            verify=not self.config.skip_tls_verify,
            transport=self._transport,
            follow_redirects=False,
        )
        try:
            async with client:
                response = await client.request(
                    self.config.method,
                    self.address,
                    headers=list(self.config.headers),
                )
        except httpx.TimeoutException:
            raise CheckError(
                f"{self.config.method} {self.address}: request timed out after {timeout:g}s"
            ) from None
        except httpx.HTTPError as e:
            raise CheckError(f"{self.config.method} {self.address}: {e}") from e

        if response.status_code not in self.config.expected_status_codes:
            raise CheckError(
                f"unexpected status code: got {response.status_code}, "
                f"expected {_describe_codes(self.config.expected_status_codes)}"
            )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HTTPConfig",
    "HTTPChecker",
    "parse_status_codes",
]
