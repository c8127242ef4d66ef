# ============================================================================
# CHECKER FACTORY
# ============================================================================
# STATUS: Service - Descriptor to checker construction
# PURPOSE: Build ready-to-run checkers (with intervals) from descriptors
# CREATED: 19 OCT 2026
# ============================================================================
"""
Checker Factory

Turns validated CheckerDescriptors into CheckerWithInterval values:
1. Resolve the check type (unknown -> "unsupported check type")
2. Resolve env:/file:/... references in the address and header values
3. Fill unset options from CheckDefaults
4. Build the variant's config dataclass and the checker itself

Every error is a ConfigurationError raised before any check runs.
Output order matches input order.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from core.config.defaults import CheckDefaults, get_defaults
from core.config.resolver import ResolveError, resolve_variable
from core.contracts import CheckType
from core.logging import ComponentType, get_logger
from core.models.descriptor import CheckerDescriptor
from checkers import (
    Checker,
    ConfigurationError,
    HTTPConfig,
    ICMPConfig,
    TCPConfig,
    new_checker,
    parse_check_type,
    parse_status_codes,
)

logger = get_logger(__name__, ComponentType.FACTORY)


@dataclass(frozen=True)
class CheckerWithInterval:
    """A checker paired with its polling interval (seconds)."""
    checker: Checker
    interval: float


def create_http_headers(
    headers: Optional[Sequence[str]],
    allow_duplicate_headers: bool,
) -> Tuple[Tuple[str, str], ...]:
    """
    Parse "KEY=VALUE" entries into ordered header pairs.

    Keys and values are trimmed; values go through the resolver. With
    allow_duplicate_headers, a repeated key keeps every value.

    Raises:
        ValueError: Malformed entry, duplicate key, or unresolvable value
    """
    if headers is None:
        raise ValueError("headers cannot be None")

    pairs: List[Tuple[str, str]] = []
    seen = set()
    for header in headers:
        key, sep, value = header.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f'invalid header format: "{header}"')

        try:
            resolved = resolve_variable(value.strip())
        except ResolveError as e:
            raise ValueError(f"failed to resolve variable in header: {e}") from e

        if key.lower() in seen and not allow_duplicate_headers:
            raise ValueError(f'duplicate header: "{header}"')

        seen.add(key.lower())
        pairs.append((key, resolved))

    return tuple(pairs)


def build_checkers(
    descriptors: Iterable[CheckerDescriptor],
    default_interval: float,
    defaults: Optional[CheckDefaults] = None,
) -> List[CheckerWithInterval]:
    """
    Build checkers from descriptors.

    Args:
        descriptors: Validated target descriptions, in run order
        default_interval: Interval for descriptors with interval 0
        defaults: Option defaults (process-wide defaults if None)

    Raises:
        ConfigurationError: Unsupported type, bad option, or bad address
    """
    defaults = defaults or get_defaults()
    checkers: List[CheckerWithInterval] = []

    for descriptor in descriptors:
        check_type = parse_check_type(descriptor.type)

        try:
            address = resolve_variable(descriptor.address)
        except ResolveError as e:
            raise ConfigurationError(f"invalid variable in address: {e}") from e

        interval = descriptor.interval or default_interval
        name = descriptor.name or descriptor.id
        flag_prefix = f"--{check_type.value.lower()}.{descriptor.id}"

        try:
            config = _build_config(check_type, descriptor, defaults, flag_prefix)
            checker = new_checker(check_type, name, address, config)
        except _OptionError:
            raise
        except ConfigurationError as e:
            raise ConfigurationError(f"failed to create {check_type} checker: {e}") from e

        logger.debug(f"Built {check_type} checker {name!r} for {address} (interval={interval}s)")
        checkers.append(CheckerWithInterval(checker=checker, interval=interval))

    return checkers


def _build_config(
    check_type: CheckType,
    descriptor: CheckerDescriptor,
    defaults: CheckDefaults,
    flag_prefix: str,
):
    """Variant config dataclass for a descriptor, defaults filled in."""
    if check_type == CheckType.HTTP:
        allow_dup = _pick(descriptor.allow_duplicate_headers, defaults.http_allow_duplicate_headers)
        try:
            headers = create_http_headers(descriptor.headers, allow_dup)
        except ValueError as e:
            raise _OptionError(f'invalid "{flag_prefix}.header": {e}') from e

        codes_spec = _pick(descriptor.expected_status_codes, defaults.http_expected_status_codes)
        try:
            codes = parse_status_codes(codes_spec)
        except ValueError as e:
            raise _OptionError(f'invalid "{flag_prefix}.expected-status-codes": {e}') from e

        return HTTPConfig(
            method=_pick(descriptor.method, defaults.http_method),
            headers=headers,
            expected_status_codes=codes,
            skip_tls_verify=_pick(descriptor.skip_tls_verify, defaults.http_skip_tls_verify),
            timeout=_pick(descriptor.timeout, defaults.http_timeout),
        )

    if check_type == CheckType.TCP:
        return TCPConfig(timeout=_pick(descriptor.timeout, defaults.tcp_timeout))

    return ICMPConfig(
        read_timeout=_pick(descriptor.read_timeout, defaults.icmp_read_timeout),
        write_timeout=_pick(descriptor.write_timeout, defaults.icmp_write_timeout),
    )


class _OptionError(ConfigurationError):
    """Option error whose message already names the offending flag."""
    pass


def _pick(value, default):
    return default if value is None else value


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CheckerWithInterval",
    "create_http_headers",
    "build_checkers",
]
