# ============================================================================
# CHECKER DESCRIPTOR MODEL
# ============================================================================
# STATUS: Core model - Validated checker configuration input
# PURPOSE: One target to wait for, as given by flags or a config file
# CREATED: 19 OCT 2026
# EXPORTS: CheckerDescriptor, TYPE_OPTIONS, describe_validation_error
# DEPENDENCIES: pydantic
# ============================================================================
"""
Checker Descriptor

A CheckerDescriptor is the validated, type-tagged description of one
target. The factory turns descriptors into checkers.

Descriptors come from:
- Dynamic flags:  --http.api.address=http://api:8080/healthz
- Config files:   a YAML list under "checks:"

Validation here is syntactic (address shape, durations, option names
valid for the type). Values with a resolver prefix (env:, file:, ...)
are validated after resolution, when the checker is built.
"""

import ipaddress
import re
from typing import Dict, FrozenSet, List, Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from core.config.durations import parse_duration
from core.config.resolver import is_resolvable_value


# Options each check type accepts (besides the common ones)
COMMON_OPTIONS: FrozenSet[str] = frozenset({"type", "id", "name", "address", "interval"})
TYPE_OPTIONS: Dict[str, FrozenSet[str]] = {
    "http": frozenset({
        "method",
        "headers",
        "allow_duplicate_headers",
        "expected_status_codes",
        "skip_tls_verify",
        "timeout",
    }),
    "tcp": frozenset({"timeout"}),
    "icmp": frozenset({"read_timeout", "write_timeout"}),
}

_HOSTNAME_LABEL = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")


def is_hostname_like(value: str) -> bool:
    """ASCII hostname without scheme, port or path (labels 1-63, total <= 253)."""
    if not value or len(value) > 253:
        return False
    return all(_HOSTNAME_LABEL.match(label) for label in value.split("."))


class CheckerDescriptor(BaseModel):
    """
    Description of one target to wait for.

    Type-specific options left unset fall back to CheckDefaults when the
    checker is built.
    """
    type: str = Field(..., min_length=1, description="http, tcp or icmp (any case)")
    id: str = Field(..., min_length=1, description="Instance id, default display name")
    name: Optional[str] = None
    address: str = Field(..., min_length=1)
    interval: float = Field(default=0.0, ge=0, description="Seconds; 0 = global default")

    # HTTP
    method: Optional[str] = None
    headers: List[str] = Field(default_factory=list, description="KEY=VALUE entries")
    allow_duplicate_headers: Optional[bool] = None
    expected_status_codes: Optional[str] = None
    skip_tls_verify: Optional[bool] = None

    # HTTP / TCP
    timeout: Optional[float] = Field(default=None, gt=0)

    # ICMP
    read_timeout: Optional[float] = Field(default=None, gt=0)
    write_timeout: Optional[float] = Field(default=None, gt=0)

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("interval", "timeout", "read_timeout", "write_timeout", mode="before")
    @classmethod
    def parse_durations(cls, v):
        """Accept "500ms" / "2s" strings as well as numbers of seconds."""
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, (str, int, float)):
            return parse_duration(v)
        return v

    @field_validator("headers", mode="before")
    @classmethod
    def handle_string_input(cls, v):
        """Allow a single header string as shorthand for a one-item list."""
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("expected_status_codes", mode="before")
    @classmethod
    def join_status_codes(cls, v: Union[str, int, List[Union[str, int]], None]):
        """Accept 200, "200-299" or ["200", "301"]."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, list):
            return ",".join(str(item).strip() for item in v)
        return v

    @field_validator("address")
    @classmethod
    def strip_address(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("address must not be empty")
        return stripped

    @model_validator(mode="after")
    def validate_for_type(self) -> "CheckerDescriptor":
        """Reject options foreign to the type and malformed addresses."""
        check_type = self.type.strip().lower()
        allowed = TYPE_OPTIONS.get(check_type)
        if allowed is None:
            # Unknown types are reported by the factory as unsupported
            return self

        foreign = sorted(
            f for f in self.model_fields_set
            if f not in COMMON_OPTIONS and f not in allowed
        )
        if foreign:
            raise ValueError(f"options not supported for {check_type}: {', '.join(foreign)}")

        if not is_resolvable_value(self.address):
            _ADDRESS_VALIDATORS[check_type](self.address)
        return self


def _validate_http_address(address: str) -> None:
    parts = urlsplit(address)
    if parts.scheme not in ("http", "https"):
        raise ValueError(f"unsupported scheme: {parts.scheme!r}")
    if not parts.netloc:
        raise ValueError(f"invalid URL: {address!r}")


def _validate_tcp_address(address: str) -> None:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"TCP address must be host:port (e.g. 127.0.0.1:80): {address!r}")
    if not 0 < int(port) < 65536:
        raise ValueError(f"invalid port in TCP address: {address!r}")


def _validate_icmp_address(address: str) -> None:
    try:
        ipaddress.ip_address(address)
        return
    except ValueError:
        pass
    if "://" in address:
        raise ValueError("ICMP check cannot have a scheme")
    if "/" in address or ":" in address:
        raise ValueError("ICMP address must be a hostname or IP without path or port")
    if not is_hostname_like(address):
        raise ValueError(f"invalid hostname: {address!r}")


_ADDRESS_VALIDATORS = {
    "http": _validate_http_address,
    "tcp": _validate_tcp_address,
    "icmp": _validate_icmp_address,
}


def describe_validation_error(error: ValidationError, dashed: bool = False) -> str:
    """
    One line for a pydantic error: 'field: message; field: message'.

    dashed=True spells field names the way flags do (read_timeout -> read-timeout).
    """
    parts = []
    for item in error.errors():
        names = [str(p) for p in item.get("loc", ())]
        if dashed:
            names = [n.replace("_", "-") for n in names]
        location = ".".join(names)
        message = item.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)



# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CheckerDescriptor",
    "COMMON_OPTIONS",
    "TYPE_OPTIONS",
    "describe_validation_error",
    "is_hostname_like",
]
