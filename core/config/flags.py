# ============================================================================
# COMMAND-LINE FLAGS
# ============================================================================
# STATUS: Core - CLI parsing
# PURPOSE: Global options plus dynamic per-target --<type>.<id>.<key> flags
# CREATED: 19 OCT 2026
# ============================================================================
"""
Command-Line Flags

Two kinds of flags share one command line:

Global options (argparse):
    --default-interval 2s   --max-attempts 0   --config checks.yaml
    --log-level INFO        --log-format text  --version   -h

Dynamic target flags, one group per target:
    --<type>.<id>.<key>=<value>   or   --<type>.<id>.<key> <value>

    --http.api.address=http://api:8080/healthz
    --http.api.header=Authorization=env:API_TOKEN
    --http.api.header="X-Trace=1"          (repeatable)
    --http.api.skip-tls-verify              (bare boolean = true)
    --tcp.db.address=db:5432 --tcp.db.timeout=500ms
    --icmp.gw.address=10.0.0.1

Each <type>.<id> group becomes one CheckerDescriptor, in order of first
appearance. Unknown types are kept so the factory can report them as
unsupported.
"""

import argparse
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from __version__ import __version__
from core.config.durations import parse_duration
from core.models.descriptor import CheckerDescriptor, describe_validation_error

# Dynamic flag keys per type (as written on the command line)
DYNAMIC_KEYS: Dict[str, Tuple[str, ...]] = {
    "http": (
        "name",
        "address",
        "method",
        "interval",
        "header",
        "allow-duplicate-headers",
        "expected-status-codes",
        "skip-tls-verify",
        "timeout",
    ),
    "tcp": ("name", "address", "interval", "timeout"),
    "icmp": ("name", "address", "interval", "read-timeout", "write-timeout"),
}

BOOLEAN_KEYS = frozenset({"allow-duplicate-headers", "skip-tls-verify"})
REPEATABLE_KEYS = frozenset({"header"})
# Keys kept for types without a checker, so the factory can reject the type
PASSTHROUGH_KEYS = frozenset({"name", "address", "interval"})

_DYNAMIC_FLAG = re.compile(
    r"^--?(?P<type>[A-Za-z][A-Za-z0-9_]*)\.(?P<id>[A-Za-z0-9_-]+)\.(?P<key>[A-Za-z0-9_-]+)"
    r"(?:=(?P<value>.*))?$",
    re.DOTALL,
)

_TRUE = frozenset({"1", "t", "true", "yes", "y", "on"})
_FALSE = frozenset({"0", "f", "false", "no", "n", "off"})


class FlagError(ValueError):
    """Malformed or unknown dynamic flag."""
    pass


@dataclass
class ParsedFlags:
    """
    Result of parsing the command line.

    Global values are None when the flag was not given, so config file
    and environment defaults can apply underneath.
    """
    descriptors: List[CheckerDescriptor] = field(default_factory=list)
    default_interval: Optional[float] = None
    max_attempts: Optional[int] = None
    config_path: Optional[str] = None
    log_level: str = "INFO"
    log_format: str = "text"


def _duration(value: str) -> float:
    seconds = parse_duration(value)
    if seconds < 0:
        raise ValueError(f"negative duration {value!r}")
    return seconds


_duration.__name__ = "duration"


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise ValueError(f"negative value {value!r}")
    return number


_non_negative_int.__name__ = "non-negative integer"


def build_parser() -> argparse.ArgumentParser:
    """Parser for the global options."""
    parser = argparse.ArgumentParser(
        prog="never",
        description="Wait until TCP, HTTP and ICMP targets are reachable",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Target flags (repeat per target, <id> is any name you choose):
  --http.<id>.{name,address,method,interval,header,allow-duplicate-headers,
               expected-status-codes,skip-tls-verify,timeout}
  --tcp.<id>.{name,address,interval,timeout}
  --icmp.<id>.{name,address,interval,read-timeout,write-timeout}

Values may reference env:NAME, file:/path[//KEY], json:/path//a.b,
yaml:/path//a.b or ini:/path//Section.Key.

Examples:
  %(prog)s --tcp.db.address=db:5432 --http.api.address=http://api:8080/healthz
  %(prog)s --max-attempts 30 --icmp.gw.address=10.0.0.1 --icmp.gw.interval=500ms
  %(prog)s --config checks.yaml --log-format json
        """,
    )
    parser.add_argument(
        "--default-interval",
        type=_duration,
        default=None,
        help="Interval between attempts for targets without their own (default: 2s)",
    )
    parser.add_argument(
        "--max-attempts",
        type=_non_negative_int,
        default=None,
        help="Attempts per target before giving up, 0 = unbounded (default: 0)",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="YAML file with a 'checks' list",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO").upper(),
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: $LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        default=os.environ.get("LOG_FORMAT", "text").lower(),
        type=str.lower,
        choices=["text", "json"],
        help="Log output format (default: $LOG_FORMAT or text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def parse_flags(argv: Sequence[str]) -> ParsedFlags:
    """
    Parse the command line.

    Args:
        argv: Arguments without the program name

    Raises:
        FlagError: Malformed or unknown dynamic flag
        SystemExit: From argparse, for global option errors, -h and --version
    """
    dynamic, remaining = split_dynamic_flags(argv)
    args = build_parser().parse_args(remaining)

    return ParsedFlags(
        descriptors=build_descriptors(dynamic),
        default_interval=args.default_interval,
        max_attempts=args.max_attempts,
        config_path=args.config_path,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def split_dynamic_flags(
    argv: Sequence[str],
) -> Tuple[List[Tuple[str, str, str, str]], List[str]]:
    """
    Separate dynamic target flags from everything else.

    Returns:
        ([(type, id, key, value), ...], remaining_argv)
    """
    dynamic: List[Tuple[str, str, str, str]] = []
    remaining: List[str] = []

    tokens = list(argv)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1

        if token == "--":
            remaining.extend(tokens[i - 1:])
            break

        match = _DYNAMIC_FLAG.match(token)
        if match is None:
            remaining.append(token)
            continue

        check_type = match.group("type").lower()
        key = match.group("key").lower().replace("_", "-")
        value = match.group("value")
        flag = f"--{check_type}.{match.group('id')}.{key}"

        known = DYNAMIC_KEYS.get(check_type)
        if known is not None and key not in known:
            raise FlagError(f"flag provided but not defined: {flag}")

        if value is None:
            if key in BOOLEAN_KEYS:
                value = "true"
            elif i < len(tokens) and not tokens[i].startswith("--"):
                value = tokens[i]
                i += 1
            else:
                raise FlagError(f"flag needs an argument: {flag}")

        dynamic.append((check_type, match.group("id"), key, value))

    return dynamic, remaining


def build_descriptors(
    dynamic: Sequence[Tuple[str, str, str, str]],
) -> List[CheckerDescriptor]:
    """
    Group dynamic flags into descriptors, in order of first appearance.

    Raises:
        FlagError: Bad boolean, repeated single-value flag, or invalid group
    """
    groups: Dict[Tuple[str, str], Dict[str, object]] = {}

    for check_type, instance_id, key, value in dynamic:
        flag = f"--{check_type}.{instance_id}.{key}"
        options = groups.setdefault((check_type, instance_id), {})

        if check_type not in DYNAMIC_KEYS and key not in PASSTHROUGH_KEYS:
            # Unknown type: only the pass-through keys travel on
            continue

        if key in REPEATABLE_KEYS:
            options.setdefault("headers", []).append(value)
            continue

        field_name = key.replace("-", "_")
        if field_name in options:
            raise FlagError(f"flag given more than once: {flag}")

        if key in BOOLEAN_KEYS:
            options[field_name] = _parse_bool(value, flag)
        else:
            options[field_name] = value

    descriptors = []
    for (check_type, instance_id), options in groups.items():
        try:
            descriptors.append(CheckerDescriptor(type=check_type, id=instance_id, **options))
        except ValidationError as e:
            reason = describe_validation_error(e, dashed=True)
            raise FlagError(f"invalid flags for --{check_type}.{instance_id}: {reason}") from e
    return descriptors


def _parse_bool(value: str, flag: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise FlagError(f'invalid boolean value "{value}" for {flag}')


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DYNAMIC_KEYS",
    "FlagError",
    "ParsedFlags",
    "build_parser",
    "parse_flags",
    "split_dynamic_flags",
    "build_descriptors",
]
