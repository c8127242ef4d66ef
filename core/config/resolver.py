# ============================================================================
# VALUE RESOLVER
# ============================================================================
# STATUS: Core - Indirect configuration values
# PURPOSE: Resolve env:/file:/json:/yaml:/ini: references in option values
# CREATED: 19 OCT 2026
# ============================================================================
"""
Value Resolver

Lets operators keep secrets and environment-specific values out of the
command line. A value with a known prefix is replaced by what it points
to; any other value is returned unchanged.

    env:NAME                     environment variable NAME
    file:/path                   whole file content (trimmed)
    file:/path//KEY              KEY from a KEY=VALUE file
    json:/path//a.b.0.c          key path into a JSON document
    yaml:/path//a.b              key path into a YAML document
    ini:/path//Section.Key       key in an INI section
    ini:/path//Key               key in the DEFAULT section

Usage:
    token = resolve_variable("env:API_TOKEN")
"""

import configparser
import json
import os
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

RESOLVABLE_PREFIXES = ("env:", "file:", "json:", "yaml:", "ini:")
KEY_SEPARATOR = "//"


class ResolveError(ValueError):
    """A reference could not be resolved."""
    pass


def is_resolvable_value(value: str) -> bool:
    """True if the value is a reference the resolver understands."""
    return value.startswith(RESOLVABLE_PREFIXES)


def resolve_variable(value: str) -> str:
    """
    Resolve a value reference.

    Raises:
        ResolveError: Missing variable, file, or key
    """
    if not is_resolvable_value(value):
        return value

    prefix, _, ref = value.partition(":")
    if prefix == "env":
        resolved = os.environ.get(ref)
        if resolved is None:
            raise ResolveError(f"environment variable {ref!r} not found")
        return resolved

    path, key = _split_key(ref)
    text = _read(path)

    if prefix == "file":
        if key is None:
            return text.strip()
        return _key_value_lookup(text, key, path)

    if key is None:
        raise ResolveError(f"missing key in {value!r} (expected {path}{KEY_SEPARATOR}key)")

    if prefix == "json":
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise ResolveError(f"invalid JSON in {path}: {e}") from e
        return _stringify(_walk(document, key, path))

    if prefix == "yaml":
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ResolveError(f"invalid YAML in {path}: {e}") from e
        return _stringify(_walk(document, key, path))

    return _ini_lookup(text, key, path)


def _split_key(ref: str) -> Tuple[str, Optional[str]]:
    path, sep, key = ref.partition(KEY_SEPARATOR)
    if not path:
        raise ResolveError(f"missing path in reference {ref!r}")
    return path, (key if sep else None)


def _read(path: str) -> str:
    try:
        return Path(os.path.expanduser(path)).read_text()
    except OSError as e:
        raise ResolveError(f"failed to read {path}: {e.strerror or e}") from e


def _key_value_lookup(text: str, key: str, path: str) -> str:
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        name, _, value = line.partition("=")
        name = name.strip()
        if name.startswith("export "):
            name = name[len("export "):].strip()
        if name == key:
            return value.strip().strip("\"'")
    raise ResolveError(f"key {key!r} not found in {path}")


def _walk(document: Any, key: str, path: str) -> Any:
    current = document
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            raise ResolveError(f"key {key!r} not found in {path}")
    return current


def _stringify(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _ini_lookup(text: str, key: str, path: str) -> str:
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string(text)
    except configparser.Error as e:
        raise ResolveError(f"invalid INI in {path}: {e}") from e

    section, sep, option = key.rpartition(".")
    if not sep:
        section = parser.default_section
    if section != parser.default_section and not parser.has_section(section):
        raise ResolveError(f"section {section!r} not found in {path}")
    if not parser.has_option(section, option):
        raise ResolveError(f"key {key!r} not found in {path}")
    return parser.get(section, option)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "RESOLVABLE_PREFIXES",
    "ResolveError",
    "is_resolvable_value",
    "resolve_variable",
]
