"""Argument validation shared by the probes and the wait operations."""

from __future__ import annotations

import ipaddress
import logging
import re
from typing import Any

from portwait.errors import InvalidPortError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_HOST",
    "is_port",
    "is_positive_int",
    "is_host_address",
    "validate_port",
    "normalize_host",
]

DEFAULT_HOST = "127.0.0.1"

# RFC 1123 hostname label
_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a meaningful port or interval
    return isinstance(value, int) and not isinstance(value, bool)


def is_port(value: Any) -> bool:
    """Return True if value is an integer in [0, 65535]."""
    return _is_int(value) and 0 <= value <= 65535


def is_positive_int(value: Any) -> bool:
    """Return True if value is an integer greater than zero."""
    return _is_int(value) and value > 0


def is_host_address(value: Any) -> bool:
    """Return True if value is an IPv4/IPv6 literal or a DNS host name."""
    if not isinstance(value, str) or not value:
        return False

    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        pass

    name = value[:-1] if value.endswith(".") else value
    if not name or len(name) > 253:
        return False
    return all(_LABEL_RE.match(label) for label in name.split("."))


def validate_port(port: Any) -> int:
    """Return port unchanged if valid.

    Raises:
        InvalidPortError: If port is not an integer in [0, 65535]
    """
    if not is_port(port):
        raise InvalidPortError(port)
    return port


def normalize_host(host: Any) -> str:
    """Return host if it is a usable address, otherwise the loopback address."""
    if is_host_address(host):
        return host
    if host is not None:
        logger.debug(f"Invalid host {host!r}, using default {DEFAULT_HOST}")
    return DEFAULT_HOST
