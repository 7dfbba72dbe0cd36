"""portwait - check and wait for TCP port state."""

from __future__ import annotations

from portwait.config import FREE_WAIT_DEFAULTS, USED_WAIT_DEFAULTS, ProbeTarget, WaitOptions
from portwait.errors import InvalidPortError, PortWaitError, ProbeError, WaitTimeoutError
from portwait.probe import check, check_bind
from portwait.session import PollSession, SessionState
from portwait.wait import (
    create_session,
    wait_for_status,
    wait_until_free,
    wait_until_free_on_host,
    wait_until_used,
    wait_until_used_on_host,
)

__all__ = [
    # Config
    "ProbeTarget",
    "WaitOptions",
    "FREE_WAIT_DEFAULTS",
    "USED_WAIT_DEFAULTS",
    # Errors
    "PortWaitError",
    "InvalidPortError",
    "ProbeError",
    "WaitTimeoutError",
    # Probes
    "check",
    "check_bind",
    # Waits
    "PollSession",
    "SessionState",
    "create_session",
    "wait_for_status",
    "wait_until_free",
    "wait_until_free_on_host",
    "wait_until_used",
    "wait_until_used_on_host",
]
