"""Wait until a TCP port becomes free or in use."""

from __future__ import annotations

from typing import Any

from portwait.config import FREE_WAIT_DEFAULTS, USED_WAIT_DEFAULTS, ProbeTarget, WaitOptions
from portwait.probe import probe_bind, probe_connect
from portwait.session import PollSession, Probe
from portwait.validation import DEFAULT_HOST, normalize_host, validate_port

__all__ = [
    "create_session",
    "wait_for_status",
    "wait_until_free",
    "wait_until_free_on_host",
    "wait_until_used",
    "wait_until_used_on_host",
]


async def _connect_probe(target: ProbeTarget) -> bool:
    return await probe_connect(target.port, target.host)


async def _bind_probe(target: ProbeTarget) -> bool:
    return await probe_bind(target.port)


def create_session(
    port: Any,
    host: Any,
    in_use: bool,
    retry_time_ms: Any = None,
    timeout_ms: Any = None,
    defaults: WaitOptions = USED_WAIT_DEFAULTS,
    probe: Probe = _connect_probe,
) -> PollSession:
    """Validate arguments and build a session without starting it.

    Args:
        port: The port to watch
        host: Host name or IP address; invalid or None means 127.0.0.1
        in_use: Desired state; True waits until used, False until free
        retry_time_ms: Retry interval in milliseconds (default: from defaults)
        timeout_ms: Deadline in milliseconds (default: from defaults)
        defaults: Per-operation fallback values
        probe: Probe coroutine function (default: connect-based)

    Returns:
        A PollSession ready to run()

    Raises:
        InvalidPortError: If port is not an integer in [0, 65535]
    """
    target = ProbeTarget(port=validate_port(port), host=normalize_host(host))
    options = defaults.resolve(retry_time_ms, timeout_ms)
    return PollSession(target, in_use, options, probe)


async def wait_for_status(
    port: Any,
    host: Any = None,
    in_use: bool = True,
    retry_time_ms: Any = None,
    timeout_ms: Any = None,
) -> None:
    """Wait until a port on host reaches the given state, using connect probes.

    Args:
        port: The port to watch
        host: Host name or IP address (default: 127.0.0.1)
        in_use: True to wait until used, False to wait until free
        retry_time_ms: Retry interval in milliseconds (default: 200)
        timeout_ms: Deadline in milliseconds (default: 2000)

    Raises:
        InvalidPortError: If port is invalid; raised before any I/O
        WaitTimeoutError: If the state was not reached before the deadline
        ProbeError: If a probe failed unexpectedly
    """
    session = create_session(port, host, in_use, retry_time_ms, timeout_ms)
    await session.run()


async def wait_until_free_on_host(
    port: Any,
    host: Any = None,
    retry_time_ms: Any = None,
    timeout_ms: Any = None,
) -> None:
    """Wait until nothing accepts connections on host:port.

    Args:
        port: The port to watch
        host: Host name or IP address (default: 127.0.0.1)
        retry_time_ms: Retry interval in milliseconds (default: 100)
        timeout_ms: Deadline in milliseconds (default: 300)

    Raises:
        InvalidPortError: If port is invalid; raised before any I/O
        WaitTimeoutError: If the port was still in use at the deadline
        ProbeError: If a probe failed unexpectedly
    """
    session = create_session(
        port, host, False, retry_time_ms, timeout_ms, defaults=FREE_WAIT_DEFAULTS
    )
    await session.run()


async def wait_until_free(
    port: Any,
    retry_time_ms: Any = None,
    timeout_ms: Any = None,
) -> None:
    """Wait until this machine could listen on port.

    Localhost only. Uses bind probes rather than connect probes, so a port
    held by a socket that accepts no connections still counts as used.

    Args:
        port: The port to watch
        retry_time_ms: Retry interval in milliseconds (default: 100)
        timeout_ms: Deadline in milliseconds (default: 300)
    """
    session = create_session(
        port,
        DEFAULT_HOST,
        False,
        retry_time_ms,
        timeout_ms,
        defaults=FREE_WAIT_DEFAULTS,
        probe=_bind_probe,
    )
    await session.run()


async def wait_until_used_on_host(
    port: Any,
    host: Any = None,
    retry_time_ms: Any = None,
    timeout_ms: Any = None,
) -> None:
    """Wait until something accepts connections on host:port.

    Args:
        port: The port to watch
        host: Host name or IP address (default: 127.0.0.1)
        retry_time_ms: Retry interval in milliseconds (default: 200)
        timeout_ms: Deadline in milliseconds (default: 2000)

    Raises:
        InvalidPortError: If port is invalid; raised before any I/O
        WaitTimeoutError: If the port was not in use before the deadline
        ProbeError: If a probe failed unexpectedly
    """
    session = create_session(port, host, True, retry_time_ms, timeout_ms)
    await session.run()


async def wait_until_used(
    port: Any,
    retry_time_ms: Any = None,
    timeout_ms: Any = None,
) -> None:
    """Wait until something accepts connections on 127.0.0.1:port."""
    await wait_until_used_on_host(port, DEFAULT_HOST, retry_time_ms, timeout_ms)
