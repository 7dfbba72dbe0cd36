"""Single-shot port probes.

Two probes with different failure domains are provided:

- ``check`` connects to ``host:port``. It reports whether *something is
  accepting connections* and works against remote hosts.
- ``check_bind`` tries to listen on the port on every local IPv4 interface. It
  reports whether *this process could claim the port*, which only makes
  sense for the local machine.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import socket
from typing import Any

from portwait.errors import ProbeError
from portwait.validation import normalize_host, validate_port

logger = logging.getLogger(__name__)

__all__ = ["check", "check_bind", "probe_connect", "probe_bind"]

# IPv4 wildcard; binding "::" fails outright on hosts with IPv6 disabled
ALL_INTERFACES = "0.0.0.0"


async def probe_connect(port: int, host: str) -> bool:
    """Connect-based probe on an already validated target.

    Args:
        port: The port to check
        host: The host to connect to

    Returns:
        True if the port is in use, False if the connection was refused

    Raises:
        ProbeError: On any other connection failure
    """
    loop = asyncio.get_running_loop()
    try:
        # Only the first resolved address is tried, so a refusal on it is
        # never masked by a different error from a fallback address.
        infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        family, type_, proto, _, sockaddr = infos[0]
        sock = socket.socket(family, type_, proto)
        try:
            sock.setblocking(False)
            # Full sockaddr keeps the IPv6 scope id of link-local hosts
            await loop.sock_connect(sock, sockaddr)
        finally:
            sock.close()
    except ConnectionRefusedError:
        logger.debug(f"{host}:{port} refused connection - free")
        return False
    except OSError as e:
        if e.errno == errno.ECONNREFUSED:
            logger.debug(f"{host}:{port} refused connection - free")
            return False
        logger.debug(f"{host}:{port} probe failed: {e}")
        raise ProbeError(host, port, e) from e

    logger.debug(f"{host}:{port} accepted connection - in use")
    return True


async def probe_bind(port: int) -> bool:
    """Bind-based probe on an already validated port.

    SO_REUSEADDR stays off, so a port held by any other
    socket, listening or merely bound, counts as in use. A port whose last
    connections are still in TIME_WAIT therefore also reads as in use until
    the kernel releases it.

    Args:
        port: The port to check

    Returns:
        True if the port is in use, False if a listener could be opened

    Raises:
        ProbeError: If binding fails for a reason other than address-in-use
    """
    loop = asyncio.get_running_loop()
    try:
        server = await loop.create_server(
            asyncio.Protocol, host=ALL_INTERFACES, port=port, reuse_address=False
        )
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            logger.debug(f"port {port} address in use - in use")
            return True
        logger.debug(f"port {port} bind failed: {e}")
        raise ProbeError(None, port, e) from e

    server.close()
    await server.wait_closed()
    logger.debug(f"port {port} bound and released - free")
    return False


async def check(port: Any, host: Any = None) -> bool:
    """Check if a TCP port is in use by connecting to it.

    Args:
        port: The port to check
        host: Host name or IP address (default: 127.0.0.1)

    Returns:
        True if the port is in use, False otherwise

    Raises:
        InvalidPortError: If port is not an integer in [0, 65535]
        ProbeError: If the connection fails for a reason other than refusal
    """
    port = validate_port(port)
    return await probe_connect(port, normalize_host(host))


async def check_bind(port: Any) -> bool:
    """Check if a TCP port is in use by trying to listen on it locally.

    Note: binding system ports (0-1023) usually needs elevated privileges
    and reports a ProbeError otherwise.

    Args:
        port: The port to check

    Returns:
        True if the port is in use, False otherwise

    Raises:
        InvalidPortError: If port is not an integer in [0, 65535]
        ProbeError: If binding fails for a reason other than address-in-use
    """
    port = validate_port(port)
    return await probe_bind(port)
