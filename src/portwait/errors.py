"""统一错误类型定义。"""

from __future__ import annotations

from typing import Any

__all__ = ["PortWaitError", "InvalidPortError", "ProbeError", "WaitTimeoutError"]


class PortWaitError(Exception):
    """portwait 基础错误类。"""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "UNKNOWN_ERROR"

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式。"""
        return {"error": self.message, "code": self.code}


class InvalidPortError(PortWaitError, ValueError):
    """端口参数校验错误，在任何 I/O 之前抛出。"""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"invalid port: {value!r}", "INVALID_PORT")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["value"] = repr(self.value)
        return result


class ProbeError(PortWaitError):
    """探测时发生的意外 I/O 错误（非拒绝连接、非地址占用）。"""

    def __init__(self, host: str | None, port: int, error: OSError) -> None:
        self.host = host
        self.port = port
        self.error = error
        where = f"{host}:{port}" if host else f"port {port}"
        super().__init__(f"Probe of {where} failed: {error}", "PROBE_ERROR")

    @property
    def errno(self) -> int | None:
        return self.error.errno

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errno"] = self.errno
        return result


class WaitTimeoutError(PortWaitError, TimeoutError):
    """等待超时：在截止时间前未观察到目标状态。"""

    def __init__(self, port: int, timeout_ms: int) -> None:
        self.port = port
        self.timeout_ms = timeout_ms
        super().__init__("timeout", "TIMEOUT")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["timeout_ms"] = self.timeout_ms
        return result
