"""portwait 配置模型。"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from portwait.validation import DEFAULT_HOST, is_positive_int

logger = logging.getLogger(__name__)

__all__ = [
    "ProbeTarget",
    "WaitOptions",
    "FREE_WAIT_DEFAULTS",
    "USED_WAIT_DEFAULTS",
]


class ProbeTarget(BaseModel):
    """A validated host/port pair to probe."""

    port: int = Field(ge=0, le=65535)
    host: str = DEFAULT_HOST

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class WaitOptions(BaseModel):
    """Retry interval and deadline for a single poll session.

    Instances are immutable and handed to each session at construction,
    so no two sessions ever share mutable timing state.
    """

    retry_time_ms: int = Field(default=200, gt=0)
    timeout_ms: int = Field(default=2000, gt=0)

    model_config = {"frozen": True}

    @property
    def retry_seconds(self) -> float:
        return self.retry_time_ms / 1000

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def resolve(self, retry_time_ms: object = None, timeout_ms: object = None) -> WaitOptions:
        """Overlay caller-supplied values on these defaults.

        Each field falls back to its own default independently when the
        supplied value is not a positive integer.

        Args:
            retry_time_ms: Requested retry interval in milliseconds
            timeout_ms: Requested deadline in milliseconds

        Returns:
            A new WaitOptions with the effective values
        """
        if not is_positive_int(retry_time_ms):
            logger.debug(f"retry_time_ms {retry_time_ms!r} -> default {self.retry_time_ms}ms")
            retry_time_ms = self.retry_time_ms
        if not is_positive_int(timeout_ms):
            logger.debug(f"timeout_ms {timeout_ms!r} -> default {self.timeout_ms}ms")
            timeout_ms = self.timeout_ms
        return WaitOptions(retry_time_ms=retry_time_ms, timeout_ms=timeout_ms)


# Waiting for a port to be released is usually quick; waiting for a
# service to come up is not.
FREE_WAIT_DEFAULTS = WaitOptions(retry_time_ms=100, timeout_ms=300)
USED_WAIT_DEFAULTS = WaitOptions(retry_time_ms=200, timeout_ms=2000)
