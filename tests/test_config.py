"""Tests for configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from portwait.config import FREE_WAIT_DEFAULTS, USED_WAIT_DEFAULTS, ProbeTarget, WaitOptions


class TestProbeTarget:
    """Tests for ProbeTarget model."""

    def test_default_host(self):
        """Test: host defaults to loopback."""
        target = ProbeTarget(port=8080)
        assert target.host == "127.0.0.1"
        assert str(target) == "127.0.0.1:8080"

    def test_port_range_enforced(self):
        """Test: out of range ports are rejected by the model."""
        with pytest.raises(ValidationError):
            ProbeTarget(port=70000)

    def test_frozen(self):
        """Test: targets cannot be mutated."""
        target = ProbeTarget(port=1)
        with pytest.raises(ValidationError):
            target.port = 2


class TestWaitOptions:
    """Tests for WaitOptions model."""

    def test_defaults_per_operation(self):
        assert FREE_WAIT_DEFAULTS.retry_time_ms == 100
        assert FREE_WAIT_DEFAULTS.timeout_ms == 300
        assert USED_WAIT_DEFAULTS.retry_time_ms == 200
        assert USED_WAIT_DEFAULTS.timeout_ms == 2000

    def test_seconds(self):
        options = WaitOptions(retry_time_ms=250, timeout_ms=1500)
        assert options.retry_seconds == 0.25
        assert options.timeout_seconds == 1.5

    def test_rejects_non_positive(self):
        with pytest.raises(ValidationError):
            WaitOptions(retry_time_ms=0, timeout_ms=100)

    def test_resolve_keeps_valid_values(self):
        options = USED_WAIT_DEFAULTS.resolve(500, 4000)
        assert options.retry_time_ms == 500
        assert options.timeout_ms == 4000

    def test_resolve_missing_timeout_uses_timeout_default(self):
        """Test: a missing timeout never borrows the retry default."""
        options = USED_WAIT_DEFAULTS.resolve(50, None)
        assert options.retry_time_ms == 50
        assert options.timeout_ms == 2000

    def test_resolve_missing_retry_uses_retry_default(self):
        options = FREE_WAIT_DEFAULTS.resolve(None, 5000)
        assert options.retry_time_ms == 100
        assert options.timeout_ms == 5000

    @pytest.mark.parametrize("bad", [0, -1, 1.5, "100", True])
    def test_resolve_invalid_values_fall_back(self, bad):
        options = FREE_WAIT_DEFAULTS.resolve(bad, bad)
        assert options == FREE_WAIT_DEFAULTS

    def test_resolve_does_not_mutate_defaults(self):
        USED_WAIT_DEFAULTS.resolve(1, 1)
        assert USED_WAIT_DEFAULTS.retry_time_ms == 200
        assert USED_WAIT_DEFAULTS.timeout_ms == 2000
