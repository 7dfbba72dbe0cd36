"""Tests for the command line interface."""

from __future__ import annotations

import socket

import pytest

from portwait.__main__ import EXIT_FREE, EXIT_INVALID, EXIT_OK, EXIT_PROBE_ERROR, EXIT_TIMEOUT, build_parser, main


@pytest.fixture
def listening_port():
    """A loopback port with a plain listening socket on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen()
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


def test_parser_wait_options():
    args = build_parser().parse_args(["wait-used", "8080", "--retry-ms", "500", "--timeout-ms", "4000"])
    assert args.command == "wait-used"
    assert args.port == 8080
    assert args.retry_ms == 500
    assert args.timeout_ms == 4000
    assert args.host is None


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_check_in_use(listening_port, capsys):
    assert main(["check", str(listening_port)]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "in use"


def test_check_free(free_port, capsys):
    assert main(["check", str(free_port), "--host", "127.0.0.1"]) == EXIT_FREE
    assert capsys.readouterr().out.strip() == "free"


def test_check_bind(listening_port, capsys):
    assert main(["check", str(listening_port), "--bind"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "in use"


def test_check_invalid_port():
    assert main(["check", "70000"]) == EXIT_INVALID


def test_check_probe_error(free_port):
    assert main(["check", str(free_port), "--host", "nonexistent.invalid"]) == EXIT_PROBE_ERROR


def test_wait_used_success(listening_port):
    assert main(["wait-used", str(listening_port), "--timeout-ms", "1000"]) == EXIT_OK


def test_wait_used_timeout(free_port):
    assert main(["wait-used", str(free_port), "--retry-ms", "50", "--timeout-ms", "200"]) == EXIT_TIMEOUT


def test_wait_free_success(free_port):
    assert main(["wait-free", str(free_port)]) == EXIT_OK


def test_wait_free_timeout(listening_port):
    assert main(["wait-free", str(listening_port), "--retry-ms", "50", "--timeout-ms", "200"]) == EXIT_TIMEOUT


def test_wait_free_on_host_timeout(listening_port):
    args = ["-v", "wait-free", str(listening_port), "--host", "127.0.0.1", "--timeout-ms", "200"]
    assert main(args) == EXIT_TIMEOUT


def test_check_bind_rejects_host(free_port, capsys):
    """Test: --bind with --host is refused instead of silently ignoring the host."""
    with pytest.raises(SystemExit) as exc_info:
        main(["check", str(free_port), "--bind", "--host", "10.0.0.5"])
    assert exc_info.value.code == 2
    assert "--bind" in capsys.readouterr().err
