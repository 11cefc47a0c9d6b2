from __future__ import annotations

import os
import socket
import stat
import textwrap
import uuid
from pathlib import Path

import pytest

import tagged_css.cli as cli_module


def _write(tmp_path: Path, name: str, content: str) -> Path:
    target = tmp_path / name
    target.write_text(textwrap.dedent(content), encoding="utf-8")
    return target


def _error_text(result) -> str:
    """Return combined stdout and exception text for assertions."""
    return f"{result.output}{result.exception}"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_symlink_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    source = _write(
        tmp_path,
        "source.ts",
        """
        const a = css`color: red;`;
        """,
    )
    link = tmp_path / "alias.ts"
    try:
        os.symlink(source, link, target_is_directory=False)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")

    result = cli_runner.invoke(cli_module.cli, [str(link), "--tag", "css"])
    assert result.exit_code != 0
    assert "Symlinks" in result.output


def test_path_traversal_prevented(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    outside = tmp_path.parent / f"outside-{uuid.uuid4().hex}.ts"
    outside.write_text("const a = css`color: red;`;\n", encoding="utf-8")

    try:
        result = cli_runner.invoke(cli_module.cli, [str(outside), "--tag", "css"])
        assert result.exit_code != 0
        assert "outside of the working directory" in result.output
    finally:
        outside.unlink(missing_ok=True)


def test_file_size_limit_enforced(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TAGGED_CSS_MAX_FILE_SIZE", "10")
    target = tmp_path / "large.ts"
    target.write_text("X" * 20, encoding="utf-8")

    result = cli_runner.invoke(cli_module.cli, [str(target)])
    assert result.exit_code != 0
    assert "maximum allowed size" in _error_text(result)


def test_file_size_limit_from_pyproject(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TAGGED_CSS_MAX_FILE_SIZE", raising=False)
    (tmp_path / "pyproject.toml").write_text(
        "[tool.tagged-css]\nmax_file_size = 16\n", encoding="utf-8"
    )
    target = tmp_path / "large.ts"
    target.write_text("X" * 20, encoding="utf-8")

    result = cli_runner.invoke(cli_module.cli, [str(target)])
    assert result.exit_code != 0
    assert "maximum allowed size of 16 bytes" in _error_text(result)


def test_invalid_size_environment_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TAGGED_CSS_MAX_FILE_SIZE", "lots")
    target = _write(tmp_path, "small.ts", "const a = 1;\n")

    result = cli_runner.invoke(cli_module.cli, [str(target)])
    assert result.exit_code != 0
    assert "expected positive integer" in _error_text(result)


def test_invalid_utf8_handling(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "broken.ts"
    target.write_bytes(b"\xff\xfeconst a = css`a{}`;\n")

    result = cli_runner.invoke(cli_module.cli, [str(target), "--tag", "css"])
    assert result.exit_code != 0
    assert "Invalid UTF-8" in _error_text(result)


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="mkfifo not available")
def test_fifo_rejected(cli_runner, tmp_path, monkeypatch):
    """Test that FIFOs (named pipes) are rejected to prevent DoS via blocking reads."""
    monkeypatch.chdir(tmp_path)
    fifo_path = tmp_path / "malicious.ts"

    try:
        os.mkfifo(fifo_path)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create FIFO: {error}")

    result = cli_runner.invoke(cli_module.cli, [str(fifo_path)])
    assert result.exit_code != 0
    # The error could be either from is_file() check or collect_file_stat()
    assert "is not a regular file" in _error_text(result)


@pytest.mark.skipif(not hasattr(socket, "AF_UNIX"), reason="Unix sockets not available")
def test_socket_rejected(cli_runner, tmp_path, monkeypatch):
    """Test that Unix domain sockets are rejected."""
    monkeypatch.chdir(tmp_path)
    socket_path = tmp_path / "socket.ts"

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(str(socket_path))
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create socket: {error}")
    finally:
        sock.close()

    result = cli_runner.invoke(cli_module.cli, [str(socket_path)])
    assert result.exit_code != 0
    assert "is not a regular file" in _error_text(result)


@pytest.mark.parametrize("device_mode", [stat.S_IFCHR, stat.S_IFBLK], ids=["character", "block"])
def test_mocked_device_rejected(cli_runner, tmp_path, monkeypatch, device_mode):
    """Test device rejection using mocked stat to ensure CI coverage."""
    monkeypatch.chdir(tmp_path)
    device_path = tmp_path / "device.ts"
    device_path.write_text("const a = css`a{}`;\n", encoding="utf-8")

    original_stat = os.stat

    def mock_stat(path, *args, **kwargs):
        result = original_stat(path, *args, **kwargs)
        if str(path) == str(device_path):

            class MockStatResult:
                st_mode = device_mode | 0o666
                st_size = result.st_size
                st_mtime = result.st_mtime
                st_mtime_ns = result.st_mtime_ns
                st_ino = result.st_ino
                st_dev = result.st_dev

            return MockStatResult()
        return result

    monkeypatch.setattr(os, "stat", mock_stat)

    result = cli_runner.invoke(cli_module.cli, [str(device_path)])
    assert result.exit_code != 0
    assert "is not a regular file" in _error_text(result)
