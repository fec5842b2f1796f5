"""Pytest configuration and fixtures for Omniboot tests."""

import io
import stat
import sys
import textwrap

import pytest

from core.config import VmConfig
from runner.qemu import QemuLauncher


class RecordingPipe(io.BytesIO):
    """BytesIO that keeps its contents after close."""

    written = b""

    def close(self):
        if not self.closed:
            self.written = self.getvalue()
        super().close()


class FakeProcess:
    """Minimal stand-in for subprocess.Popen with in-memory pipes."""

    def __init__(self, output: bytes, returncode: int = 0):
        self.pid = 4242
        self.stdin = RecordingPipe()
        self.stdout = io.BytesIO(output)
        self.returncode = returncode
        self.waited = 0

    def wait(self):
        self.waited += 1
        return self.returncode

    def poll(self):
        return self.returncode


class FakeLauncher(QemuLauncher):
    """Launcher returning a prepared FakeProcess and recording the command."""

    def __init__(self, process):
        super().__init__()
        self.fake = process
        self.command = None

    def spawn(self, command):
        self.command = command
        self.process = self.fake
        return self.fake


@pytest.fixture
def make_stub(tmp_path):
    """
    Build an executable script that plays the role of the QEMU binary.

    Args:
        tmp_path: Pytest temporary directory

    Returns:
        Callable taking the script body and returning a VmConfig using it
    """
    def _make(body: str, name: str = "qemu-stub") -> VmConfig:
        script = tmp_path / name
        script.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        script.chmod(script.stat().st_mode | stat.S_IXUSR)

        config = VmConfig()
        config.binary = str(script)
        return config

    return _make


@pytest.fixture
def lines():
    """Collects echoed lines."""
    return []


@pytest.fixture
def fake_launcher():
    """
    Factory for launchers backed by an in-memory process.

    Returns:
        Callable taking the child output (bytes) and optional return code
    """
    def _make(output: bytes, returncode: int = 0) -> FakeLauncher:
        return FakeLauncher(FakeProcess(output, returncode))

    return _make
