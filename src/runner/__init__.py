"""
Omniboot Runner - Execução e monitoramento do QEMU
"""

from runner.qemu import QemuLauncher, build_args, build_command
from runner.monitor import (
    OutputMonitor,
    PromptMatcher,
    PromptResponder,
    RunResult,
    VmSession,
)
from runner.streams import LineAssembler, strip_ansi

__all__ = [
    "QemuLauncher",
    "build_args",
    "build_command",
    "OutputMonitor",
    "PromptMatcher",
    "PromptResponder",
    "RunResult",
    "VmSession",
    "LineAssembler",
    "strip_ansi",
]
