"""
Omniboot Core - Módulo central com configuração, logging e exceções
"""

from core.config import VmConfig, load_config
from core.logger import console, log
from core.exceptions import (
    OmnibootError,
    ConfigError,
    SpawnError,
    PipeClosedError,
    FailureKind,
)

__all__ = [
    "VmConfig",
    "load_config",
    "console",
    "log",
    "OmnibootError",
    "ConfigError",
    "SpawnError",
    "PipeClosedError",
    "FailureKind",
]
