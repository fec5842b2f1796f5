"""
Omniboot Core - Exceções customizadas
"""

from enum import Enum
from typing import Optional


class FailureKind(Enum):
    """Tipo de falha de uma execução."""
    SPAWN = "spawn"
    BROKEN_PIPE = "broken_pipe"
    IO = "io"
    UNEXPECTED = "unexpected"


class OmnibootError(Exception):
    """Exceção base do Omniboot."""

    kind: FailureKind = FailureKind.UNEXPECTED

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n{self.details}"
        return self.message


class ConfigError(OmnibootError):
    """Erro na configuração."""
    pass


class SpawnError(OmnibootError):
    """Binário do QEMU ausente ou não executável."""

    kind = FailureKind.SPAWN

    def __init__(self, message: str, executable: str | None = None, details: str | None = None):
        super().__init__(message, details)
        self.executable = executable


class PipeClosedError(OmnibootError):
    """Escrita no stdin após o processo filho ter terminado."""

    kind = FailureKind.BROKEN_PIPE
