"""
Omniboot Runner - Limpeza e montagem de linhas do stream do QEMU
"""

import re
from typing import Iterator, Optional

# CSI: ESC [ parâmetros numéricos ; letra final
ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


def strip_ansi(text: str) -> str:
    """Remove sequências ANSI CSI (cores, cursor) e nada mais."""
    return ANSI_ESCAPE.sub("", text)


def split_keepends(chunk: bytes) -> Iterator[bytes]:
    """Divide o bloco após cada '\\n', mantendo o separador."""
    start = 0
    while start < len(chunk):
        end = chunk.find(b"\n", start)
        if end == -1:
            yield chunk[start:]
            return
        yield chunk[start:end + 1]
        start = end + 1


class LineAssembler:
    """
    Acumula blocos de bytes e devolve linhas completas.

    A leitura é feita em blocos de tamanho fixo, então uma linha pode chegar
    dividida entre vários blocos. O resto incompleto fica no buffer até o
    próximo '\\n' ou até o flush no fim do stream.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._buffer = b""

    def _decode(self, raw: bytes) -> str:
        return raw.decode(self.encoding, errors="replace").rstrip("\r\n")

    def feed(self, chunk: bytes) -> list[str]:
        """Adiciona bloco e retorna as linhas completadas por ele."""
        self._buffer += chunk
        if b"\n" not in self._buffer:
            return []

        *lines, self._buffer = self._buffer.split(b"\n")
        return [self._decode(line) for line in lines]

    def flush(self) -> Optional[str]:
        """Retorna o resto sem '\\n' final (fim do stream)."""
        if not self._buffer:
            return None
        line = self._decode(self._buffer)
        self._buffer = b""
        return line

    @property
    def pending(self) -> bytes:
        return self._buffer
