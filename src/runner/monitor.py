"""
Omniboot Runner - Monitor da saída do QEMU e resposta ao prompt
"""

import asyncio
import time
from dataclasses import dataclass
from typing import IO, Callable, Optional

from core.config import VmConfig
from core.exceptions import ConfigError, FailureKind, PipeClosedError
from core.logger import log, echo_line
from runner.qemu import QemuLauncher, build_command
from runner.streams import LineAssembler, split_keepends, strip_ansi


CHUNK_SIZE = 1024


class PromptMatcher:
    """
    Detector de texto literal, disparado uma única vez.

    Trabalha sobre os bytes crus e guarda os últimos len(pattern) - 1 bytes
    do bloco anterior, então um prompt dividido entre duas leituras ainda é
    encontrado.
    """

    def __init__(self, pattern: str):
        if not pattern:
            raise ValueError("pattern não pode ser vazio")
        self.pattern = pattern
        self._needle = pattern.encode("utf-8")
        self._tail = b""
        self.matched = False

    def feed(self, chunk: bytes) -> bool:
        """Retorna True apenas no primeiro bloco que completa o padrão."""
        if self.matched:
            return False

        window = self._tail + chunk
        if self._needle in window:
            self.matched = True
            self._tail = b""
            return True

        keep = len(self._needle) - 1
        self._tail = window[-keep:] if keep else b""
        return False


class PromptResponder:
    """Escreve a resposta no stdin do processo filho."""

    def __init__(self, stdin: IO[bytes], response: str = "\n"):
        self.stdin = stdin
        self.response = response.encode("utf-8")
        self.sent = 0

    def send(self) -> None:
        try:
            self.stdin.write(self.response)
            self.stdin.flush()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise PipeClosedError(
                "Broken pipe: o processo do QEMU pode ter terminado inesperadamente.",
                details=str(e),
            ) from e
        self.sent += 1


class OutputMonitor:
    """
    Leitor único do stream mesclado stdout/stderr.

    Cada bloco lido é usado duas vezes: as linhas completas vão limpas para
    o console e os mesmos bytes alimentam o detector do prompt.
    """

    def __init__(
        self,
        matcher: PromptMatcher,
        responder: PromptResponder,
        echo: Callable[[str], None],
        chunk_size: int = CHUNK_SIZE,
    ):
        self.matcher = matcher
        self.responder = responder
        self.echo = echo
        self.chunk_size = chunk_size

        self.assembler = LineAssembler()
        self.total_lines = 0
        self.prompt_detected = False

    def _emit(self, line: str) -> None:
        self.total_lines += 1
        self.echo(strip_ansi(line))

    def _on_prompt(self) -> None:
        self.prompt_detected = True
        log.success(f"Prompt detectado: {self.matcher.pattern}")

        self.responder.send()
        log.info("Tecla Enter enviada para a VM")

    def feed(self, chunk: bytes) -> None:
        """Processa um bloco, na ordem em que os bytes chegaram."""
        for piece in split_keepends(chunk):
            for line in self.assembler.feed(piece):
                self._emit(line)

            if self.matcher.feed(piece):
                self._on_prompt()

    def consume(self, stream: IO[bytes]) -> None:
        """Lê o stream até EOF. Bloqueante, roda fora do event loop."""
        try:
            while True:
                chunk = stream.read(self.chunk_size)
                if not chunk:
                    break
                self.feed(chunk)
        finally:
            rest = self.assembler.flush()
            if rest is not None:
                self._emit(rest)


def close_stream(stream: Optional[IO[bytes]]) -> None:
    """Fecha o handle se ainda estiver aberto."""
    if stream is not None and not stream.closed:
        stream.close()


@dataclass
class RunResult:
    """Resultado da execução."""
    exit_code: Optional[int]
    runtime_ms: int
    prompt_detected: bool = False
    total_lines: int = 0
    failure: Optional[FailureKind] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.failure is None


class VmSession:
    """
    Uma execução do QEMU, do spawn até o processo terminar.

    Falha no spawn é propagada (SpawnError). Qualquer falha depois disso é
    registrada no resultado e os dois pipes são fechados.
    """

    def __init__(
        self,
        config: VmConfig,
        launcher: Optional[QemuLauncher] = None,
        echo: Optional[Callable[[str], None]] = None,
    ):
        self.config = config
        self.launcher = launcher or QemuLauncher()
        self.echo = echo or (lambda line: echo_line(config.output.tag, line))

    async def run(self) -> RunResult:
        start_time = time.time()

        serial_log = None
        if self.config.output.serial_log:
            try:
                serial_log = open(self.config.output.serial_log, "a", encoding="utf-8")
            except OSError as e:
                raise ConfigError(
                    f"Não foi possível abrir o log serial: {self.config.output.serial_log}",
                    details=str(e),
                ) from e

        try:
            process = self.launcher.spawn(build_command(self.config))
        except Exception:
            if serial_log:
                serial_log.close()
            raise

        stdin, stdout = process.stdin, process.stdout

        def echo(line: str) -> None:
            self.echo(line)
            if serial_log:
                serial_log.write(line + "\n")

        monitor = OutputMonitor(
            PromptMatcher(self.config.prompt.pattern),
            PromptResponder(stdin, self.config.prompt.response),
            echo,
        )

        failure: Optional[FailureKind] = None
        error: Optional[str] = None

        log.info("Lendo saída do QEMU...")
        loop = asyncio.get_running_loop()

        try:
            await loop.run_in_executor(None, monitor.consume, stdout)
        except PipeClosedError as e:
            failure, error = e.kind, e.message
            log.error(e.message)
        except OSError as e:
            failure, error = FailureKind.IO, str(e)
            log.error(f"Erro de E/S: {e}")
        except Exception as e:
            failure, error = FailureKind.UNEXPECTED, str(e)
            log.error(f"Ocorreu um erro inesperado: {e}")
        finally:
            close_stream(stdin)
            close_stream(stdout)
            if serial_log:
                serial_log.close()

            # Sem timeout: o processo é sempre aguardado, mesmo após falha
            exit_code = await loop.run_in_executor(None, process.wait)

        log.debug(f"QEMU terminou com código {exit_code}")

        return RunResult(
            exit_code=exit_code,
            runtime_ms=int((time.time() - start_time) * 1000),
            prompt_detected=monitor.prompt_detected,
            total_lines=monitor.total_lines,
            failure=failure,
            error=error,
        )
