"""
Omniboot Runner - Configuração e lançamento do QEMU
"""

import shlex
import subprocess
from typing import Optional

from core.config import DriveConfig, NetworkConfig, VmConfig
from core.exceptions import SpawnError
from core.logger import log


def _drive_spec(drive: DriveConfig) -> str:
    parts = [f"if={drive.interface}", f"file={drive.file}", f"id={drive.id}"]
    if drive.cache:
        parts.append(f"cache={drive.cache}")
    if drive.discard:
        parts.append(f"discard={drive.discard}")
    if drive.media:
        parts.append(f"media={drive.media}")
    parts.append(f"format={drive.format}")
    if drive.readonly:
        parts.append("readonly=on")
    return ",".join(parts)


def _netdev_spec(network: NetworkConfig) -> str:
    parts = [network.backend, f"id={network.id}"]
    for fwd in network.forwards:
        parts.append(
            f"hostfwd={fwd.protocol}:{fwd.host_addr}:{fwd.host_port}"
            f"-{fwd.guest_addr}:{fwd.guest_port}"
        )
    return ",".join(parts)


def build_args(config: VmConfig) -> list[str]:
    """
    Constrói a lista de argumentos do QEMU.

    A ordem é fixa: console, discos, dispositivos de boot, VNC, identidade,
    rede, recursos, monitor e por fim a lista de aceleradores.
    """
    display = config.display
    args: list[str] = []

    if display.nographic:
        args.append("-nographic")
    args += ["-serial", display.serial]

    # Discos e dispositivos
    for drive in config.drives:
        args += ["-drive", _drive_spec(drive)]
    for drive in config.drives:
        args += ["-device", f"{drive.device},drive={drive.id},bootindex={drive.bootindex}"]

    if display.vnc:
        args += ["-vnc", display.vnc]

    args += [
        "-name", config.name,
        "-machine", config.machine,
        "-boot", config.boot,
    ]

    # Rede
    network = config.network
    args += [
        "-device", f"{network.device},netdev={network.id}",
        "-netdev", _netdev_spec(network),
    ]

    # Recursos
    resources = config.resources
    args += [
        "-smp", str(resources.smp),
        "-m", resources.memory,
        "-cpu", resources.cpu,
        "-monitor", display.monitor,
    ]

    for accel in config.accelerators:
        args += ["-accel", accel]

    args += config.extra_args
    return args


def build_command(config: VmConfig) -> list[str]:
    """Binário seguido dos argumentos."""
    return [config.binary, *build_args(config)]


class QemuLauncher:
    """Inicia o processo do QEMU com stdout e stderr mesclados."""

    def __init__(self):
        self.process: Optional[subprocess.Popen] = None

    def spawn(self, command: list[str]) -> subprocess.Popen:
        """
        Inicia o processo filho.

        Retorna com o processo já em execução. Pipes binários sem buffer:
        stdin para escrita, stdout recebendo também o stderr.
        """
        log.debug(f"Comando: {shlex.join(command)}")

        try:
            self.process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                bufsize=0,
            )
        except OSError as e:
            raise SpawnError(
                f"Não foi possível iniciar {command[0]}",
                executable=command[0],
                details=str(e),
            ) from e

        log.success(f"QEMU iniciado (PID: {self.process.pid})")
        return self.process
