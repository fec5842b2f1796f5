"""
Omniboot Core - Configuração centralizada da VM
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional
import toml

from core.exceptions import ConfigError


CONFIG_FILENAME = "omniboot.toml"


@dataclass
class DriveConfig:
    """Disco de apoio e o dispositivo virtual ao qual está ligado."""
    id: str
    file: str
    format: str
    device: str
    bootindex: int
    interface: str = "none"
    cache: Optional[str] = None
    discard: Optional[str] = None
    media: Optional[str] = None
    readonly: bool = False


@dataclass
class PortForward:
    """Redirecionamento de porta host → guest."""
    host_port: int
    guest_port: int
    protocol: str = "tcp"
    host_addr: str = ""
    guest_addr: str = ""


@dataclass
class NetworkConfig:
    """Configuração de rede."""
    id: str = "user.0"
    backend: str = "user"
    device: str = "virtio-net"
    forwards: list[PortForward] = field(
        default_factory=lambda: [PortForward(host_port=3969, guest_port=22)]
    )


@dataclass
class ResourceConfig:
    """CPU e memória."""
    smp: int = 4
    memory: str = "8192M"
    cpu: str = "max"


@dataclass
class DisplayConfig:
    """Vídeo, console serial e monitor."""
    nographic: bool = True
    serial: str = "stdio"
    vnc: str = "127.0.0.1:38"
    monitor: str = "none"


@dataclass
class PromptConfig:
    """Prompt esperado e resposta enviada."""
    pattern: str = "Please select a keyboard layout"
    response: str = "\n"


@dataclass
class OutputConfig:
    """Saída no console."""
    tag: str = "QEMU"
    serial_log: Optional[str] = None


def _default_drives() -> list[DriveConfig]:
    return [
        DriveConfig(
            id="drive0",
            file="output/omnios-r151056-x86-64.qcow2",
            format="qcow2",
            device="virtio-blk",
            bootindex=0,
            cache="writeback",
            discard="ignore",
        ),
        DriveConfig(
            id="drive1",
            file="packer_cache/6eb4fe732afd393754f2e072fd4ea4137e8898e5.iso",
            format="raw",
            device="ide-cd",
            bootindex=1,
            media="disk",
            readonly=True,
        ),
    ]


@dataclass
class VmConfig:
    """Configuração principal do Omniboot."""
    binary: str = "/opt/homebrew/bin/qemu-system-x86_64"
    name: str = "omnios-r151056-x86-64.qcow2"
    machine: str = "type=q35"
    boot: str = "strict=off"
    drives: list[DriveConfig] = field(default_factory=_default_drives)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    resources: ResourceConfig = field(default_factory=ResourceConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    accelerators: list[str] = field(default_factory=lambda: ["hvf", "kvm", "tcg"])
    extra_args: list[str] = field(default_factory=list)
    prompt: PromptConfig = field(default_factory=PromptConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any], config_path: Path) -> "VmConfig":
        """Cria configuração a partir de dicionário."""
        data = dict(data)

        # Tabelas aninhadas
        network_data = dict(data.pop("network", {}))
        forwards_data = network_data.pop("forwards", None)
        network = _build(NetworkConfig, network_data, config_path, "network")
        if forwards_data is not None:
            network.forwards = [
                _build(PortForward, fwd, config_path, "network.forwards")
                for fwd in forwards_data
            ]

        drives_data = data.pop("drives", None)
        drives = (
            [_build(DriveConfig, d, config_path, "drives") for d in drives_data]
            if drives_data is not None
            else _default_drives()
        )

        resources = _build(ResourceConfig, data.pop("resources", {}), config_path, "resources")
        display = _build(DisplayConfig, data.pop("display", {}), config_path, "display")
        prompt = _build(PromptConfig, data.pop("prompt", {}), config_path, "prompt")
        output = _build(OutputConfig, data.pop("output", {}), config_path, "output")

        if not prompt.pattern:
            raise ConfigError(f"{config_path}: prompt.pattern não pode ser vazio")

        # Chaves de topo ([qemu])
        qemu_data = data.pop("qemu", {})
        if data:
            raise ConfigError(
                f"{config_path}: seções desconhecidas: {', '.join(sorted(data))}"
            )

        return _build(
            cls,
            qemu_data,
            config_path,
            "qemu",
            drives=drives,
            network=network,
            resources=resources,
            display=display,
            prompt=prompt,
            output=output,
        )


def _build(kind: type, data: dict[str, Any], config_path: Path, section: str, **extra: Any) -> Any:
    """Instancia dataclass validando as chaves da seção."""
    allowed = {f.name for f in fields(kind)} - set(extra)
    unknown = set(data) - allowed
    if unknown:
        raise ConfigError(
            f"{config_path}: chaves desconhecidas em [{section}]: {', '.join(sorted(unknown))}"
        )

    try:
        return kind(**data, **extra)
    except TypeError as e:
        raise ConfigError(f"{config_path}: seção [{section}] inválida", details=str(e))


def load_config(config_path: Path | None = None) -> VmConfig:
    """
    Carrega configuração do arquivo TOML.

    Se não especificado, procura omniboot.toml no diretório atual e na raiz
    do projeto. Sem arquivo, usa os valores padrão.
    """
    if config_path is None:
        search_paths = [
            Path.cwd() / CONFIG_FILENAME,
            Path(__file__).parent.parent.parent / CONFIG_FILENAME,
        ]

        for path in search_paths:
            if path.exists():
                config_path = path
                break
        else:
            return VmConfig()

    if not config_path.exists():
        raise ConfigError(f"Arquivo de configuração não encontrado: {config_path}")

    try:
        data = toml.load(config_path)
    except toml.TomlDecodeError as e:
        raise ConfigError(f"Erro ao parsear {config_path}: {e}")

    return VmConfig.from_dict(data, config_path)
