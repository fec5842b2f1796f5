"""
Omniboot CLI - Interface de linha de comando
"""

import asyncio
import shlex
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from omniboot import __version__
from core.config import load_config, VmConfig
from core.exceptions import ConfigError, SpawnError
from core.logger import log, console, setup_logging
from runner.monitor import VmSession
from runner.qemu import build_command


# CLI App
app = typer.Typer(
    name="omniboot",
    help="Omniboot - Boot OmniOS in QEMU and answer the installer prompt",
    add_completion=False,
)


def get_config(config_path: Optional[Path], qemu: Optional[str] = None) -> VmConfig:
    """Carrega a configuração ou encerra com erro."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        log.error(str(e))
        raise typer.Exit(1)

    if qemu:
        config.binary = qemu
    return config


# ============================================================================
# Run Commands
# ============================================================================

@app.command()
def run(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to omniboot.toml"),
    qemu: Optional[str] = typer.Option(None, "--qemu", "-q", help="QEMU binary to launch"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Launch QEMU, stream its output and answer the keyboard layout prompt."""
    setup_logging(debug=verbose)
    config = get_config(config_path, qemu)
    asyncio.run(_run_async(config))


async def _run_async(config: VmConfig):
    log.header(f"Executando {config.name}")
    log.step(shlex.join(build_command(config)))

    try:
        result = await VmSession(config).run()
    except (SpawnError, ConfigError) as e:
        log.error(str(e))
        raise typer.Exit(1)

    if not result.prompt_detected:
        log.warning(f"Prompt não encontrado: {config.prompt.pattern}")

    # Resumo
    console.print()
    status = "ok" if result.success else result.failure.value
    console.print(
        f"[dim]Runtime: {result.runtime_ms}ms | Linhas: {result.total_lines} | "
        f"Prompt: {'sim' if result.prompt_detected else 'não'} | "
        f"Exit: {result.exit_code} | Status: {status}[/dim]"
    )


@app.command()
def args(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to omniboot.toml"),
    qemu: Optional[str] = typer.Option(None, "--qemu", "-q", help="QEMU binary to launch"),
):
    """Print the QEMU command line without launching it."""
    config = get_config(config_path, qemu)
    console.print(shlex.join(build_command(config)), markup=False, highlight=False, soft_wrap=True)


@app.command()
def show(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to omniboot.toml"),
):
    """Show the resolved VM configuration."""
    config = get_config(config_path)

    table = Table(title=config.name)
    table.add_column("Opção")
    table.add_column("Valor")

    table.add_row("Binário", config.binary)
    table.add_row("Máquina", config.machine)
    table.add_row("CPUs", str(config.resources.smp))
    table.add_row("Memória", config.resources.memory)
    for drive in config.drives:
        mode = "ro" if drive.readonly else "rw"
        table.add_row(f"Disco {drive.id}", f"{drive.file} ({drive.format}, {mode}, boot {drive.bootindex})")
    for fwd in config.network.forwards:
        table.add_row("Porta", f"{fwd.protocol} {fwd.host_port} → {fwd.guest_port}")
    table.add_row("Aceleradores", ", ".join(config.accelerators))
    table.add_row("Prompt", config.prompt.pattern)

    console.print(table)


@app.command()
def version():
    """Show Omniboot version."""
    console.print(f"Omniboot v{__version__}")


if __name__ == "__main__":
    app()
