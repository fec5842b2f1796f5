"""
Omniboot Core - Logging estruturado com Rich
"""

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme
from rich.logging import RichHandler
import logging

# Tema customizado do Omniboot
OMNIBOOT_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red bold",
    "success": "green",
    "debug": "dim",
    "header": "cyan bold",
    "tag": "magenta",
})

# Console global
console = Console(theme=OMNIBOOT_THEME)


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configura logging global com Rich."""
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


class OmnibootLogger:
    """Logger estruturado para o Omniboot."""

    def __init__(self, name: str = "omniboot"):
        self._logger = logging.getLogger(name)

    def header(self, title: str) -> None:
        """Imprime cabeçalho de seção."""
        console.print()
        console.print("=" * 50, style="cyan")
        console.print(f"   {escape(title)}", style="header")
        console.print("=" * 50, style="cyan")

    def info(self, message: str, **kwargs) -> None:
        """Log informativo."""
        console.print(f"[info]ℹ️  {escape(message)}[/info]", **kwargs)

    def success(self, message: str, **kwargs) -> None:
        """Log de sucesso."""
        console.print(f"[success]✓ {escape(message)}[/success]", **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log de aviso."""
        console.print(f"[warning]⚠️  {escape(message)}[/warning]", **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log de erro."""
        console.print(f"[error]✗ {escape(message)}[/error]", **kwargs)

    def debug(self, message: str) -> None:
        """Log de debug (só aparece com --verbose)."""
        self._logger.debug(message)

    def step(self, message: str, **kwargs) -> None:
        """Log de passo do processo."""
        console.print(f"  → {escape(message)}", style="dim", **kwargs)


def echo_line(tag: str, line: str) -> None:
    """Imprime uma linha do processo filho com o prefixo de origem."""
    console.print(f"[tag]{escape(tag)}:[/tag] {escape(line)}", highlight=False)


# Logger global
log = OmnibootLogger()
