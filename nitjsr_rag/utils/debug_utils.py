import os
import sys

import torch
from rich.console import Console, Group
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from .. import config
from ..local_models import select_device


def get_system_info():
    """Python, PyTorch and hardware details for the config panel."""
    py_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

    if torch.cuda.is_available():
        device_info = (
            f"[green]✔ CUDA available[/green]\n  GPU: [bold cyan]{torch.cuda.get_device_name(0)}[/bold cyan]"
            f"\n  CUDA Version: [bold cyan]{torch.version.cuda}[/bold cyan]"
        )
    else:
        device_info = f"[yellow]⚠ No CUDA GPU found. Using {select_device(config.EMBEDDING_DEVICE)}.[/yellow]"

    return {
        "Python Version": py_version,
        "PyTorch Version": torch.__version__,
        "Device Info": device_info,
        "CPU Cores": str(os.cpu_count()),
    }


def log_config_summary(console: Console = None):
    """Print the indexing configuration and environment as a rich Panel."""
    console = console or Console()
    system_info = get_system_info()

    store_text = Text.from_markup(
        f"""[bold]Qdrant:[/bold] [yellow]{config.QDRANT_URL}[/yellow]
[bold]Collection:[/bold] [yellow]{config.QDRANT_COLLECTION}[/yellow]
[bold]Snapshots:[/bold] [dim]{config.SCRAPED_DATA_DIR}[/dim]"""
    )

    embedding_text = Text.from_markup(
        f"""[bold]Model:[/bold] [yellow]{config.EMBEDDING_MODEL_NAME}[/yellow]
[bold]Device:[/bold] [yellow]{config.EMBEDDING_DEVICE}[/yellow]
[bold]Batch Size / Delay:[/bold] [yellow]{config.EMBED_BATCH_SIZE} / {config.EMBED_BATCH_DELAY}s[/yellow]
[bold]Chunks:[/bold] [yellow]{config.CHUNK_SIZE} chars, {config.CHUNK_OVERLAP} overlap[/yellow]"""
    )

    llm_text = Text.from_markup(
        f"""[bold]Model:[/bold] [yellow]{config.OLLAMA_MODEL_NAME}[/yellow]
[bold]Host:[/bold] [yellow]{config.OLLAMA_HOST}[/yellow]
[bold]Context Size:[/bold] [yellow]{config.OLLAMA_NUM_CTX:,}[/yellow]"""
    )

    system_text = Text.from_markup(
        f"""[bold]Python:[/bold] [yellow]{system_info['Python Version']}[/yellow]
[bold]PyTorch:[/bold] [yellow]{system_info['PyTorch Version']}[/yellow]
[bold]CPUs:[/bold] [yellow]{system_info['CPU Cores']}[/yellow]
[bold]Active Device:[/bold]\n{system_info['Device Info']}"""
    )

    config_group = Group(
        Text("Vector Store", style="bold blue"),
        store_text,
        Rule(style="dim"),
        Text("Embedding Model", style="bold blue"),
        embedding_text,
        Rule(style="dim"),
        Text("Generation LLM", style="bold blue"),
        llm_text,
        Rule(style="dim"),
        Text("System Environment", style="bold blue"),
        system_text,
    )

    console.print(Panel(config_group, title="[bold yellow]🚀 Pipeline Configuration[/bold yellow]", border_style="green", expand=False))
