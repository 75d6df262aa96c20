"""Pipeline configuration, validation and summary output."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console

from seqatlas.cluster.linkage import LINKAGE_METHODS

console = Console()


@dataclass
class DistanceConfig:
    """Configuration for the distance pipeline."""

    # Required
    sequences: str
    cost_table: str
    outdir: str

    # Input
    sequence_column: Optional[str] = None  # If None, one sequence per line

    # Clustering hand-off
    linkage_method: Optional[str] = None  # If None, no linkage is computed

    # General
    force_recompute: bool = False
    use_cache: bool = True
    nproc: int = 1


def validate_config(config):
    """Validate a DistanceConfig object.

    Parameters:
        config: DistanceConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    errors = []

    if not config.sequences:
        errors.append("sequences is required")
    elif not Path(config.sequences).exists():
        errors.append(f"Sequence file not found: {config.sequences}")

    if not config.cost_table:
        errors.append("cost_table is required")
    elif not Path(config.cost_table).exists():
        errors.append(f"Cost table file not found: {config.cost_table}")

    if not config.outdir:
        errors.append("outdir is required")

    if config.nproc < 1:
        errors.append("nproc must be >= 1")

    if config.linkage_method is not None and config.linkage_method not in LINKAGE_METHODS:
        errors.append(f"linkage_method must be one of: {list(LINKAGE_METHODS)}")

    if errors:
        console.print("[bold red]Configuration Errors:[/bold red]")
        for error in errors:
            console.print(f"  ✗ {error}")
        raise ValueError(f"Invalid configuration: {len(errors)} error(s)")

    console.print("[green]✓[/green] Configuration validated")


def print_config_summary(config):
    """Print a summary of the configuration."""
    console.print("\n[bold]Configuration Summary:[/bold]")
    console.print(f"  Sequences: {config.sequences}")
    console.print(f"  Sequence column: {config.sequence_column or 'one per line'}")
    console.print(f"  Cost table: {config.cost_table}")
    console.print(f"  Output: {config.outdir}")
    console.print(f"  Linkage: {config.linkage_method or 'none'}")
    console.print(f"  Processes: {config.nproc}")
    console.print(f"  Cache: {'off' if not config.use_cache else ('refresh' if config.force_recompute else 'on')}")


__all__ = [
    'DistanceConfig',
    'validate_config',
    'print_config_summary',
]
