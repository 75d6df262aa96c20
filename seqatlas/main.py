"""seqatlas pipeline - main orchestrator

Steps:
1. Input: load sequences and the substitution cost table
2. Distance matrix: reuse a cached matrix or compute all pairs
3. Linkage hand-off (only when a linkage method is configured)
4. Output summary
"""
from pathlib import Path
from typing import Dict, Any

import numpy as np
from rich.console import Console

from seqatlas.config_utils import DistanceConfig, validate_config
from seqatlas.core.input import read_sequences, load_cost_table
from seqatlas.core.distances import build_distance_matrix
from seqatlas.core.cache import MatrixCache
from seqatlas.cluster.linkage import compute_linkage

console = Console()


class DistancePipeline:
    """Orchestrates loading, distance computation and the linkage hand-off."""

    def __init__(self, config: DistanceConfig):
        validate_config(config)
        self.config = config
        self.outdir = Path(config.outdir)
        self.outdir.mkdir(parents=True, exist_ok=True)
        self.cache = MatrixCache(self.outdir / 'cache')

        self.results: Dict[str, Any] = {
            'step_1_input': {},
            'step_2_distances': {},
            'step_3_linkage': {},
            'step_4_summary': {},
        }

    def run(self):
        """Execute the pipeline."""
        console.print("[bold cyan]═══════════════════════════════════════════════════════════[/bold cyan]")
        console.print("[bold cyan]seqatlas - Weighted Edit Distance Matrix[/bold cyan]")
        console.print("[bold cyan]═══════════════════════════════════════════════════════════[/bold cyan]\n")

        try:
            self._step_1_input()
            self._step_2_distance_matrix()
            if self.config.linkage_method is not None:
                self._step_3_linkage()
            self._step_4_summary()

            console.print("\n[bold green]✓[/bold green] Pipeline completed successfully!")
            console.print(f"[bold]Output directory:[/bold] {self.outdir}")

            return self.results

        except Exception as e:
            console.print(f"\n[bold red]✗[/bold red] Pipeline failed: {e}")
            raise

    def _step_1_input(self):
        """Step 1: Load sequences and cost table."""
        console.print("\n[bold]STEP 1: Input[/bold]")
        console.print("─" * 60)

        sequences = read_sequences(self.config.sequences, column=self.config.sequence_column)
        cost_table = load_cost_table(self.config.cost_table)

        self.results['step_1_input'] = {
            'sequences': sequences,
            'cost_table': cost_table,
        }

    def _step_2_distance_matrix(self):
        """Step 2: Compute (or reuse) the pairwise distance matrix."""
        console.print("\n[bold]STEP 2: Distance Matrix[/bold]")
        console.print("─" * 60)

        sequences = self.results['step_1_input']['sequences']
        cost_table = self.results['step_1_input']['cost_table']

        matrix = None
        from_cache = False
        if self.config.use_cache and not self.config.force_recompute:
            matrix = self.cache.load(sequences, cost_table)
            from_cache = matrix is not None

        if matrix is None:
            n = len(sequences)
            console.print(f"  Computing {n * (n - 1) // 2:,} pairwise distances for {n} sequences...")
            matrix = build_distance_matrix(sequences, cost_table, nproc=self.config.nproc)
            console.print("  [green]✓[/green] Distance matrix computed")
            if self.config.use_cache:
                self.cache.save(matrix, cost_table)

        matrix_path = self.outdir / 'distance_matrix.tsv.gz'
        try:
            matrix.to_frame().to_csv(matrix_path, sep='\t', compression='gzip')
            console.print(f"  [green]✓[/green] Saved distance matrix to {matrix_path}")
        except OSError as e:
            console.print(f"  [yellow]⚠[/yellow] Could not save distance matrix: {e}")
            matrix_path = None

        self.results['step_2_distances'] = {
            'distance_matrix': matrix,
            'from_cache': from_cache,
            'matrix_path': str(matrix_path) if matrix_path else None,
        }

    def _step_3_linkage(self):
        """Step 3: Hand the matrix to scipy hierarchical clustering."""
        console.print("\n[bold]STEP 3: Linkage[/bold]")
        console.print("─" * 60)

        matrix = self.results['step_2_distances']['distance_matrix']
        Z = compute_linkage(matrix, self.config.linkage_method)

        linkage_path = self.outdir / 'linkage.npy'
        np.save(linkage_path, Z)
        console.print(f"  [green]✓[/green] Saved linkage to {linkage_path}")

        self.results['step_3_linkage'] = {
            'Z': Z,
            'method': self.config.linkage_method,
            'linkage_path': str(linkage_path),
        }

    def _step_4_summary(self):
        """Step 4: Summarise."""
        console.print("\n[bold]STEP 4: Output Summary[/bold]")
        console.print("─" * 60)

        sequences = self.results['step_1_input']['sequences']
        matrix = self.results['step_2_distances']['distance_matrix']
        condensed = matrix.condensed()

        summary = {
            'config': self.config,
            'outdir': str(self.outdir),
            'n_sequences': len(sequences),
            'n_distinct': len(set(sequences)),
            'n_pairs': len(condensed),
            'from_cache': self.results['step_2_distances']['from_cache'],
        }
        if len(condensed):
            summary['min_distance'] = float(condensed.min())
            summary['max_distance'] = float(condensed.max())
            summary['median_distance'] = float(np.median(condensed))

        console.print("\n[bold]Pipeline Summary:[/bold]")
        console.print(f"  Sequences: {summary['n_sequences']} ({summary['n_distinct']} distinct)")
        console.print(f"  Pairs: {summary['n_pairs']:,}{' (cached)' if summary['from_cache'] else ''}")
        if len(condensed):
            console.print(f"  Distance range: {summary['min_distance']:.2f} - {summary['max_distance']:.2f}")
            console.print(f"  Median distance: {summary['median_distance']:.2f}")

        self.results['step_4_summary'] = summary


def run_pipeline(config: DistanceConfig) -> Dict[str, Any]:
    """Run the complete distance pipeline.

    Parameters:
        config: DistanceConfig object with pipeline settings

    Returns:
        dict: Results from every step
    """
    pipeline = DistancePipeline(config)
    return pipeline.run()


__all__ = [
    'DistancePipeline',
    'run_pipeline',
]
