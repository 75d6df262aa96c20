"""On-disk reuse of computed distance matrices.

A cached matrix is valid for exactly one (ordered sequence list, cost table)
combination; the file name is a digest of both, so a changed input simply
misses the cache.
"""

import hashlib
import shutil
from pathlib import Path

import numpy as np
from rich.console import Console

from seqatlas.core.distances import DistanceMatrix

console = Console()


def matrix_cache_key(sequences, cost_table):
    """SHA-256 hex digest of the ordered sequences and the cost table."""
    h = hashlib.sha256()
    h.update(cost_table.fingerprint().encode('ascii'))
    for seq in sequences:
        data = seq.encode('utf-8')
        h.update(len(data).to_bytes(8, 'little'))
        h.update(data)
    return h.hexdigest()


class MatrixCache:
    """Directory of `<key>.npy` distance matrices."""

    def __init__(self, cache_dir):
        self.cache_dir = Path(cache_dir)

    def path_for(self, sequences, cost_table):
        return self.cache_dir / f'distance_matrix.{matrix_cache_key(sequences, cost_table)}.npy'

    def load(self, sequences, cost_table):
        """Return the cached DistanceMatrix for this batch, or None."""
        sequences = tuple(sequences)
        path = self.path_for(sequences, cost_table)
        if not path.exists():
            return None
        try:
            values = np.load(path, allow_pickle=False)
        except (OSError, ValueError) as e:
            console.print(f'  [yellow]⚠[/yellow] Ignoring unreadable cache {path.name}: {e}')
            return None
        if values.shape != (len(sequences), len(sequences)):
            console.print(f'  [yellow]⚠[/yellow] Ignoring cache {path.name} with shape {values.shape}')
            return None
        console.print(f'  [green]✓[/green] Loaded cached distance matrix {path.name}')
        return DistanceMatrix(values, sequences)

    def save(self, matrix, cost_table):
        """Write the matrix; returns the path, or None if it could not be cached."""
        path = self.path_for(matrix.labels, cost_table)

        # Need 50% extra margin
        needed = matrix.values.nbytes * 1.5
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            available = shutil.disk_usage(str(self.cache_dir)).free
            if available < needed:
                console.print(f'  [yellow]⚠[/yellow] Insufficient disk space for cache ({available / 1e9:.1f} GB available, {needed / 1e9:.1f} GB needed)')
                return None
            np.save(path, matrix.values)
        except OSError as e:
            console.print(f'  [yellow]⚠[/yellow] Could not cache distance matrix: {e}')
            return None
        console.print(f'  [green]✓[/green] Cached distance matrix to {path}')
        return path

    def clear(self):
        """Delete every cached matrix; returns how many files were removed."""
        if not self.cache_dir.exists():
            return 0
        removed = 0
        for path in self.cache_dir.glob('distance_matrix.*.npy'):
            path.unlink()
            removed += 1
        return removed


__all__ = ['matrix_cache_key', 'MatrixCache']
