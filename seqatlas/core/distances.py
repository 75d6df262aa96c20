"""Dissimilarity matrix assembly for sequence batches.

Every unordered pair i < j is evaluated exactly once with the weighted edit
distance kernel and written to both (i, j) and (j, i). Large batches are split
across a multiprocessing pool; workers attach shared arrays, fill disjoint
rows of the lower triangle, and the parent mirrors it after the pool returns.
"""

import multiprocessing as mp
from dataclasses import dataclass
from tempfile import NamedTemporaryFile
from typing import Tuple

import numpy as np
import pandas as pd
import SharedArray as sa
from scipy.spatial.distance import squareform
from rich.console import Console

from seqatlas.core.editdistance import pairwise_rows

console = Console()

# Below this many pairs the pool start-up costs more than it saves
MIN_PARALLEL_PAIRS = 64


@dataclass(frozen=True, eq=False)
class DistanceMatrix:
    """Symmetric zero-diagonal dissimilarity matrix labelled by sequence.

    Labels are positional: duplicated sequences keep their own row/column.
    """

    values: np.ndarray
    labels: Tuple[str, ...]

    def __post_init__(self):
        values = np.array(self.values, dtype=np.float64)
        n = len(self.labels)
        if values.shape != (n, n):
            raise ValueError(f'Matrix shape {values.shape} does not match {n} labels')
        values.setflags(write=False)
        object.__setattr__(self, 'values', values)
        object.__setattr__(self, 'labels', tuple(self.labels))

    def __len__(self):
        return len(self.labels)

    def __getitem__(self, key):
        i, j = key
        return float(self.values[i, j])

    def __eq__(self, other):
        if not isinstance(other, DistanceMatrix):
            return NotImplemented
        return self.labels == other.labels and np.array_equal(self.values, other.values)

    __hash__ = None

    def condensed(self):
        """Upper triangle as a scipy condensed distance vector."""
        return squareform(self.values, force='tovector', checks=False)

    def to_frame(self):
        return pd.DataFrame(self.values, index=list(self.labels), columns=list(self.labels))


def build_distance_matrix(sequences, cost_table, nproc=1, pool=None):
    """Compute the weighted edit distance for every pair of sequences.

    Parameters:
        sequences: Ordered sequences (str); duplicates are kept positionally
        cost_table: SubstitutionCostTable shared read-only by all pairs
        nproc (int): Worker processes to start when no pool is given
        pool: Optional multiprocessing.Pool to reuse (not closed here)

    Returns:
        DistanceMatrix: values[i, j] == values[j, i] == distance(sequences[i], sequences[j])
                        for i < j, zero diagonal

    Raises:
        UnknownSymbolError: If any sequence has a symbol outside the alphabet.
                            Nothing is returned for the batch in that case.
    """
    labels = tuple(sequences)
    n = len(labels)
    if n < 2:
        return DistanceMatrix(np.zeros((n, n), dtype=np.float64), labels)

    encoded = [cost_table.encode(seq) for seq in labels]
    offsets = np.zeros(n + 1, dtype=np.int64)
    offsets[1:] = np.cumsum([len(e) for e in encoded])
    flat = np.concatenate(encoded).astype(np.int32, copy=False)
    costs = cost_table.costs

    n_pairs = n * (n - 1) // 2
    parallel = pool is not None or (nproc > 1 and n_pairs >= MIN_PARALLEL_PAIRS)

    if not parallel:
        lower = np.zeros((n, n), dtype=np.float64)
        pairwise_rows(flat, offsets, costs, 0, n, lower)
    elif pool is not None:
        lower = _parallel_lower(flat, offsets, costs, n, pool)
    else:
        console.print(f'  Computing {n_pairs:,} pairwise distances with {nproc} processes...')
        own_pool = mp.get_context('fork').Pool(nproc)
        try:
            lower = _parallel_lower(flat, offsets, costs, n, own_pool)
        except KeyboardInterrupt:
            console.print('  [yellow]⚠[/yellow] Interrupted, discarding partial distance matrix')
            own_pool.terminate()
            raise
        finally:
            own_pool.close()
            own_pool.join()

    return DistanceMatrix(lower + lower.T, labels)


def _parallel_lower(flat, offsets, costs, n, pool):
    """Fill the lower triangle in worker processes through shared arrays."""
    n_workers = len(pool._pool)
    chunks = _make_chunks(n, n_workers)

    with NamedTemporaryFile(prefix='seqatlas_') as file:
        prefix = 'file://{0}'.format(file.name)
        flat_buf = '{0}.flat.sa'.format(prefix)
        offsets_buf = '{0}.offsets.sa'.format(prefix)
        costs_buf = '{0}.costs.sa'.format(prefix)
        dist_buf = '{0}.dist.sa'.format(prefix)
        created = []
        try:
            # SharedArray cannot map a zero-length buffer (all sequences empty)
            shared_flat = sa.create(flat_buf, shape=(max(len(flat), 1),), dtype=np.int32)
            created.append(flat_buf)
            shared_flat[:len(flat)] = flat

            shared_offsets = sa.create(offsets_buf, shape=offsets.shape, dtype=np.int64)
            created.append(offsets_buf)
            shared_offsets[:] = offsets

            shared_costs = sa.create(costs_buf, shape=costs.shape, dtype=np.float64)
            created.append(costs_buf)
            shared_costs[:] = costs

            dist = sa.create(dist_buf, shape=(n, n), dtype=np.float64)
            created.append(dist_buf)
            dist[:] = 0

            tasks = [
                (flat_buf, offsets_buf, costs_buf, dist_buf, s, e)
                for s, e in chunks
            ]
            # starmap returning is the barrier: every row block has been written
            pool.starmap(_worker_task, tasks)

            result = np.array(dist)
        finally:
            for name in created:
                sa.delete(name)

    return result


def _worker_task(flat_buf, offsets_buf, costs_buf, dist_buf, s, e):
    """Attach the shared arrays and fill rows [s, e) of the lower triangle."""
    flat = sa.attach(flat_buf)
    offsets = sa.attach(offsets_buf)
    costs = sa.attach(costs_buf)
    dist = sa.attach(dist_buf)
    try:
        pairwise_rows(flat, offsets, costs, s, e, dist)
    finally:
        del flat, offsets, costs, dist


def _make_chunks(n, n_workers):
    """Split rows [1, n) into contiguous ranges holding similar pair counts.

    Row i of the lower triangle has i pairs, so equal-width ranges would leave
    the last worker with most of the work. Row 0 has no pairs and is skipped.

    Returns:
        List of non-empty (s, e) tuples covering [1, n)
    """
    total = n * (n - 1) // 2
    if n < 2 or total == 0:
        return []
    n_workers = max(1, min(n_workers, n - 1))
    target = total / n_workers
    ranges = []
    s = 1
    done = 0
    for w in range(1, n_workers):
        e = s
        while e < n and done + e <= target * w:
            done += e
            e += 1
        if e > s:
            ranges.append((s, e))
            s = e
    if s < n:
        ranges.append((s, n))
    return ranges


__all__ = [
    'DistanceMatrix',
    'build_distance_matrix',
]
