"""Weighted edit distance (Wagner-Fischer) between two sequences.

Insertions and deletions cost 1. Substituting source symbol a with target
symbol b costs 0 when a == b and cost_table.cost(a, b) otherwise. The table
need not be symmetric, so neither is the distance in general.

The kernel works on int32 symbol indices (see SubstitutionCostTable.encode)
and rolls two DP rows instead of keeping the full (m+1) x (n+1) table; the
values produced are the same. fastmath stays off so that the batch path in
distances.py reproduces distance() bit for bit.
"""

import numpy as np
import numba as nb


@nb.njit(cache=True)
def weighted_levenshtein(s, t, costs):
    """Weighted edit distance between encoded sequences.

    Parameters:
        s: int32 array of source symbol indices (length m)
        t: int32 array of target symbol indices (length n)
        costs: float64 (k x k) substitution costs, costs[a, b] for a -> b

    Returns:
        float: D[m][n]
    """
    m = s.shape[0]
    n = t.shape[0]
    prev = np.empty(n + 1, dtype=np.float64)
    curr = np.empty(n + 1, dtype=np.float64)
    for j in range(n + 1):
        prev[j] = np.float64(j)

    for i in range(1, m + 1):
        curr[0] = np.float64(i)
        a = s[i - 1]
        for j in range(1, n + 1):
            b = t[j - 1]
            if a == b:
                sub = prev[j - 1]
            else:
                sub = prev[j - 1] + costs[a, b]
            best = prev[j] + 1.0        # deletion
            ins = curr[j - 1] + 1.0     # insertion
            if ins < best:
                best = ins
            if sub < best:
                best = sub
            curr[j] = best
        prev, curr = curr, prev

    return prev[n]


@nb.njit(cache=True)
def pairwise_rows(flat, offsets, costs, s, e, out):
    """Fill out[i, j] for s <= i < e and j < i.

    Sequence k is flat[offsets[k]:offsets[k + 1]]. Cell (i, j) holds the
    distance from sequence j (source) to sequence i (target), i.e. the
    distance of the pair in increasing index order.
    """
    for i in range(s, e):
        target = flat[offsets[i]:offsets[i + 1]]
        for j in range(i):
            source = flat[offsets[j]:offsets[j + 1]]
            out[i, j] = weighted_levenshtein(source, target, costs)


def distance(s, t, cost_table):
    """Weighted edit distance to transform sequence `s` into `t`.

    Parameters:
        s, t: Sequences (str) over the cost table alphabet
        cost_table: SubstitutionCostTable

    Returns:
        float: Minimum total cost of insertions, deletions and substitutions

    Raises:
        UnknownSymbolError: If s or t contains a symbol outside the alphabet
    """
    return float(weighted_levenshtein(cost_table.encode(s), cost_table.encode(t), cost_table.costs))


__all__ = [
    'distance',
    'weighted_levenshtein',
    'pairwise_rows',
]
