"""Core algorithms for sequence dissimilarity computation.

Submodules:
- costs: Substitution cost tables
- editdistance: Weighted edit distance kernel
- distances: Distance matrix assembly
- input: Sequence and cost table loading
- cache: Reuse of computed matrices
"""

__all__ = ['costs', 'editdistance', 'distances', 'input', 'cache']
