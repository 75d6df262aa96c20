"""seqatlas: weighted edit-distance dissimilarity matrices for sequence clustering."""

from seqatlas.core.costs import SubstitutionCostTable, UnknownSymbolError
from seqatlas.core.editdistance import distance
from seqatlas.core.distances import DistanceMatrix, build_distance_matrix

__version__ = "0.1.0"
__all__ = [
    "SubstitutionCostTable",
    "UnknownSymbolError",
    "distance",
    "DistanceMatrix",
    "build_distance_matrix",
]
