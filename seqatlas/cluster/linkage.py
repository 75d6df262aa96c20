"""Hand-off of sequence distance matrices to scipy hierarchical clustering.

The linkage method and any cut level are chosen by the caller; this module
only converts the matrix to condensed form and wraps scipy.
"""

from scipy.cluster.hierarchy import linkage, fcluster
from rich.console import Console

console = Console()

LINKAGE_METHODS = ('single', 'complete', 'average', 'weighted', 'centroid', 'median', 'ward')


def compute_linkage(distance_matrix, method):
    """Compute hierarchical clustering linkage.

    Parameters:
        distance_matrix: DistanceMatrix from build_distance_matrix
        method: Linkage method name (see LINKAGE_METHODS)

    Returns:
        Z: Linkage matrix from scipy.cluster.hierarchy.linkage
    """
    if method not in LINKAGE_METHODS:
        raise ValueError(f'Unknown linkage method {method!r}; expected one of {list(LINKAGE_METHODS)}')
    if len(distance_matrix) < 2:
        raise ValueError('Hierarchical clustering needs at least 2 sequences')

    console.print(f"Computing {method}-linkage hierarchical clustering...")

    Z = linkage(distance_matrix.condensed(), method=method)

    console.print(f"  [green]✓[/green] Linkage computed for {len(distance_matrix)} sequences")

    return Z


def get_clusters_at_distance(Z, distance_threshold):
    """Cluster labels from cutting the dendrogram at a distance threshold."""
    return fcluster(Z, distance_threshold, criterion='distance')


def get_clusters_at_level(Z, n_clusters):
    """Cluster labels for a fixed number of clusters."""
    return fcluster(Z, n_clusters, criterion='maxclust')


__all__ = [
    'LINKAGE_METHODS',
    'compute_linkage',
    'get_clusters_at_distance',
    'get_clusters_at_level',
]
