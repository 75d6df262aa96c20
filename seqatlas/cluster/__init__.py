"""Clustering hand-off for computed distance matrices."""

__all__ = ['linkage']
