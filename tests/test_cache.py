from types import SimpleNamespace

import numpy as np

from seqatlas.core import cache
from seqatlas.core.cache import MatrixCache, matrix_cache_key
from seqatlas.core.costs import SubstitutionCostTable
from seqatlas.core.distances import build_distance_matrix

SEQUENCES = ["CASSLGQ", "CASSLGE", "CASR", "CASSLGQ"]


def table():
    return SubstitutionCostTable.uniform("ACEGLQRS", cost=0.5)


def test_key_depends_on_order_and_costs():
    key = matrix_cache_key(SEQUENCES, table())
    assert key == matrix_cache_key(list(SEQUENCES), table())
    assert key != matrix_cache_key(list(reversed(SEQUENCES)), table())
    assert key != matrix_cache_key(SEQUENCES, SubstitutionCostTable.uniform("ACEGLQRS"))
    # concatenation must not collide
    assert matrix_cache_key(["AB", "C"], table()) != matrix_cache_key(["A", "BC"], table())


def test_save_then_load(tmp_path):
    cache = MatrixCache(tmp_path / "cache")
    matrix = build_distance_matrix(SEQUENCES, table())
    assert cache.load(SEQUENCES, table()) is None

    path = cache.save(matrix, table())
    assert path is not None and path.exists()

    loaded = cache.load(SEQUENCES, table())
    assert loaded == matrix
    assert loaded.labels == tuple(SEQUENCES)


def test_wrong_shape_is_ignored(tmp_path):
    cache = MatrixCache(tmp_path)
    np.save(cache.path_for(SEQUENCES, table()), np.zeros((2, 2)))
    assert cache.load(SEQUENCES, table()) is None


def test_clear(tmp_path):
    cache = MatrixCache(tmp_path / "cache")
    assert cache.clear() == 0
    cache.save(build_distance_matrix(SEQUENCES, table()), table())
    cache.save(build_distance_matrix(SEQUENCES[:2], table()), table())
    assert cache.clear() == 2
    assert cache.load(SEQUENCES, table()) is None


def test_low_disk_space_skips_cache(tmp_path, monkeypatch):
    monkeypatch.setattr(cache.shutil, "disk_usage", lambda path: SimpleNamespace(total=100, used=100, free=0))
    store = MatrixCache(tmp_path / "cache")
    matrix = build_distance_matrix(SEQUENCES, table())
    assert store.save(matrix, table()) is None
    assert list((tmp_path / "cache").glob("*.npy")) == []
    assert store.load(SEQUENCES, table()) is None


def test_unusable_cache_dir_skips_cache(tmp_path):
    blocker = tmp_path / "cache"
    blocker.write_text("not a directory")
    store = MatrixCache(blocker)
    matrix = build_distance_matrix(SEQUENCES, table())
    assert store.save(matrix, table()) is None
