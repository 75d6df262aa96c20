import gzip

import numpy as np
import pandas as pd
import pytest

from seqatlas.cli import main
from seqatlas.config_utils import DistanceConfig, validate_config
from seqatlas.core.editdistance import distance
from seqatlas.main import run_pipeline


def write_inputs(tmp_path, sequences=("CASSLGQ", "CASSLGE", "CASRQ", "CASSLGQ")):
    seqs = tmp_path / "peptides.txt"
    seqs.write_text("\n".join(sequences) + "\n")
    costs = tmp_path / "costs.csv"
    alphabet = "ACEGLQRS"
    rows = [",".join([""] + list(alphabet))]
    for a in alphabet:
        rows.append(",".join([a] + ["0" if a == b else ("0.5" if {a, b} == {"E", "Q"} else "1") for b in alphabet]))
    costs.write_text("\n".join(rows) + "\n")
    return seqs, costs


def test_run_pipeline(tmp_path):
    seqs, costs = write_inputs(tmp_path)
    config = DistanceConfig(
        sequences=str(seqs),
        cost_table=str(costs),
        outdir=str(tmp_path / "out"),
        linkage_method="average",
    )
    results = run_pipeline(config)

    matrix = results["step_2_distances"]["distance_matrix"]
    table = results["step_1_input"]["cost_table"]
    assert matrix.labels == ("CASSLGQ", "CASSLGE", "CASRQ", "CASSLGQ")
    assert matrix[0, 1] == 0.5
    assert matrix[0, 3] == 0.0
    assert matrix[1, 2] == distance("CASSLGE", "CASRQ", table)
    assert not results["step_2_distances"]["from_cache"]

    with gzip.open(tmp_path / "out" / "distance_matrix.tsv.gz", "rt") as fh:
        written = pd.read_csv(fh, sep="\t", index_col=0)
    assert np.allclose(written.to_numpy(), matrix.values)

    Z = np.load(tmp_path / "out" / "linkage.npy")
    assert Z.shape == (3, 4)
    assert results["step_4_summary"]["n_distinct"] == 3

    again = run_pipeline(config)
    assert again["step_2_distances"]["from_cache"]
    assert again["step_2_distances"]["distance_matrix"] == matrix


def test_force_recompute_skips_cache(tmp_path):
    seqs, costs = write_inputs(tmp_path)
    config = DistanceConfig(sequences=str(seqs), cost_table=str(costs), outdir=str(tmp_path / "out"))
    run_pipeline(config)
    config.force_recompute = True
    assert not run_pipeline(config)["step_2_distances"]["from_cache"]


def test_invalid_config(tmp_path):
    config = DistanceConfig(
        sequences=str(tmp_path / "missing.txt"),
        cost_table=str(tmp_path / "missing.csv"),
        outdir=str(tmp_path / "out"),
        nproc=0,
        linkage_method="upgma",
    )
    with pytest.raises(ValueError, match="4 error"):
        validate_config(config)


def test_cli_success(tmp_path):
    seqs, costs = write_inputs(tmp_path)
    outdir = tmp_path / "cli_out"
    assert main([str(seqs), str(costs), str(outdir), "--linkage", "single", "--no-cache"]) == 0
    assert (outdir / "distance_matrix.tsv.gz").exists()
    assert (outdir / "linkage.npy").exists()
    assert not (outdir / "cache").exists()


def test_cli_unknown_symbol(tmp_path):
    seqs, costs = write_inputs(tmp_path, sequences=("CASSLGQ", "CASSWGQ"))
    assert main([str(seqs), str(costs), str(tmp_path / "out")]) == 1
