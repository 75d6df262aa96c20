import gzip

import pytest

from seqatlas.core.input import read_sequences, load_cost_table


def test_one_sequence_per_line(tmp_path):
    p = tmp_path / "peptides.txt"
    p.write_text("# cdr3 list\nCASSLGQ\n\nCASSLGE extra\nCASSLGQ\n")
    assert read_sequences(str(p)) == ["CASSLGQ", "CASSLGE", "CASSLGQ"]


def test_sequences_from_column(tmp_path):
    p = tmp_path / "clones.tsv"
    p.write_text("id\tcdr3\tcount\nc1\tCASSLGQ\t10\nc2\t\t3\nc3\tcassl\t1\n")
    # blank cells dropped, case preserved
    assert read_sequences(str(p), column="cdr3") == ["CASSLGQ", "cassl"]


def test_sequences_from_gzipped_csv(tmp_path):
    p = tmp_path / "clones.csv.gz"
    with gzip.open(p, "wt") as fh:
        fh.write("id,cdr3\nc1,CASS\nc2,CASR\n")
    assert read_sequences(str(p), column="cdr3") == ["CASS", "CASR"]


def test_missing_column(tmp_path):
    p = tmp_path / "clones.tsv"
    p.write_text("id\tcdr3\nc1\tCASS\n")
    with pytest.raises(ValueError, match="not found"):
        read_sequences(str(p), column="junction")


def test_no_sequences(tmp_path):
    p = tmp_path / "empty.txt"
    p.write_text("# nothing here\n\n")
    with pytest.raises(ValueError):
        read_sequences(str(p))


def test_square_cost_table(tmp_path):
    p = tmp_path / "costs.tsv"
    p.write_text("\tA\tC\tD\nA\t0\t1\t2\nC\t1\t0\t0.5\nD\t3\t0.5\t0\n")
    table = load_cost_table(str(p))
    assert table.alphabet == ("A", "C", "D")
    assert table.cost("A", "D") == 2.0
    assert table.cost("D", "A") == 3.0
    assert not table.is_symmetric()


def test_two_letter_square_table_is_not_melted(tmp_path):
    p = tmp_path / "costs.csv"
    p.write_text(",A,B\nA,0,0.25\nB,0.25,0\n")
    table = load_cost_table(str(p))
    assert table.alphabet == ("A", "B")
    assert table.cost("A", "B") == 0.25


def test_melted_cost_table(tmp_path):
    p = tmp_path / "costs_melted.csv"
    p.write_text("from,to,penalty\nA,B,0.5\nB,A,0.75\n")
    table = load_cost_table(str(p))
    assert table.alphabet == ("A", "B")
    assert table.cost("A", "B") == 0.5
    assert table.cost("B", "A") == 0.75
    assert table.cost("A", "A") == 0.0


def test_melted_cost_table_with_gap(tmp_path):
    p = tmp_path / "costs_melted.tsv"
    p.write_text("source\ttarget\tcost\nA\tB\t1\nB\tA\t1\nA\tC\t1\n")
    with pytest.raises(ValueError):
        load_cost_table(str(p))


def test_non_numeric_cost(tmp_path):
    p = tmp_path / "costs.tsv"
    p.write_text("\tA\tB\nA\t0\tx\nB\t1\t0\n")
    with pytest.raises(ValueError):
        load_cost_table(str(p))


def test_whitespace_square_table_without_leading_cell(tmp_path):
    p = tmp_path / "costs.txt"
    p.write_text("   A  C  D\nA  0  1  2\nC  1  0  3\nD  2  3  0\n")
    table = load_cost_table(str(p))
    assert table.alphabet == ("A", "C", "D")
    assert table.cost("A", "D") == 2.0
    assert table.cost("C", "D") == 3.0


def test_blosum_style_table_with_comments(tmp_path):
    p = tmp_path / "costs.mat"
    p.write_text(
        "#  Residue substitution penalties\n"
        "#  rows = source, columns = target\n"
        "   A    C    D    E\n"
        "A  0    1    2    2\n"
        "C  1    0    3    3\n"
        "D  2    3    0    0.5\n"
        "E  2    3    0.5  0\n"
    )
    table = load_cost_table(str(p))
    assert table.alphabet == ("A", "C", "D", "E")
    assert table.cost("D", "E") == 0.5
    assert table.cost("A", "C") == 1.0
    assert table.is_symmetric()


def test_tab_table_after_comment_line(tmp_path):
    p = tmp_path / "costs.tsv"
    p.write_text("# cost table\n\tA\tB\nA\t0\t1\nB\t2\t0\n")
    table = load_cost_table(str(p))
    assert table.alphabet == ("A", "B")
    assert table.cost("B", "A") == 2.0
