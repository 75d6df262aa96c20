"""Sequence list and substitution cost table loading.

Supports:
- Plain text, one sequence per line (first whitespace-separated field)
- TSV/CSV tables with a header, picking one column of sequences
- Square cost tables (first column = source symbol, header = target symbols),
  tab, comma or whitespace aligned, with or without a leading header cell
- Melted cost tables with source/target/cost columns
- Gzipped/compressed files (.gz, .xz)
"""

import gzip
import lzma

import pandas as pd
from rich.console import Console

from seqatlas.core.costs import SubstitutionCostTable

console = Console()

MELTED_COLUMNS = ('source', 'target', 'cost')


def _compression(path):
    path = str(path)
    if path.endswith('.gz'):
        return 'gzip'
    if path.endswith('.xz'):
        return 'xz'
    return None


def read_table(path, **kwargs):
    """Read a delimited file, trying tab, comma, then whitespace separators.

    Parameters:
        path (str): Path to a .csv/.tsv file, optionally .gz or .xz compressed;
            text after '#' is ignored
        **kwargs: Extra pandas.read_csv arguments

    Returns:
        pandas.DataFrame: The first parse that yields more than one column,
        or the whitespace parse if none does
    """
    read_base = {'dtype': str, 'keep_default_na': False, 'comment': '#', **kwargs}
    compression = _compression(path)
    if compression:
        read_base['compression'] = compression

    for sep in ('\t', ','):
        try:
            df = pd.read_csv(path, **{**read_base, 'sep': sep})
        except (pd.errors.ParserError, UnicodeDecodeError):
            continue
        if df.shape[1] > 1:
            return df

    return pd.read_csv(path, **{**read_base, 'sep': r'\s+', 'engine': 'python'})


def read_sequences(path, column=None):
    """Read an ordered list of sequences.

    Parameters:
        path (str): Input file
        column (str, optional): Column holding the sequences in a tabular
            file with a header. If None the file is read as one sequence per
            line; blank lines and lines starting with '#' are skipped.

    Returns:
        list[str]: Sequences in file order, duplicates kept

    Raises:
        ValueError: If the column is missing or no sequences are found
    """
    if column is None:
        sequences = []
        with _open_text(path) as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                sequences.append(line.split()[0])
    else:
        df = read_table(path)
        if column not in df.columns:
            raise ValueError(f'Column {column!r} not found in {path}; available: {list(df.columns)}')
        values = df[column].astype(str).str.strip()
        sequences = [v for v in values.tolist() if v]

    if not sequences:
        raise ValueError(f'No sequences found in {path}')
    console.print(f'  Loaded {len(sequences)} sequences ({len(set(sequences))} distinct) from {path}')
    return sequences


def _open_text(path):
    compression = _compression(path)
    if compression == 'gzip':
        return gzip.open(path, 'rt')
    if compression == 'xz':
        return lzma.open(path, 'rt')
    return open(path, 'rt')


def load_cost_table(path):
    """Load a substitution cost table from a square or melted file.

    A file whose header is exactly source/target/cost, or that has three
    columns with single-character symbols in the first two, is read as melted
    (one row per ordered pair). Anything else is a square table whose first
    column holds the source symbols. BLOSUM-style files, whose header row
    has no leading cell, are square tables as well.

    Returns:
        SubstitutionCostTable
    """
    df = read_table(path)
    if df.shape[0] == 0:
        raise ValueError(f'Empty cost table: {path}')

    if not isinstance(df.index, pd.RangeIndex):
        # header one field short: pandas already took the first column as the index
        square = df.apply(pd.to_numeric)
        layout = 'square'
    elif _looks_melted(df):
        square = None
        layout = 'melted'
    else:
        square = df.set_index(df.columns[0]).apply(pd.to_numeric)
        layout = 'square'

    if square is None:
        renamed = df.copy()
        renamed.columns = list(MELTED_COLUMNS)
        table = SubstitutionCostTable.from_melted(renamed)
    else:
        square.index = square.index.astype(str).str.strip()
        square.columns = [str(c).strip() for c in square.columns]
        table = SubstitutionCostTable.from_frame(square)

    symmetric = 'symmetric' if table.is_symmetric() else 'asymmetric'
    console.print(f'  Loaded {layout} {symmetric} cost table over {len(table)} symbols from {path}')
    return table


def _looks_melted(df):
    if df.shape[1] != 3:
        return False
    if [str(c).strip().lower() for c in df.columns] == list(MELTED_COLUMNS):
        return True
    # A square table over a two-letter alphabet also has three columns; its
    # header repeats the row symbols.
    first, second = df.iloc[:, 0].astype(str), df.iloc[:, 1].astype(str)
    header = [str(c).strip() for c in df.columns[1:]]
    if sorted(header) == sorted(first.str.strip().tolist()):
        return False
    return bool((first.str.len() == 1).all() and (second.str.len() == 1).all())


__all__ = ['read_table', 'read_sequences', 'load_cost_table']
