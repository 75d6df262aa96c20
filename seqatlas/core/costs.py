"""Substitution cost tables for weighted edit distance.

A table holds one non-negative penalty per ordered pair of alphabet symbols
(amino-acid residue codes). Lookups go through a symbol -> index dict and a
read-only float64 array, so every distance computation can share one table
without copying or locking.
"""

import hashlib

import numpy as np
import pandas as pd


class UnknownSymbolError(LookupError):
    """Raised when a symbol is not part of the cost table alphabet."""

    def __init__(self, symbol, sequence=None):
        self.symbol = symbol
        self.sequence = sequence
        if sequence is None:
            msg = f"Symbol {symbol!r} is not in the substitution cost alphabet"
        else:
            msg = f"Symbol {symbol!r} in sequence {sequence!r} is not in the substitution cost alphabet"
        super().__init__(msg)


class SubstitutionCostTable:
    """Immutable symbol-pair substitution costs.

    Parameters:
        alphabet: Ordered iterable of distinct single-character symbols
        costs: Square array-like, costs[i][j] is the penalty for substituting
               alphabet[i] (source) with alphabet[j] (target)

    Raises:
        ValueError: If the alphabet is empty, has duplicates or multi-character
                    symbols, or costs is not a finite non-negative square array
                    matching the alphabet
    """

    __slots__ = ('_alphabet', '_index', '_costs')

    def __init__(self, alphabet, costs):
        alphabet = tuple(alphabet)
        if not alphabet:
            raise ValueError('Substitution cost alphabet is empty')
        for symbol in alphabet:
            if not isinstance(symbol, str) or len(symbol) != 1:
                raise ValueError(f'Alphabet symbols must be single characters, got {symbol!r}')
        if len(set(alphabet)) != len(alphabet):
            dupes = sorted({s for s in alphabet if alphabet.count(s) > 1})
            raise ValueError(f'Duplicate alphabet symbols: {dupes}')

        arr = np.array(costs, dtype=np.float64)
        k = len(alphabet)
        if arr.shape != (k, k):
            raise ValueError(f'Cost matrix shape {arr.shape} does not match alphabet size {k}')
        if not np.isfinite(arr).all():
            raise ValueError('Substitution costs must be finite')
        if (arr < 0).any():
            raise ValueError('Substitution costs must be non-negative')
        arr.setflags(write=False)

        self._alphabet = alphabet
        self._index = {symbol: i for i, symbol in enumerate(alphabet)}
        self._costs = arr

    @classmethod
    def from_frame(cls, df):
        """Build from a square DataFrame (index = source, columns = target)."""
        rows = [str(s) for s in df.index]
        cols = [str(s) for s in df.columns]
        if len(set(rows)) != len(rows):
            raise ValueError('Square cost table has repeated row symbols')
        if set(rows) != set(cols) or len(rows) != len(cols):
            raise ValueError('Square cost table needs identical row and column symbols')
        frame = df.copy()
        frame.index = rows
        frame.columns = cols
        frame = frame.loc[rows, rows]
        try:
            values = frame.to_numpy(dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ValueError(f'Cost table contains non-numeric values: {e}') from e
        return cls(rows, values)

    @classmethod
    def from_melted(cls, df, source='source', target='target', cost='cost'):
        """Build from a long-format table with one row per ordered symbol pair.

        Missing diagonal pairs are filled with 0. A missing or repeated
        off-diagonal pair is an error.
        """
        missing = [c for c in (source, target, cost) if c not in df.columns]
        if missing:
            raise ValueError(f'Melted cost table is missing columns: {missing}')
        long_df = df[[source, target, cost]].copy()
        long_df[source] = long_df[source].astype(str)
        long_df[target] = long_df[target].astype(str)
        try:
            long_df[cost] = pd.to_numeric(long_df[cost])
        except (TypeError, ValueError) as e:
            raise ValueError(f'Cost table contains non-numeric values: {e}') from e
        if long_df.duplicated(subset=[source, target]).any():
            dupes = long_df[long_df.duplicated(subset=[source, target], keep=False)]
            pairs = sorted(set(zip(dupes[source], dupes[target])))
            raise ValueError(f'Repeated symbol pairs in cost table: {pairs[:5]}')

        alphabet = sorted(set(long_df[source]) | set(long_df[target]))
        square = long_df.pivot(index=source, columns=target, values=cost)
        square = square.reindex(index=alphabet, columns=alphabet)
        for symbol in alphabet:
            if pd.isna(square.at[symbol, symbol]):
                square.at[symbol, symbol] = 0.0
        if square.isna().any().any():
            gaps = [(a, b) for a in alphabet for b in alphabet if pd.isna(square.at[a, b])]
            raise ValueError(f'Cost table has no entry for {len(gaps)} symbol pair(s), e.g. {gaps[:5]}')
        return cls.from_frame(square)

    @classmethod
    def from_mapping(cls, mapping, alphabet=None):
        """Build from a {(source, target): cost} dict."""
        records = [(a, b, c) for (a, b), c in mapping.items()]
        df = pd.DataFrame(records, columns=['source', 'target', 'cost'])
        table = cls.from_melted(df)
        if alphabet is None:
            return table
        alphabet = list(alphabet)
        if set(alphabet) != set(table.alphabet):
            raise ValueError(f'Alphabet {alphabet} does not match the symbols in the mapping')
        return cls.from_frame(table.to_frame().loc[alphabet, alphabet])

    @classmethod
    def uniform(cls, alphabet, cost=1.0):
        """Every mismatch costs `cost` (plain Levenshtein for cost=1)."""
        alphabet = tuple(alphabet)
        k = len(alphabet)
        costs = np.full((k, k), float(cost))
        np.fill_diagonal(costs, 0.0)
        return cls(alphabet, costs)

    @property
    def alphabet(self):
        return self._alphabet

    @property
    def costs(self):
        """Read-only (k, k) float64 array in alphabet order."""
        return self._costs

    def __len__(self):
        return len(self._alphabet)

    def __contains__(self, symbol):
        return symbol in self._index

    def __repr__(self):
        return f'SubstitutionCostTable(alphabet={"".join(self._alphabet)!r})'

    def index(self, symbol):
        try:
            return self._index[symbol]
        except (KeyError, TypeError):
            raise UnknownSymbolError(symbol) from None

    def cost(self, a, b):
        """Return the penalty for substituting source symbol `a` with target `b`."""
        return float(self._costs[self.index(a), self.index(b)])

    def encode(self, sequence):
        """Map a sequence to an int32 array of alphabet indices.

        Raises:
            UnknownSymbolError: On the first symbol outside the alphabet
        """
        index = self._index
        out = np.empty(len(sequence), dtype=np.int32)
        for pos, symbol in enumerate(sequence):
            try:
                out[pos] = index[symbol]
            except KeyError:
                raise UnknownSymbolError(symbol, sequence) from None
        return out

    def is_symmetric(self):
        return bool(np.array_equal(self._costs, self._costs.T))

    def to_frame(self):
        return pd.DataFrame(self._costs, index=list(self._alphabet), columns=list(self._alphabet))

    def fingerprint(self):
        """Stable SHA-256 hex digest of the alphabet and costs."""
        h = hashlib.sha256()
        h.update('\x1f'.join(self._alphabet).encode('utf-8'))
        h.update(b'\x00')
        h.update(np.ascontiguousarray(self._costs, dtype='<f8').tobytes())
        return h.hexdigest()

    def __eq__(self, other):
        if not isinstance(other, SubstitutionCostTable):
            return NotImplemented
        return self._alphabet == other._alphabet and np.array_equal(self._costs, other._costs)

    def __hash__(self):
        return hash(self.fingerprint())


__all__ = [
    'SubstitutionCostTable',
    'UnknownSymbolError',
]
