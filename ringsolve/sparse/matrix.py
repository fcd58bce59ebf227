from collections import defaultdict
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..errors import MatrixDimError, MatrixError
from ..parallel import parallel_map
from .row import Entry, SparseRow, add_into

Component = Tuple[int, int, object]


class SparseRowMatrix(object):
    """ Row-aligned sparse matrix: one column-sorted SparseRow per row.

    Each row is owned by exactly one row-slot.
    `append`, `concat` and `sub` hand row objects over rather than copying them. """

    def __init__(self, ring, shape: Tuple[int, int], rows: Optional[List[SparseRow]] = None):
        self.ring = ring
        self.shape = shape
        self.rows: List[SparseRow] = rows if rows is not None else [SparseRow() for _ in range(shape[0])]
        MatrixDimError.assert_eq(len(self.rows), shape[0])

    @classmethod
    def from_components(cls, ring, shape: Tuple[int, int], components: Iterable[Component]) -> "SparseRowMatrix":
        """ Group (row, col, value) triples by row, and sort each by column.
        Zero values are skipped; duplicate positions are a MatrixError. """
        n, m = shape
        groups = defaultdict(list)
        for i, j, a in components:
            if ring.is_zero(a):
                continue
            MatrixDimError.assert_true(0 <= i < n and 0 <= j < m, f"component ({i}, {j}) outside shape {shape}")
            groups[i].append((j, a))

        rows = []
        for i in range(n):
            entries = sorted(groups.get(i, []), key=lambda e: e[0])
            for (j0, _), (j1, _) in zip(entries, entries[1:]):
                MatrixError.assert_not_eq(j0, j1, f"duplicate component at ({i}, {j0})")
            rows.append(SparseRow(entries))
        return cls(ring, shape, rows)

    @classmethod
    def from_matrix(cls, A) -> "SparseRowMatrix":
        """ Ingest the nonzero components of a dense `Matrix` """
        return cls.from_components(A.ring, A.shape, A.nonzero_components())

    @classmethod
    def identity(cls, ring, n: int) -> "SparseRowMatrix":
        return cls(ring, (n, n), [SparseRow([(k, ring.one)]) for k in range(n)])

    def to_matrix(self):
        """ Materialize as a dense `Matrix` """
        from ..matrix import Matrix

        def fill(set_entry):
            for i, row in enumerate(self.rows):
                for j, a in row:
                    set_entry(i, j, a)

        return Matrix.build(self.ring, self.shape, fill)

    def components(self) -> Iterator[Component]:
        for i, row in enumerate(self.rows):
            for j, a in row:
                yield i, j, a

    def __eq__(self, other):
        if not isinstance(other, SparseRowMatrix): return False
        if self.shape != other.shape: return False
        return all(r == o for r, o in zip(self.rows, other.rows))

    def __repr__(self):
        return f"<{self.__class__.__name__}({self.ring.name}, shape={self.shape})>"

    def display(self) -> str:
        """ Create a string "X" versus " " display of matrix entries. """
        s = ''
        for r in self.rows:
            row = [' '] * self.shape[1]
            for j, _ in r:
                row[j] = 'X'
            s += ''.join(row) + '\n'
        return s

    @property
    def nnz(self) -> int:
        return sum(len(r) for r in self.rows)

    def row(self, i: int) -> SparseRow:
        return self.rows[i]

    def find(self, i: int, j: int) -> Tuple[Optional[Entry], Optional[Entry]]:
        """ Find the entry at (i, j), as the two-tuple (hit, prev) of `SparseRow.find` """
        return self.rows[i].find(j)

    def get(self, i: int, j: int):
        """ Get the value at (i, j), or the ring's zero if no entry is present """
        hit, _ = self.find(i, j)
        return hit.val if hit is not None else self.ring.zero

    def copy(self) -> "SparseRowMatrix":
        """ Create an entry-by-entry copy """
        return SparseRowMatrix(self.ring, self.shape, [r.copy() for r in self.rows])

    def sub(self, start: int, stop: int) -> "SparseRowMatrix":
        """ The rows in range(start, stop).  Rows are shared, not copied. """
        MatrixDimError.assert_true(0 <= start <= stop <= self.shape[0])
        return SparseRowMatrix(self.ring, (stop - start, self.shape[1]), self.rows[start:stop])

    def append(self, row: SparseRow):
        MatrixDimError.assert_true(row.is_empty or row_max_col(row) < self.shape[1])
        self.shape = (self.shape[0] + 1, self.shape[1])
        self.rows.append(row)

    def concat(self, other: "SparseRowMatrix"):
        MatrixDimError.assert_eq(self.shape[1], other.shape[1])
        self.shape = (self.shape[0] + other.shape[0], self.shape[1])
        self.rows.extend(other.rows)

    def transpose(self):
        """ Rebuild in-place as the transpose """
        n, m = self.shape
        buckets: List[List[Tuple[int, object]]] = [[] for _ in range(m)]
        # Walking rows in order fills every bucket already sorted by (new) column
        for i, row in enumerate(self.rows):
            for j, a in row:
                buckets[j].append((i, a))
        self.shape = (m, n)
        self.rows = [SparseRow(b) for b in buckets]

    # Row operations

    def apply(self, op):
        """ Apply a row elementary operation """
        from ..operations import AddRow, MulRow, SwapRows
        if isinstance(op, AddRow):
            self.add_row(op.at, op.to, op.mul)
        elif isinstance(op, MulRow):
            self.multiply_row(op.at, op.by)
        elif isinstance(op, SwapRows):
            self.swap_rows(op.i, op.j)
        else:
            raise MatrixError(f"not a row operation: {op!r}")

    def multiply_row(self, i: int, r):
        self.rows[i].scale(self.ring, r)

    def swap_rows(self, i: int, j: int):
        self.rows[i], self.rows[j] = self.rows[j], self.rows[i]

    def add_row(self, i1: int, i2: int, r) -> int:
        """ Add `r` times row `i1` to row `i2`.  Returns the weight-change of row `i2`. """
        MatrixError.assert_not_eq(i1, i2, "cannot add a row to itself")
        return add_into(self.ring, self.rows[i1], self.rows[i2], r)

    def batch_add_row(self, i1: int, targets: Sequence[int], scalars: Sequence) -> List[int]:
        """ Add multiples of row `i1` to each of rows `targets`, in parallel.
        Returns the weight-change of each target. """
        MatrixError.assert_eq(len(targets), len(scalars))
        MatrixError.assert_eq(len(set(targets)), len(targets), "a target row may only appear once per batch")
        MatrixError.assert_true(i1 not in targets, "source row cannot be a target")

        source = self.rows[i1]
        if source.is_empty:
            return [0] * len(targets)

        ring = self.ring
        return parallel_map(lambda t: add_into(ring, source, self.rows[t[0]], t[1]), list(zip(targets, scalars)))

    def _checkup(self):
        """ Internal consistency tests.  Probably pretty slow. """
        MatrixError.assert_eq(len(self.rows), self.shape[0])
        for row in self.rows:
            prev = None
            for j, a in row:
                MatrixError.assert_true(0 <= j < self.shape[1])
                MatrixError.assert_true(not self.ring.is_zero(a))
                if prev is not None:
                    MatrixError.assert_true(prev < j)
                prev = j


def row_max_col(row: SparseRow) -> int:
    last = -1
    for j, _ in row:
        last = j
    return last
