from threading import RLock
from typing import Iterator, List, Optional, Sequence, Set, Tuple

from ..errors import MatrixError
from .matrix import SparseRowMatrix
from .row import SparseRow

ColComponent = Tuple[int, object]


class EliminationIndex(object):
    """ SparseRowMatrix plus two incrementally-maintained indexes:

    * `row_weight(i)`, the total elimination weight of row `i`;
    * `heads_in_column(j)`, the rows whose first entry sits in column `j`.

    Every mutation goes through this object, which captures the old head-columns,
    mutates the rows, and then reconciles both indexes, all under a single lock. """

    def __init__(self, data: SparseRowMatrix):
        self.data = data
        self._lock = RLock()
        self._rebuild()

    @classmethod
    def from_matrix(cls, A) -> "EliminationIndex":
        return cls(SparseRowMatrix.from_matrix(A))

    def _rebuild(self):
        """ Compute both indexes from scratch.  Only done on (re-)construction. """
        ring = self.data.ring
        self.weights: List[int] = [row.weight(ring) for row in self.data.rows]
        self.heads: List[Set[int]] = [set() for _ in range(self.data.shape[1])]
        for i, row in enumerate(self.data.rows):
            if row.head is not None:
                self.heads[row.head.col].add(i)

    @property
    def ring(self):
        return self.data.ring

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    def row(self, i: int) -> SparseRow:
        return self.data.row(i)

    def row_weight(self, i: int) -> int:
        return self.weights[i]

    def heads_in_column(self, j: int) -> List[ColComponent]:
        """ (row, value) of every row whose leading entry is in column `j`, in row order """
        with self._lock:
            return [(i, self.data.rows[i].head.val) for i in sorted(self.heads[j])]

    def entries_above_row(self, col: int, before_row: int) -> List[ColComponent]:
        """ (row, value) of every entry in column `col` among rows 0 .. `before_row`-1 """
        found = []
        with self._lock:
            for i in range(before_row):
                hit, _ = self.data.find(i, col)
                if hit is not None:
                    found.append((i, hit.val))
        return found

    def transpose(self):
        with self._lock:
            self.data.transpose()
            self._rebuild()

    def apply(self, op):
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
        with self._lock:
            row = self.data.row(i)
            ring = self.ring
            before = self.weights[i]
            row.scale(ring, r)
            # Scaling by a unit keeps the structure, but may change weights (e.g. over the rationals)
            self.weights[i] = row.weight(ring) if before else 0

    def swap_rows(self, i: int, j: int):
        if i == j:
            return
        with self._lock:
            ci = self.data.row(i).head_col
            cj = self.data.row(j).head_col
            self.data.swap_rows(i, j)
            self.weights[i], self.weights[j] = self.weights[j], self.weights[i]
            if ci != cj:
                if ci is not None:
                    self.heads[ci].remove(i)
                    self.heads[ci].add(j)
                if cj is not None:
                    self.heads[cj].remove(j)
                    self.heads[cj].add(i)

    def add_row(self, i1: int, i2: int, r):
        """ Add `r` times row `i1` to row `i2` """
        with self._lock:
            if self.data.row(i1).is_empty:
                return
            old_col = self.data.row(i2).head_col
            dw = self.data.add_row(i1, i2, r)
            self.weights[i2] += dw
            self._update_head(i2, old_col)

    def batch_add_row(self, i1: int, targets: Sequence[int], scalars: Sequence):
        """ Add multiples of row `i1` to each of rows `targets`.
        The merges run in parallel; the indexes are reconciled once they have all finished. """
        with self._lock:
            if self.data.row(i1).is_empty or not targets:
                return
            old_cols = [self.data.row(i).head_col for i in targets]
            dws = self.data.batch_add_row(i1, targets, scalars)
            for i, dw, old_col in zip(targets, dws, old_cols):
                self.weights[i] += dw
                self._update_head(i, old_col)

    def _update_head(self, i: int, old_col: Optional[int]):
        new_col = self.data.row(i).head_col
        if old_col == new_col:
            return
        if old_col is not None:
            self.heads[old_col].discard(i)
        if new_col is not None:
            self.heads[new_col].add(i)

    def components(self) -> Iterator[Tuple[int, int, object]]:
        return self.data.components()

    def to_matrix(self):
        return self.data.to_matrix()

    def display(self) -> str:
        return self.data.display()

    def _checkup(self):
        """ Compare both indexes against a full recomputation """
        self.data._checkup()
        ring = self.ring
        for i, row in enumerate(self.data.rows):
            MatrixError.assert_eq(self.weights[i], row.weight(ring), f"stale weight for row {i}")
        for j, rows in enumerate(self.heads):
            for i in rows:
                MatrixError.assert_eq(self.data.row(i).head_col, j, f"stale head index for row {i}")
        for i, row in enumerate(self.data.rows):
            if row.head is not None:
                MatrixError.assert_true(i in self.heads[row.head.col], f"row {i} missing from head index")
