"""
Dense Ring Matrices

The exchange format at the boundary of the sparse kernels:
results are ingested from, and materialized back into, `Matrix` objects.
Entries are plain ring elements held in a numpy `object` array.
"""

from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import MatrixDimError, MatrixError

Component = Tuple[int, int, object]


class Matrix(object):
    def __init__(self, ring, grid: np.ndarray):
        MatrixError.assert_eq(grid.ndim, 2)
        self.ring = ring
        self.grid = grid

    # Construction

    @classmethod
    def zeros(cls, ring, shape: Tuple[int, int]) -> "Matrix":
        grid = np.empty(shape, dtype=object)
        grid.fill(ring.zero)
        return cls(ring, grid)

    @classmethod
    def identity(cls, ring, n: int) -> "Matrix":
        return cls.diagonal(ring, (n, n), [ring.one] * n)

    @classmethod
    def diagonal(cls, ring, shape: Tuple[int, int], entries: Sequence) -> "Matrix":
        MatrixDimError.assert_true(len(entries) <= min(shape))
        m = cls.zeros(ring, shape)
        for k, a in enumerate(entries):
            m.grid[k, k] = ring.coerce(a)
        return m

    @classmethod
    def from_rows(cls, ring, rows: Sequence[Sequence]) -> "Matrix":
        """ Create from nested sequences, coercing every entry into `ring` """
        n = len(rows)
        m = len(rows[0]) if n else 0
        grid = np.empty((n, m), dtype=object)
        for i, row in enumerate(rows):
            MatrixDimError.assert_eq(len(row), m, f"row {i} has length {len(row)}, expected {m}")
            for j, a in enumerate(row):
                grid[i, j] = ring.coerce(a)
        return cls(ring, grid)

    @classmethod
    def from_grid(cls, ring, shape: Tuple[int, int], values: Sequence) -> "Matrix":
        """ Create from a flat, row-major sequence of values """
        n, m = shape
        MatrixDimError.assert_eq(len(values), n * m)
        return cls.from_rows(ring, [values[i * m:(i + 1) * m] for i in range(n)])

    @classmethod
    def from_components(cls, ring, shape: Tuple[int, int], components: Iterable[Component]) -> "Matrix":
        mat = cls.zeros(ring, shape)
        for i, j, a in components:
            mat.grid[i, j] = a
        return mat

    @classmethod
    def build(cls, ring, shape: Tuple[int, int], fill: Callable[[Callable[[int, int, object], None]], None]) -> "Matrix":
        """ Create via a setter-callback.
        `fill` is called once, with a function `set_entry(i, j, value)`. """
        mat = cls.zeros(ring, shape)

        def set_entry(i: int, j: int, a):
            mat.grid[i, j] = a

        fill(set_entry)
        return mat

    @classmethod
    def from_scipy(cls, ring, sp) -> "Matrix":
        """ Convert a `scipy.sparse` matrix (or array) of numbers """
        coo = sp.tocoo()
        return cls.from_components(ring, coo.shape, (
            (int(i), int(j), ring.coerce(a)) for i, j, a in zip(coo.row, coo.col, coo.data)
        ))

    def to_scipy(self, dtype=np.int64):
        """ Convert to a `scipy.sparse.coo_matrix`.
        Only meaningful for rings whose elements convert to `dtype`. """
        import scipy.sparse
        comps = list(self.nonzero_components())
        rows = [i for i, _, _ in comps]
        cols = [j for _, j, _ in comps]
        data = np.array([a for _, _, a in comps], dtype=dtype)
        return scipy.sparse.coo_matrix((data, (rows, cols)), shape=self.shape)

    def copy(self) -> "Matrix":
        return Matrix(self.ring, self.grid.copy())

    # Access

    @property
    def shape(self) -> Tuple[int, int]:
        return self.grid.shape

    def __getitem__(self, index: Tuple[int, int]):
        i, j = index
        return self.grid[i, j]

    def __setitem__(self, index: Tuple[int, int], value):
        i, j = index
        self.grid[i, j] = self.ring.coerce(value)

    def submatrix(self, rows: Optional[range] = None, cols: Optional[range] = None) -> "Matrix":
        rows = rows if rows is not None else range(self.shape[0])
        cols = cols if cols is not None else range(self.shape[1])
        return Matrix(self.ring, self.grid[rows.start:rows.stop, cols.start:cols.stop].copy())

    def nonzero_components(self) -> Iterator[Component]:
        ring = self.ring
        n, m = self.shape
        for i in range(n):
            for j in range(m):
                a = self.grid[i, j]
                if not ring.is_zero(a):
                    yield i, j, a

    def diagonal_components(self) -> List:
        return [self.grid[k, k] for k in range(min(self.shape))]

    def rows(self) -> List[List]:
        return [list(r) for r in self.grid]

    # Predicates

    @property
    def is_square(self) -> bool:
        return self.shape[0] == self.shape[1]

    @property
    def is_zero(self) -> bool:
        return next(self.nonzero_components(), None) is None

    @property
    def is_diagonal(self) -> bool:
        return all(i == j for i, j, _ in self.nonzero_components())

    @property
    def is_identity(self) -> bool:
        return self.is_square and self == Matrix.identity(self.ring, self.shape[0])

    # Arithmetic

    def __eq__(self, other):
        if not isinstance(other, Matrix): return False
        if self.shape != other.shape: return False
        n, m = self.shape
        for i in range(n):
            for j in range(m):
                if self.grid[i, j] != other.grid[i, j]: return False
        return True

    def __add__(self, other: "Matrix") -> "Matrix":
        MatrixDimError.assert_eq(self.shape, other.shape)
        ring = self.ring
        out = self.copy()
        for i, j, a in other.nonzero_components():
            out.grid[i, j] = ring.add(out.grid[i, j], a)
        return out

    def __neg__(self) -> "Matrix":
        out = Matrix.zeros(self.ring, self.shape)
        for i, j, a in self.nonzero_components():
            out.grid[i, j] = self.ring.neg(a)
        return out

    def __sub__(self, other: "Matrix") -> "Matrix":
        return self + (-other)

    def __matmul__(self, other: "Matrix") -> "Matrix":
        """ Matrix multiplication self*other """
        MatrixDimError.assert_eq(self.shape[1], other.shape[0], f"cannot multiply {self.shape} by {other.shape}")
        ring = self.ring
        out = Matrix.zeros(ring, (self.shape[0], other.shape[1]))
        rhs = [list(other.nonzero_row(k)) for k in range(other.shape[0])]
        for i, k, a in self.nonzero_components():
            for j, b in rhs[k]:
                out.grid[i, j] = ring.add(out.grid[i, j], ring.mul(a, b))
        return out

    def nonzero_row(self, i: int) -> Iterator[Tuple[int, object]]:
        for j, a in enumerate(self.grid[i]):
            if not self.ring.is_zero(a):
                yield j, a

    # Shape manipulation

    @property
    def transposed(self) -> "Matrix":
        return Matrix(self.ring, self.grid.T.copy())

    def concat_horizontally(self, other: "Matrix") -> "Matrix":
        MatrixDimError.assert_eq(self.shape[0], other.shape[0])
        return Matrix(self.ring, np.hstack([self.grid, other.grid]))

    def concat_vertically(self, other: "Matrix") -> "Matrix":
        MatrixDimError.assert_eq(self.shape[1], other.shape[1])
        return Matrix(self.ring, np.vstack([self.grid, other.grid]))

    def split_horizontally(self, at: int) -> Tuple["Matrix", "Matrix"]:
        n, m = self.shape
        return self.submatrix(cols=range(0, at)), self.submatrix(cols=range(at, m))

    def direct_sum(self, other: "Matrix") -> "Matrix":
        """ Block-diagonal matrix [[self, 0], [0, other]] """
        (n1, m1), (n2, m2) = self.shape, other.shape
        out = Matrix.zeros(self.ring, (n1 + n2, m1 + m2))
        out.grid[:n1, :m1] = self.grid
        out.grid[n1:, m1:] = other.grid
        return out

    # Elementary operations, applied through the sparse kernels

    def apply_row_operations(self, ops) -> "Matrix":
        from .sparse.matrix import SparseRowMatrix
        data = SparseRowMatrix.from_matrix(self)
        for op in ops:
            data.apply(op)
        return data.to_matrix()

    def apply_col_operations(self, ops) -> "Matrix":
        from .sparse.matrix import SparseRowMatrix
        data = SparseRowMatrix.from_matrix(self)
        data.transpose()
        for op in ops:
            data.apply(op.transposed)
        data.transpose()
        return data.to_matrix()

    # Display

    def detail(self) -> str:
        """ Multi-line, column-aligned rendering of the entries """
        cells = [[self.ring.format(a) for a in row] for row in self.grid]
        if not cells or not cells[0]:
            return f"[{self.shape[0]}x{self.shape[1]}]"
        width = max(len(c) for row in cells for c in row)
        return "\n".join("[ " + " ".join(c.rjust(width) for c in row) + " ]" for row in cells)

    def __repr__(self):
        return f"<{self.__class__.__name__}({self.ring.name}, shape={self.shape})>"
