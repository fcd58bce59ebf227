"""
Elimination Results

For an elimination `P * A * Q = B`, the transformation matrices P & Q, and their inverses,
are recomposed on demand by replaying the recorded operations against identity matrices.
Restricting to a row or column range only ever builds the requested slice.
"""

from typing import List, Optional

from .errors import MatrixDimError, MatrixError
from .matrix import Matrix


class EliminationResult(object):
    def __init__(self, form, result: Matrix, row_ops: List, col_ops: List):
        self.form = form
        self.result = result
        self.row_ops = row_ops
        self.col_ops = col_ops

    def __repr__(self):
        return f"<{self.__class__.__name__}({self.form.name}, shape={self.result.shape}, rank={self.rank})>"

    @property
    def ring(self):
        return self.result.ring

    @property
    def shape(self):
        return self.result.shape

    @property
    def rank(self) -> int:
        ring = self.ring
        if self.form.is_row_form:
            return sum(1 for row in self.result.rows() if any(not ring.is_zero(a) for a in row))
        if self.form.is_col_form:
            return sum(1 for col in self.result.transposed.rows() if any(not ring.is_zero(a) for a in col))
        self._assert_diagonal()
        return sum(1 for d in self.result.diagonal_components() if not ring.is_zero(d))

    @property
    def nullity(self) -> int:
        return self.shape[1] - self.rank

    def _assert_diagonal(self):
        MatrixError.assert_true(self.result.is_diagonal, f"{self.form.name} result is not diagonal")

    # P & its inverse

    def left(self, rows: Optional[range] = None, cols: Optional[range] = None) -> Matrix:
        """ P of P * A * Q = B, optionally restricted to a range of `rows` or of `cols` """
        return self._compose_row_ops(self.row_ops, rows=rows, cols=cols)

    def left_inverse(self, rows: Optional[range] = None, cols: Optional[range] = None) -> Matrix:
        return self._compose_row_ops(self._row_ops_inverse(), rows=rows, cols=cols)

    def _row_ops_inverse(self) -> List:
        return [op.inverse(self.ring) for op in reversed(self.row_ops)]

    # Q & its inverse

    def right(self, rows: Optional[range] = None, cols: Optional[range] = None) -> Matrix:
        """ Q of P * A * Q = B, optionally restricted to a range of `rows` or of `cols` """
        return self._compose_col_ops(self.col_ops, rows=rows, cols=cols)

    def right_inverse(self, rows: Optional[range] = None, cols: Optional[range] = None) -> Matrix:
        return self._compose_col_ops(self._col_ops_inverse(), rows=rows, cols=cols)

    def _col_ops_inverse(self) -> List:
        return [op.inverse(self.ring) for op in reversed(self.col_ops)]

    def _compose_row_ops(self, ops: List, rows: Optional[range], cols: Optional[range]) -> Matrix:
        """ Compose row operations [P1, ..., Pn] into P = Pn ... P1.

        P[:, cols] is P1 .. Pn applied, as row operations, to I[:, cols].
        P[rows, :] is I[rows, :] * Pn ... P1, i.e. the opposite column operations applied from Pn back to P1. """
        MatrixError.assert_true(rows is None or cols is None, "restrict either rows or cols, not both")
        n = self.shape[0]
        I = Matrix.identity(self.ring, n)
        if rows is not None:
            return I.submatrix(rows=rows).apply_col_operations([op.opposite for op in reversed(ops)])
        return I.submatrix(cols=cols).apply_row_operations(ops)

    def _compose_col_ops(self, ops: List, rows: Optional[range], cols: Optional[range]) -> Matrix:
        """ Compose column operations [Q1, ..., Qn] into Q = Q1 ... Qn.

        Q[rows, :] is Q1 .. Qn applied, as column operations, to I[rows, :].
        Q[:, cols] is Q1 ... Qn * I[:, cols], i.e. the opposite row operations applied from Qn back to Q1. """
        MatrixError.assert_true(rows is None or cols is None, "restrict either rows or cols, not both")
        m = self.shape[1]
        I = Matrix.identity(self.ring, m)
        if cols is not None:
            return I.submatrix(cols=cols).apply_row_operations([op.opposite for op in reversed(ops)])
        return I.submatrix(rows=rows).apply_col_operations(ops)

    # Kernel & image.  With P * A * Q = [[D_r, 0], [0, 0]]:

    @property
    def kernel_matrix(self) -> Matrix:
        """ Columns spanning Ker(A): Q[:, r:m] """
        self._assert_diagonal()
        return self.right(cols=range(self.rank, self.shape[1]))

    @property
    def kernel_transition_matrix(self) -> Matrix:
        """ T with T * kernel_matrix == I_k: Q^-1[r:m, :] """
        self._assert_diagonal()
        return self.right_inverse(rows=range(self.rank, self.shape[1]))

    @property
    def image_matrix(self) -> Matrix:
        """ Columns spanning Im(A): P^-1[:, 0:r] * D_r """
        self._assert_diagonal()
        r = self.rank
        D = self.result.submatrix(rows=range(0, r), cols=range(0, r))
        return self.left_inverse(cols=range(0, r)) @ D

    @property
    def image_transition_matrix(self) -> Matrix:
        """ T with T * image_matrix == D_r: P[0:r, :] """
        self._assert_diagonal()
        return self.left(rows=range(0, self.rank))

    # Solving

    def invert(self, b: Matrix) -> Optional[Matrix]:
        """ Find x with A * x == b, for a column vector `b`.  Returns None if there is no solution.

        Since A * x == b  <=>  B * y == P * b  with  x == Q * y,
        each y_i is (P * b)_i / d_i, which must divide exactly, and (P * b)_i must vanish past the rank. """
        self._assert_diagonal()
        MatrixDimError.assert_eq(b.shape, (self.shape[0], 1))
        ring = self.ring
        Pb = self.left() @ b
        diag = self.result.diagonal_components()
        r = self.rank

        y = Matrix.zeros(ring, (self.shape[1], 1))
        for i in range(self.shape[0]):
            a = Pb[i, 0]
            if i >= r:
                if not ring.is_zero(a):
                    return None
                continue
            if not ring.divides(diag[i], a):
                return None
            y.grid[i, 0] = ring.exact_div(a, diag[i])

        return self.right() @ y

    @property
    def determinant(self):
        """ det(A) = det(B) / (det(P) * det(Q)).  Square matrices only. """
        MatrixDimError.assert_true(self.result.is_square, "determinant of a non-square matrix")
        self._assert_diagonal()
        ring = self.ring
        if self.rank < self.shape[0]:
            return ring.zero
        p = ring.product(op.determinant(ring) for op in self.row_ops)
        q = ring.product(op.determinant(ring) for op in self.col_ops)
        d = ring.product(self.result.diagonal_components())
        return ring.mul(ring.mul(ring.inverse(p), ring.inverse(q)), d)

    @property
    def inverse(self) -> Optional[Matrix]:
        """ A^-1 = Q * P when B is the identity, otherwise None """
        MatrixDimError.assert_true(self.result.is_square, "inverse of a non-square matrix")
        if not self.result.is_identity:
            return None
        return self.right() @ self.left()
