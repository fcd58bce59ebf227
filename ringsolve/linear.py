"""
Linear Solvers

All systems here are written from the left, `x * A = b`, with `b` a row vector,
except `has_solution` and `probably_has_solution` which ask about `A * x = b` for a column vector `b`.
"""

import logging

from .errors import InvariantError, MatrixDimError, MatrixError, SingularMatrix
from .matrix import Matrix
from .sparse.matrix import SparseRowMatrix
from .sparse.row import SparseRow, add_into

logger = logging.getLogger(__name__)


def solve_upper_triangular_row(U: SparseRowMatrix, b: SparseRow) -> SparseRow:
    """ Solve `x * U = b` by back-substitution, for square upper-triangular `U` with invertible diagonal.
    Consumes `b`: each solved coordinate's contribution is subtracted from it in place. """
    ring = U.ring
    x = []
    for i in range(U.shape[0]):
        head = b.head
        if head is None:
            break
        if head.col != i:
            continue
        u = U.row(i).head
        SingularMatrix.assert_true(u is not None and u.col == i and ring.is_unit(u.val), f"no invertible pivot at ({i}, {i})")
        xi = ring.mul(ring.inverse(u.val), head.val)
        x.append((i, xi))
        add_into(ring, U.row(i), b, ring.neg(xi))

    InvariantError.assert_true(b.is_empty, "right-hand side not consumed by back-substitution")
    return SparseRow(x)


def _assert_left_system(A: Matrix, b: Matrix):
    MatrixDimError.assert_true(A.is_square, f"expected a square matrix, got {A.shape}")
    MatrixDimError.assert_eq(b.shape, (1, A.shape[0]))


def solve_left_upper_triangular(U: Matrix, b: Matrix) -> Matrix:
    """ Solve `x * U = b` for upper-triangular `U` and row vector `b` """
    _assert_left_system(U, b)
    ring = U.ring
    SingularMatrix.assert_true(all(ring.is_unit(d) for d in U.diagonal_components()), "diagonal is not invertible")
    data = SparseRowMatrix.from_matrix(U)
    rhs = SparseRowMatrix.from_matrix(b).row(0)
    x = solve_upper_triangular_row(data, rhs)
    return Matrix.from_components(U.ring, b.shape, ((0, j, a) for j, a in x))


def solve_left_regular(A: Matrix, b: Matrix) -> Matrix:
    """ Solve `x * A = b` for invertible `A`.
    Reduced column echelon elimination gives A * Q = I, so x = b * Q. """
    from .eliminator import Form, eliminate
    _assert_left_system(A, b)
    e = eliminate(A, form=Form.COL_HERMITE)
    SingularMatrix.assert_true(e.result.is_identity, "matrix is not invertible")
    return b.apply_col_operations(e.col_ops)


def row_height(A: Matrix) -> int:
    """ One past the last row holding a nonzero entry """
    return max((i + 1 for i, _, _ in A.nonzero_components()), default=0)


def has_solution(A: Matrix, b: Matrix) -> bool:
    """ Whether `A * x = b` is solvable, over a field.

    With r pivots of A, the Schur complement of [A | b] splits as [S | s],
    and rank(A) == r + rank(S).  The system is consistent iff the echelon form of [S | s]
    has no row whose only nonzero entries lie in the `s` column. """
    from .eliminator import Form, eliminate
    from .lu import prefactorize
    from .pivots import PivotResult, find_pivots

    MatrixError.assert_true(A.ring.is_field, f"{A.ring.name} is not a field")
    MatrixDimError.assert_eq(b.shape, (A.shape[0], 1))

    m = A.shape[1]
    pivots = find_pivots(A)
    r = pivots.number_of_pivots

    Ab = A.concat_horizontally(b)
    _, _, Sb = prefactorize(Ab, PivotResult(
        pivots.pivots, pivots.row_permutation, pivots.col_permutation.extended(m + 1)
    ))

    E = eliminate(Sb, form=Form.ROW_ECHELON)
    B, b2 = E.result.split_horizontally(m - r)
    r1 = row_height(B)
    r2 = row_height(b2)
    logger.debug("has_solution: pivots=%d, rank(S)=%d, height(s)=%d", r, r1, r2)
    return r1 >= r2


def probably_has_solution(A: Matrix, b: Matrix, seed=None) -> bool:
    """ Whether `A * x = b` is solvable over GF(2), by comparing randomized ranks of A and [A | b].
    May wrongly answer False, with small probability. """
    from .fast_rank import fast_calculate_rank
    from .pivots import find_pivots
    from .rings import GF2

    MatrixError.assert_eq(A.ring, GF2, "probably_has_solution requires GF(2)")
    MatrixDimError.assert_eq(b.shape, (A.shape[0], 1))

    pivots = find_pivots(A).pivots
    Ab = A.concat_horizontally(b)

    r1 = fast_calculate_rank(A, pivots=pivots, seed=seed)
    r2 = fast_calculate_rank(Ab, pivots=pivots, seed=seed)
    logger.debug("probably_has_solution: rank(A)=%d, rank(Ab)=%d", r1, r2)
    return r1 == r2
