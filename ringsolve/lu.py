"""
LU Factorization with Structural Pivots

For pivots found by `find_pivots`, permute A so the r pivots lead:

    P * A * Q = [U1, B]
                [C,  D]

With L = C * U1^-1 and the Schur complement S = D - C * U1^-1 * B,

    P * A * Q = [I] * [U1, B] + [0, 0]
                [L]             [0, S]

Each row of [C, D] yields the matching rows of L & S with one triangular solve
against [U1, B] stacked over [0, I].  These solves are independent, and run in parallel.
"""

import logging
from typing import Optional, Tuple

from .errors import InvariantError, MatrixDimError
from .linear import solve_upper_triangular_row
from .matrix import Matrix
from .parallel import parallel_map
from .permutation import Permutation
from .pivots import PivotResult, find_pivots
from .sparse.matrix import SparseRowMatrix

logger = logging.getLogger(__name__)


class LUResult(object):
    """ P * A * Q = L * U + (0 (+) S), with L lower- and U upper-triangular """

    def __init__(self, row_permutation: Permutation, col_permutation: Permutation, L: Matrix, U: Matrix,
                 S: Optional[Matrix] = None):
        self.row_permutation = row_permutation
        self.col_permutation = col_permutation
        self.L = L
        self.U = U
        self.S = S

    @property
    def rank(self) -> int:
        """ Number of pivots, the inner dimension of L * U """
        return self.L.shape[1]

    def __repr__(self):
        return f"<{self.__class__.__name__}(rank={self.rank})>"


def permuted(A: Matrix, P: Permutation, Q: Permutation) -> SparseRowMatrix:
    """ P * A * Q, as sparse rows """
    return SparseRowMatrix.from_components(A.ring, A.shape, (
        (P[i], Q[j], a) for i, j, a in A.nonzero_components()
    ))


def prefactorize(A: Matrix, pivots: PivotResult, check: bool = False) -> Tuple[Matrix, Matrix, Matrix]:
    """ Compute (L, U, S) of  P * A * Q = L * U + (0 (+) S).
    With `check`, verify the identity on the dense matrices, raising `InvariantError` on mismatch. """
    ring = A.ring
    n, m = A.shape
    r = pivots.number_of_pivots
    P, Q = pivots.row_permutation, pivots.col_permutation
    MatrixDimError.assert_eq((len(P), len(Q)), A.shape, "permutations do not match the matrix shape")

    pA = permuted(A, P, Q)
    U1, CD = pA.sub(0, r), pA.sub(r, n)
    UB = U1.to_matrix()

    # Pad the pivot rows with an identity tail, completing a square upper-triangular system
    OI = SparseRowMatrix.from_components(ring, (m - r, m), ((k, r + k, ring.one) for k in range(m - r)))
    U1.concat(OI)

    solved = parallel_map(lambda row: solve_upper_triangular_row(U1, row), CD.rows)

    def fill(set_entry):
        for i, x in enumerate(solved):
            for j, a in x:
                set_entry(i, j, a)

    LS = Matrix.build(ring, (n - r, m), fill)
    L, S = LS.split_horizontally(r)
    IL = Matrix.identity(ring, r).concat_vertically(L)
    logger.debug("prefactorize: shape=%s, pivots=%d", A.shape, r)

    if check:
        expected = permuted(A, P, Q).to_matrix()
        actual = IL @ UB + Matrix.zeros(ring, (r, r)).direct_sum(S)
        InvariantError.assert_true(expected == actual, "P * A * Q != L * U + (0 (+) S)")

    return IL, UB, S


def factorize(A: Matrix, check: bool = False) -> LUResult:
    pivots = find_pivots(A)
    L, U, S = prefactorize(A, pivots, check=check)
    # TODO factor the Schur complement S recursively, for a complete factorization of rank > pivots
    return LUResult(pivots.row_permutation, pivots.col_permutation, L, U, S)
