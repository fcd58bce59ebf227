import pytest

from ..errors import InvariantError, MatrixDimError, MatrixError, SingularMatrix
from ..linear import (
    has_solution,
    probably_has_solution,
    row_height,
    solve_left_regular,
    solve_left_upper_triangular,
    solve_upper_triangular_row,
)
from ..matrix import Matrix
from ..rings import GF2, QQ, ZZ, PrimeField
from ..sparse.matrix import SparseRowMatrix
from ..sparse.row import SparseRow

BITS = [
    [1, 0, 1, 0],
    [0, 1, 1, 1],
    [0, 0, 0, 0],
    [1, 1, 0, 1],
    [1, 0, 1, 0],
]


def column(ring, values):
    """ Helper function.  (Not a test!) """
    return Matrix.from_rows(ring, [[v] for v in values])


def test_solve_left_upper_triangular():
    U = Matrix.from_rows(QQ, [
        [2, 1, 0],
        [0, 1, 3],
        [0, 0, -1],
    ])
    x = Matrix.from_rows(QQ, [[1, 2, 3]])
    b = x @ U
    assert b == Matrix.from_rows(QQ, [[2, 3, 3]])
    assert solve_left_upper_triangular(U, b) == x


def test_solve_left_upper_triangular_errors():
    U = Matrix.from_rows(ZZ, [[2, 1], [0, 1]])
    with pytest.raises(SingularMatrix):
        solve_left_upper_triangular(U, Matrix.from_rows(ZZ, [[2, 1]]))
    with pytest.raises(MatrixDimError):
        solve_left_upper_triangular(Matrix.identity(ZZ, 2), Matrix.from_rows(ZZ, [[1, 2, 3]]))
    with pytest.raises(MatrixDimError):
        solve_left_upper_triangular(Matrix.zeros(ZZ, (2, 3)), Matrix.from_rows(ZZ, [[1, 2]]))


def test_solve_row_consumes_rhs():
    U = SparseRowMatrix.from_matrix(Matrix.from_rows(ZZ, [[1, 2], [0, -1]]))
    b = SparseRow([(0, 3), (1, 4)])
    x = solve_upper_triangular_row(U, b)
    assert list(x) == [(0, 3), (1, 2)]
    assert b.is_empty


def test_solve_row_not_triangular():
    U = SparseRowMatrix.from_matrix(Matrix.from_rows(ZZ, [[1, 0], [1, 1]]))
    with pytest.raises(SingularMatrix):
        solve_upper_triangular_row(U, SparseRow([(1, 1)]))


def test_solve_row_inconsistent():
    """ Without an identity tail, entries past the square block can't be consumed """
    U = SparseRowMatrix.from_matrix(Matrix.from_rows(ZZ, [[1, 1, 0]]))
    with pytest.raises(InvariantError):
        solve_upper_triangular_row(U, SparseRow([(0, 1), (2, 1)]))


def test_solve_left_regular():
    A = Matrix.from_rows(ZZ, [
        [2, -1, -2, -2, -3],
        [1, 2, -1, 1, -1],
        [2, -2, -4, -3, -6],
        [1, 7, 1, 5, 3],
        [1, -12, -6, -10, -11],
    ])
    x = Matrix.from_rows(ZZ, [[1, -1, 2, 0, 3]])
    assert solve_left_regular(A, x @ A) == x


def test_solve_left_regular_rational():
    A = Matrix.from_rows(QQ, [[0, 2], [3, 1]])
    x = Matrix.from_rows(QQ, [["1/2", -1]])
    assert solve_left_regular(A, x @ A) == x


def test_solve_left_regular_singular():
    A = Matrix.from_rows(QQ, [[1, 2], [2, 4]])
    with pytest.raises(SingularMatrix):
        solve_left_regular(A, Matrix.from_rows(QQ, [[1, 1]]))
    # Regular over the rationals, not over the integers
    with pytest.raises(SingularMatrix):
        solve_left_regular(Matrix.from_rows(ZZ, [[2, 0], [0, 1]]), Matrix.from_rows(ZZ, [[2, 1]]))


def test_row_height():
    assert row_height(Matrix.from_rows(ZZ, [[0, 1], [0, 0], [1, 0], [0, 0]])) == 3
    assert row_height(Matrix.zeros(ZZ, (3, 3))) == 0


def test_has_solution_bits():
    A = Matrix.from_rows(GF2, BITS)
    assert has_solution(A, column(GF2, [1, 1, 0, 0, 1]))
    assert not has_solution(A, column(GF2, [1, 1, 0, 0, 0]))
    assert not has_solution(A, column(GF2, [0, 0, 1, 0, 0]))


def test_has_solution_rational():
    A = Matrix.from_rows(QQ, [[2, 1], [4, 2], [0, 1]])
    assert has_solution(A, A @ column(QQ, [1, "1/3"]))
    assert not has_solution(A, column(QQ, [1, 1, 0]))


def test_has_solution_full_pivots():
    A = Matrix.from_rows(PrimeField(5), [[1, 2], [0, 1]])
    assert has_solution(A, column(PrimeField(5), [3, 4]))


def test_has_solution_errors():
    with pytest.raises(MatrixError):
        has_solution(Matrix.identity(ZZ, 2), column(ZZ, [1, 1]))
    with pytest.raises(MatrixDimError):
        has_solution(Matrix.identity(QQ, 2), column(QQ, [1, 1, 1]))


def test_probably_has_solution():
    A = Matrix.from_rows(GF2, BITS)
    b = column(GF2, [1, 1, 0, 0, 1])
    assert all(probably_has_solution(A, b, seed=s) for s in range(8))

    # A false "no" is possible for a single seed, but not for all of them
    b = column(GF2, [1, 1, 0, 0, 0])
    assert not all(probably_has_solution(A, b, seed=s) for s in range(8))


def test_probably_has_solution_requires_bits():
    with pytest.raises(MatrixError):
        probably_has_solution(Matrix.identity(QQ, 2), column(QQ, [1, 1]))
