import logging
from fractions import Fraction

import pytest

from ..eliminator import Form, eliminate
from ..errors import MatrixDimError, MatrixError
from ..matrix import Matrix
from ..rings import QQ, ZZ, PolynomialRing

FULL_RANK = [
    [2, -1, -2, -2, -3],
    [1, 2, -1, 1, -1],
    [2, -2, -4, -3, -6],
    [1, 7, 1, 5, 3],
    [1, -12, -6, -10, -11],
]

RANK4 = [
    [3, -5, -22, 20, 8],
    [6, -11, -50, 45, 18],
    [-1, 2, 10, -9, -3],
    [3, -6, -30, 27, 10],
    [-1, 2, 7, -6, -3],
]


def check_transform(A: Matrix, E):
    """ Helper function.  (Not a test!)
    Check P * A * Q == B, and that P & Q are invertible via their recorded inverses. """
    n, m = A.shape
    P, Q = E.left(), E.right()
    assert P @ A @ Q == E.result
    assert P @ E.left_inverse() == Matrix.identity(A.ring, n)
    assert E.left_inverse() @ P == Matrix.identity(A.ring, n)
    assert Q @ E.right_inverse() == Matrix.identity(A.ring, m)
    assert E.right_inverse() @ Q == Matrix.identity(A.ring, m)


def test_normalize_integer():
    E = eliminate(Matrix.from_rows(ZZ, [[-2]]))
    assert E.result == Matrix.from_rows(ZZ, [[2]])


def test_normalize_rational():
    E = eliminate(Matrix.from_rows(QQ, [[-3]]))
    assert E.result == Matrix.from_rows(QQ, [[1]])


def test_smith_full_rank():
    A = Matrix.from_rows(ZZ, FULL_RANK)
    E = eliminate(A, form=Form.SMITH)
    assert E.rank == 5
    assert E.result == Matrix.identity(ZZ, 5)
    check_transform(A, E)


def test_smith_rank4():
    A = Matrix.from_rows(ZZ, RANK4)
    E = eliminate(A, form=Form.SMITH)
    assert E.rank == 4
    assert E.nullity == 1
    assert E.result == Matrix.diagonal(ZZ, (5, 5), [1, 1, 1, 1, 0])
    check_transform(A, E)


def test_smith_with_factors():
    A = Matrix.from_grid(ZZ, (5, 5), [
        -20, -7, -27, 2, 29, 17, 8, 14, -4, -10, 13, 8, 10, -4, -6, -9, -2, -14, 0, 16, 5, 0, 5, -1, -4,
    ])
    E = eliminate(A, form=Form.SMITH)
    assert E.result == Matrix.diagonal(ZZ, (5, 5), [1, 1, 1, 2, 60])
    check_transform(A, E)


def test_smith_rank3_with_factors():
    A = Matrix.from_grid(ZZ, (5, 5), [
        4, 6, -18, -15, -46, -1, 0, 6, 4, 13, -13, -12, 36, 30, 97, -7, -6, 18, 15, 49, -6, -6, 18, 15, 48,
    ])
    E = eliminate(A, form=Form.SMITH)
    assert E.result == Matrix.diagonal(ZZ, (5, 5), [1, 1, 6])
    assert E.rank == 3


def test_smith_rectangular():
    A = Matrix.from_grid(ZZ, (4, 6), [
        8, -6, 14, -10, -14, 6, 12, -8, 18, -18, -20, 8, -16, 7, -23, 22, 23, -7, 32, -17, 44, -49, -49, 17,
    ])
    E = eliminate(A, form=Form.SMITH)
    assert E.result == Matrix.diagonal(ZZ, (4, 6), [1, 1, 2, 12])
    check_transform(A, E)


def test_smith_zero():
    A = Matrix.zeros(ZZ, (4, 6))
    E = eliminate(A, form=Form.SMITH)
    assert E.result == A
    assert E.rank == 0
    assert E.row_ops == [] and E.col_ops == []


def test_smith_rational():
    A = Matrix.from_grid(QQ, (5, 5), [
        -3, 0, 0, "-9/2", 0,
        "10/3", 2, 0, "-15/2", 6,
        "-10/3", -2, 0, "15/2", -10,
        0, 0, "3/4", -5, 0,
        0, 0, 1, 0, 0,
    ])
    E = eliminate(A, form=Form.SMITH)
    assert E.result == Matrix.identity(QQ, 5)
    check_transform(A, E)


def test_smith_rational_rank3():
    A = Matrix.from_grid(QQ, (5, 5), [
        1, 1, 0, "8/3", "10/3",
        -3, 0, 0, -3, -5,
        2, 0, "10/3", 2, "16/3",
        "79/8", 0, "395/24", "79/8", "79/3",
        "7/2", 0, "35/6", "7/2", "28/3",
    ])
    E = eliminate(A, form=Form.SMITH)
    assert E.result == Matrix.diagonal(QQ, (5, 5), [1, 1, 1])


def test_smith_polynomial():
    """ Smith form of the characteristic matrix xI - A gives the invariant factors of A """
    R = PolynomialRing("x")
    x = R.indeterminate
    A = Matrix.from_rows(R, [[0, 2, 1], [-4, 6, 2], [4, -4, 0]])
    C = Matrix.diagonal(R, (3, 3), [x] * 3) - A
    E = eliminate(C, form=Form.SMITH)
    d = x - R.coerce(2)
    assert E.result == Matrix.diagonal(R, (3, 3), [R.one, d, d * d])
    check_transform(C, E)


def test_row_hermite():
    A = Matrix.from_rows(ZZ, FULL_RANK)
    E = eliminate(A, form=Form.ROW_HERMITE)
    assert E.result.is_identity
    assert E.col_ops == []
    check_transform(A, E)


def test_row_hermite_reduces_above_pivots():
    A = Matrix.from_rows(ZZ, RANK4)
    E = eliminate(A, form=Form.ROW_HERMITE)
    B = E.result
    check_transform(A, E)
    assert E.rank == 4
    # Every pivot is positive, and every entry above it is reduced modulo it
    for i in range(4):
        row = [j for j in range(5) if B[i, j] != 0]
        j = row[0]
        assert B[i, j] > 0
        for k in range(i):
            assert 0 <= B[k, j] < B[i, j]
    assert all(B[4, j] == 0 for j in range(5))


def test_row_echelon():
    A = Matrix.from_rows(ZZ, RANK4)
    E = eliminate(A, form=Form.ROW_ECHELON)
    B = E.result
    check_transform(A, E)
    assert E.rank == 4
    heads = [min(j for j in range(5) if B[i, j] != 0) for i in range(4)]
    assert heads == sorted(heads)
    assert len(set(heads)) == 4


def test_col_hermite():
    A = Matrix.from_rows(ZZ, [[2, 4], [1, 3]])
    E = eliminate(A, form=Form.COL_HERMITE)
    assert E.row_ops == []
    assert E.result == Matrix.from_rows(ZZ, [[2, 0], [0, 1]])
    assert A @ E.right() == E.result


def test_col_echelon():
    A = Matrix.from_rows(ZZ, RANK4)
    E = eliminate(A, form=Form.COL_ECHELON)
    check_transform(A, E)
    assert E.row_ops == []
    assert E.rank == 4
    assert E.result.transposed == eliminate(A.transposed, form=Form.ROW_ECHELON).result


def test_left_right_restrictions():
    A = Matrix.from_rows(ZZ, FULL_RANK)
    E = eliminate(A, form=Form.SMITH)
    r = range(2, 4)

    P = E.left()
    assert E.left(cols=r) == P.submatrix(cols=r)
    assert E.left(rows=r) == P.submatrix(rows=r)

    Pi = E.left_inverse()
    assert E.left_inverse(cols=r) == Pi.submatrix(cols=r)
    assert E.left_inverse(rows=r) == Pi.submatrix(rows=r)

    Q = E.right()
    assert E.right(cols=r) == Q.submatrix(cols=r)
    assert E.right(rows=r) == Q.submatrix(rows=r)

    Qi = E.right_inverse()
    assert E.right_inverse(cols=r) == Qi.submatrix(cols=r)
    assert E.right_inverse(rows=r) == Qi.submatrix(rows=r)

    with pytest.raises(MatrixError):
        E.left(rows=r, cols=r)


def test_kernel():
    A = Matrix.from_rows(ZZ, [[1, 2], [1, 2]])
    E = eliminate(A)
    K = E.kernel_matrix
    assert K.shape == (2, 1)
    assert (A @ K).is_zero
    T = E.kernel_transition_matrix
    assert T @ K == Matrix.identity(ZZ, 1)


def test_kernel_wide():
    A = Matrix.from_grid(ZZ, (6, 15), [
        -1, -1, 0, 0, 0, 0, 0, -1, -1, 0, -1, 0, 0, 0, 0,
        1, 0, -1, -1, 0, -1, 0, 0, 0, 0, 0, -1, 0, 0, 0,
        0, 1, 1, 0, -1, 0, 0, 0, 0, 0, 0, 0, 0, 1, -1,
        0, 0, 0, 1, 1, 0, 1, 1, 0, -1, 0, 0, 0, 0, 0,
        0, 0, 0, 0, 0, 1, -1, 0, 1, 0, 0, 0, -1, -1, 0,
        0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 0, 1,
    ])
    E = eliminate(A)
    K = E.kernel_matrix
    assert K.shape == (15, 10)
    assert A @ K == Matrix.zeros(ZZ, (6, 10))
    T = E.kernel_transition_matrix
    assert T.shape == (10, 15)
    assert T @ K == Matrix.identity(ZZ, 10)


def test_image():
    A = Matrix.from_rows(ZZ, [[2, 4], [2, 4]])
    E = eliminate(A)
    I = E.image_matrix
    assert I == Matrix.from_rows(ZZ, [[2], [2]])
    T = E.image_transition_matrix
    assert T.shape == (1, 2)
    assert T @ I == Matrix.from_rows(ZZ, [[2]])


def test_determinant():
    A = Matrix.from_rows(ZZ, [
        [3, -1, 2, 4],
        [2, 1, 1, 3],
        [-2, 0, 3, -1],
        [0, -2, 1, 3],
    ])
    assert eliminate(A).determinant == 66
    assert eliminate(Matrix.from_rows(ZZ, RANK4)).determinant == 0
    assert eliminate(Matrix.from_rows(QQ, [[Fraction(1, 2), 1], [0, 4]])).determinant == 2
    with pytest.raises(MatrixDimError):
        eliminate(Matrix.zeros(ZZ, (2, 3))).determinant


def test_inverse():
    A = Matrix.from_rows(ZZ, FULL_RANK)
    Ai = eliminate(A).inverse
    assert A @ Ai == Matrix.identity(ZZ, 5)
    assert Ai @ A == Matrix.identity(ZZ, 5)
    # Determinant 2: invertible over the rationals only
    B = [[2, 4], [1, 3]]
    assert eliminate(Matrix.from_rows(ZZ, B)).inverse is None
    Bi = eliminate(Matrix.from_rows(QQ, B)).inverse
    assert Bi == Matrix.from_rows(QQ, [["3/2", -2], ["-1/2", 1]])


def test_invert():
    A = Matrix.from_grid(ZZ, (6, 4), [
        8, -6, 14, -10, -14, 6, 12, -8, 18, -18, -20, 8, -16, 7, -23, 22, 23, -7, 32, -17, 44, -49, -49, 17,
    ])
    E = eliminate(A)
    y = A @ Matrix.from_rows(ZZ, [[1], [2], [3], [4]])
    x = E.invert(y)
    assert x is not None
    assert A @ x == y

    y2 = Matrix.from_rows(ZZ, [[v] for v in [243996, -422477, 555238, -482263, 689731, 1363066]])
    assert E.invert(y2) is None
    y3 = Matrix.from_rows(ZZ, [[v] for v in [520530, -901291, 1184519, -1028837, 1471438, 2907903]])
    assert E.invert(y3) is None


def test_invert_requires_diagonal():
    E = eliminate(Matrix.from_rows(ZZ, [[1, 2], [0, 3]]), form=Form.ROW_ECHELON)
    with pytest.raises(MatrixError):
        E.kernel_matrix
    with pytest.raises(MatrixError):
        E.invert(Matrix.from_rows(ZZ, [[1], [1]]))


def test_debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="ringsolve")
    eliminate(Matrix.from_rows(ZZ, [[2, 4], [2, 4]]), debug=True)
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("Pivot") for m in messages)
    assert any("X" in m for m in messages)
