from ...matrix import Matrix
from ...rings import GF2, ZZ, PolynomialRing
from ..file import SmsFile
from ..yaml import MatrixYaml


def test_dump_load(tmp_path):
    A = Matrix.from_rows(ZZ, [[2, 0], [0, -6]])
    y = MatrixYaml.from_matrix(A, desc="small")
    y.rank = 2
    y.smith = ["2", "6"]
    p = tmp_path / "small.yaml"
    y.dump(p)

    y2 = MatrixYaml.load(p)
    assert y2.desc == "small"
    assert y2.ring == "ZZ"
    assert y2.shape == (2, 2)
    assert y2.rank == 2
    assert y2.smith_diagonal() == [2, 6]
    assert y2.rhs is None
    assert y2.solvable is None
    assert y2.to_mat() == A


def test_rhs(tmp_path):
    A = Matrix.from_rows(GF2, [[1, 0], [1, 1]])
    y = MatrixYaml.from_matrix(A)
    y.rhs = ["1", "0"]
    y.solvable = True
    p = tmp_path / "gf2.yaml"
    y.dump(p)

    y2 = MatrixYaml.load(p)
    assert y2.get_ring() == GF2
    assert y2.solvable is True
    assert y2.rhs_vector() == Matrix.from_rows(GF2, [[1], [0]])


def test_polynomial_entries(tmp_path):
    R = PolynomialRing("x")
    A = Matrix.from_rows(R, [["x**2 - 1", 0], [0, "x"]])
    p = tmp_path / "poly.yaml"
    MatrixYaml.from_matrix(A).dump(p)
    y = MatrixYaml.load(p)
    assert y.ring == "QQ[x]"
    assert y.to_mat() == A


def test_from_sms_file(tmp_path):
    p = tmp_path / "m.sms"
    p.write_text("2 2 M\n1 2 4\n0 0 0\n")
    y = MatrixYaml.from_sms_file(SmsFile(p).read())
    assert y.desc == "m.sms"
    assert y.entries == [(0, 1, "4")]
    assert y.to_mat() == Matrix.from_rows(ZZ, [[0, 4], [0, 0]])
