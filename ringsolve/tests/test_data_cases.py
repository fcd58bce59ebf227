from pathlib import Path

import pytest

from ..eliminator import Form, eliminate
from ..linear import has_solution
from ..sparse.yaml import MatrixYaml

DATA = Path(__file__).resolve().parents[2] / "data"
CASES = sorted(DATA.glob("*.yaml"))


@pytest.mark.parametrize("path", CASES, ids=[p.stem for p in CASES])
def test_case(path):
    y = MatrixYaml.load(path)
    A = y.to_mat()
    ring = A.ring
    E = eliminate(A, form=Form.SMITH)
    assert A.shape == tuple(y.shape)
    assert E.left() @ A @ E.right() == E.result

    if y.rank is not None:
        assert E.rank == y.rank
    if y.smith is not None:
        assert [d for d in E.result.diagonal_components() if not ring.is_zero(d)] == y.smith_diagonal()

    if y.rhs is not None:
        b = y.rhs_vector()
        x = E.invert(b)
        assert (x is not None) == y.solvable
        if x is not None:
            assert A @ x == b
        if ring.is_field:
            assert has_solution(A, b) == y.solvable
