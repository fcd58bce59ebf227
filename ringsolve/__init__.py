"""
ringsolve: exact sparse linear algebra over Euclidean rings and prime fields
"""

import logging

from .errors import InvariantError, MatrixDimError, MatrixError, NotInvertible, SingularMatrix
from .rings import GF2, QQ, ZZ, PolynomialRing, PrimeField, Ring, ring_from_name
from .matrix import Matrix
from .permutation import Permutation
from .operations import AddCol, AddRow, MulCol, MulRow, SwapCols, SwapRows
from .result import EliminationResult
from .eliminator import Form, MatrixEliminator, eliminate
from .pivots import PivotResult, find_pivots
from .lu import LUResult, factorize, prefactorize
from .linear import (
    has_solution,
    probably_has_solution,
    solve_left_regular,
    solve_left_upper_triangular,
)
from .rank import calculate_rank
from .fast_rank import fast_calculate_rank

logging.getLogger(__name__).addHandler(logging.NullHandler())
