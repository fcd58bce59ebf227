"""
Matrix Elimination

A single `MatrixEliminator` drives every elimination form through the
`prepare / is_done / iteration / finalize` protocol, dispatching on its `Form`.
Column forms run the row forms on the transposed data,
and Diagonal & Smith forms are built from nested runs of the echelon forms.
"""

import logging
from enum import Enum
from typing import List, Optional

from . import config
from .errors import MatrixError
from .operations import AddRow, MulRow, SwapRows
from .result import EliminationResult
from .sparse.elimination import EliminationIndex

logger = logging.getLogger(__name__)


class Form(Enum):
    ROW_ECHELON = "row_echelon"
    COL_ECHELON = "col_echelon"
    ROW_HERMITE = "row_hermite"
    COL_HERMITE = "col_hermite"
    DIAGONAL = "diagonal"
    SMITH = "smith"

    @property
    def is_row_form(self) -> bool:
        return self in (Form.ROW_ECHELON, Form.ROW_HERMITE)

    @property
    def is_col_form(self) -> bool:
        return self in (Form.COL_ECHELON, Form.COL_HERMITE)

    @property
    def reduced(self) -> bool:
        return self in (Form.ROW_HERMITE, Form.COL_HERMITE)


class MatrixEliminator(object):
    """ Runs one elimination `form` over `data`, logging every elementary operation it performs.
    Row operations are recorded in `row_ops`, column operations in `col_ops`, both in the order applied. """

    def __init__(self, data: EliminationIndex, form: Form, debug: bool = False):
        self.data = data
        self.form = form
        self.debug = debug
        self.row_ops: List = []
        self.col_ops: List = []
        self.current_row = 0
        self.current_col = 0

    def __repr__(self):
        return f"<{self.__class__.__name__}({self.form.name})>"

    @property
    def ring(self):
        return self.data.ring

    @property
    def shape(self):
        return self.data.shape

    def run(self) -> "MatrixEliminator":
        logger.debug("Start: %s, shape=%s", self, self.shape)
        self.prepare()

        itr = 0
        while not self.is_done():
            logger.debug("%s iteration: %d", self, itr)
            self.log_current_matrix()
            self.iteration()
            itr += 1

        self.finalize()
        logger.debug("Done: %s, %d steps", self, len(self.row_ops) + len(self.col_ops))
        self.log_current_matrix()
        return self

    def subrun(self, form: Form, transpose: bool = False):
        """ Run a nested eliminator of `form` on our data, and adopt its operation logs.
        With `transpose`, the nested run works on the transposed data,
        so its row operations are our column operations and vice versa. """
        if transpose:
            self.data.transpose()

        sub = MatrixEliminator(self.data, form, debug=self.debug).run()

        if not transpose:
            self.row_ops.extend(sub.row_ops)
            self.col_ops.extend(sub.col_ops)
        else:
            self.data.transpose()
            self.row_ops.extend(op.transposed for op in sub.col_ops)
            self.col_ops.extend(op.transposed for op in sub.row_ops)

    # Protocol, dispatched on `form`

    def prepare(self):
        if self.form is Form.COL_ECHELON:
            self.subrun(Form.ROW_ECHELON, transpose=True)
        elif self.form is Form.COL_HERMITE:
            self.subrun(Form.ROW_HERMITE, transpose=True)
        elif self.form is Form.SMITH:
            self.subrun(Form.DIAGONAL)

    def is_done(self) -> bool:
        if self.form.is_row_form:
            return self.current_row >= self.shape[0] or self.current_col >= self.shape[1]
        elif self.form.is_col_form:
            return True
        elif self.form is Form.DIAGONAL:
            return self.is_diagonal()
        elif self.form is Form.SMITH:
            return self.first_broken_divisor() is None
        raise MatrixError(f"Unknown form {self.form}")

    def iteration(self):
        if self.form.is_row_form:
            return self.echelon_iteration()
        elif self.form is Form.DIAGONAL:
            return self.diagonal_iteration()
        elif self.form is Form.SMITH:
            return self.smith_iteration()
        raise MatrixError(f"No iteration for form {self.form}")

    def finalize(self):
        pass

    # Row echelon

    def echelon_iteration(self):
        ring = self.ring
        candidates = self.data.heads_in_column(self.current_col)
        if not candidates:
            self.current_col += 1
            return

        i0, a0 = self.find_pivot(candidates)
        logger.debug("Pivot: (%d, %d), %s", i0, self.current_col, ring.format(a0))

        if len(candidates) > 1:
            again = False
            targets = []
            for i, a in candidates:
                if i == i0:
                    continue
                q, r = ring.divmod(a, a0)
                if not ring.is_zero(r):
                    again = True
                if not ring.is_zero(q):
                    targets.append((i, ring.neg(q)))

            self.batch_add_row(i0, targets)
            if again:
                # Remainders are left in the column, all of lower degree than the pivot. Go round again.
                return

        if not ring.is_normalized(a0):
            self.apply(MulRow(i0, ring.normalizing_unit(a0)))

        if i0 != self.current_row:
            self.apply(SwapRows(i0, self.current_row))

        if self.form.reduced:
            self.reduce_current_col()

        self.current_row += 1
        self.current_col += 1

    def find_pivot(self, candidates) -> tuple:
        """ Candidate of least Euclidean degree, then least row-weight.
        `candidates` come in row order, so remaining ties go to the upper row. """
        ring = self.ring
        return min(candidates, key=lambda c: (ring.degree(c[1]), self.data.row_weight(c[0])))

    def reduce_current_col(self):
        """ Reduce the entries above the current pivot modulo the pivot """
        ring = self.ring
        a0 = self.data.row(self.current_row).head.val
        targets = []
        for i, a in self.data.entries_above_row(self.current_col, self.current_row):
            q = ring.quotient(a, a0)
            if not ring.is_zero(q):
                targets.append((i, ring.neg(q)))
        self.batch_add_row(self.current_row, targets)

    def batch_add_row(self, i0: int, targets):
        if not targets:
            return
        self.data.batch_add_row(i0, [i for i, _ in targets], [r for _, r in targets])
        for i, r in targets:
            self.append(AddRow(i0, i, r))

    # Diagonal

    def is_diagonal(self) -> bool:
        """ Every nonzero component is normalized and sits on the diagonal,
        and the nonzero diagonal entries lead the diagonal. """
        ring = self.ring
        count = 0
        last = -1
        for i, j, a in self.data.components():
            if i != j or not ring.is_normalized(a):
                return False
            count += 1
            last = i
        return last == count - 1

    def diagonal_iteration(self):
        self.subrun(Form.ROW_ECHELON)
        if self.is_done():
            return
        self.subrun(Form.COL_ECHELON)

    # Smith

    def first_broken_divisor(self) -> Optional[int]:
        """ Index `i` of the first adjacent diagonal pair with d_i not dividing d_{i+1}, or None """
        ring = self.ring
        diag = [a for i, j, a in self.data.components() if i == j]
        for i in range(len(diag) - 1):
            if not ring.divides(diag[i], diag[i + 1]):
                return i
        return None

    def smith_iteration(self):
        i = self.first_broken_divisor()
        logger.debug("Divisor chain broken at %d", i)
        # Bring d_{i+1} into row i, so the diagonal pass replaces the pair with its gcd & lcm.
        self.apply(AddRow(i + 1, i, self.ring.one))
        self.subrun(Form.DIAGONAL)

    # Operation log

    def apply(self, op):
        self.data.apply(op)
        self.append(op)

    def append(self, op):
        self.row_ops.append(op)
        logger.debug("%s", op)

    def log_current_matrix(self):
        if not self.debug:
            return
        n, m = self.shape
        if n > config.DISPLAY_LIMIT or m > config.DISPLAY_LIMIT:
            return
        logger.debug("\n%s", self.data.display())


def eliminate(A, form: Form = Form.DIAGONAL, debug: bool = False) -> EliminationResult:
    """ Eliminate dense matrix `A` into `form`.
    Returns the resulting matrix along with the row and column operations which produced it. """
    data = EliminationIndex.from_matrix(A)
    e = MatrixEliminator(data, form, debug=debug).run()
    return EliminationResult(form, data.to_matrix(), e.row_ops, e.col_ops)
