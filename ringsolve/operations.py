"""
Elementary Row & Column Operations

Row operations act on the left (P * A), column operations on the right (A * Q).
`transposed` maps each onto its dual acting on the transpose,
and `opposite` onto the column (or row) operation which multiplies on the other side:
if `op` is the row operation with matrix E, `X * E` is `X` with `op.opposite` applied.
"""

from typing import NamedTuple


class AddRow(NamedTuple):
    """ row[to] += mul * row[at] """
    at: int
    to: int
    mul: object

    def inverse(self, ring) -> "AddRow":
        return AddRow(self.at, self.to, ring.neg(self.mul))

    def determinant(self, ring):
        return ring.one

    @property
    def transposed(self) -> "AddCol":
        return AddCol(self.at, self.to, self.mul)

    @property
    def opposite(self) -> "AddCol":
        return AddCol(self.to, self.at, self.mul)


class MulRow(NamedTuple):
    """ row[at] *= by """
    at: int
    by: object

    def inverse(self, ring) -> "MulRow":
        return MulRow(self.at, ring.inverse(self.by))

    def determinant(self, ring):
        return self.by

    @property
    def transposed(self) -> "MulCol":
        return MulCol(self.at, self.by)

    @property
    def opposite(self) -> "MulCol":
        return self.transposed


class SwapRows(NamedTuple):
    i: int
    j: int

    def inverse(self, ring) -> "SwapRows":
        return self

    def determinant(self, ring):
        return ring.neg(ring.one)

    @property
    def transposed(self) -> "SwapCols":
        return SwapCols(self.i, self.j)

    @property
    def opposite(self) -> "SwapCols":
        return self.transposed


class AddCol(NamedTuple):
    """ col[to] += mul * col[at] """
    at: int
    to: int
    mul: object

    def inverse(self, ring) -> "AddCol":
        return AddCol(self.at, self.to, ring.neg(self.mul))

    def determinant(self, ring):
        return ring.one

    @property
    def transposed(self) -> AddRow:
        return AddRow(self.at, self.to, self.mul)

    @property
    def opposite(self) -> AddRow:
        return AddRow(self.to, self.at, self.mul)


class MulCol(NamedTuple):
    """ col[at] *= by """
    at: int
    by: object

    def inverse(self, ring) -> "MulCol":
        return MulCol(self.at, ring.inverse(self.by))

    def determinant(self, ring):
        return self.by

    @property
    def transposed(self) -> MulRow:
        return MulRow(self.at, self.by)

    @property
    def opposite(self) -> MulRow:
        return self.transposed


class SwapCols(NamedTuple):
    i: int
    j: int

    def inverse(self, ring) -> "SwapCols":
        return self

    def determinant(self, ring):
        return ring.neg(ring.one)

    @property
    def transposed(self) -> SwapRows:
        return SwapRows(self.i, self.j)

    @property
    def opposite(self) -> SwapRows:
        return self.transposed

