"""
Error Classes
"""


class MatrixError(Exception):
    """ Contract violation by the caller of a matrix operation. """

    @classmethod
    def assert_true(cls, cond, msg: str = ""):
        if not cond:
            raise cls(msg)

    @classmethod
    def assert_eq(cls, x, y, msg: str = ""):
        if x != y:
            raise cls(msg or f"{x!r} != {y!r}")

    @classmethod
    def assert_not_eq(cls, x, y, msg: str = ""):
        if x == y:
            raise cls(msg or f"{x!r} == {y!r}")


class MatrixDimError(MatrixError): pass


class SingularMatrix(MatrixError): pass


class NotInvertible(SingularMatrix): pass


class InvariantError(MatrixError):
    """ An algorithm broke one of its own invariants.
    Raised for defects, never for bad input data. """
