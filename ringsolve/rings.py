"""
Coefficient Rings

A ring object does arithmetic on plain element values
(`int`, `fractions.Fraction`, residues, `sympy.Poly`),
so matrices can store those values without wrapping each one.
"""

import re
from fractions import Fraction
from typing import Any, Tuple

import sympy

from .errors import MatrixError, NotInvertible


class Ring(object):
    """ Base-class for Euclidean coefficient rings.

    Elimination relies on two integer measures per element:
    * `weight`, a complexity proxy which sums over rows and picks cheap pivots,
      and must be zero for the zero element;
    * `degree`, the Euclidean degree, which strictly decreases under `divmod`. """

    name = "ring"
    is_field = False

    def __init__(self):
        self.zero = self.coerce(0)
        self.one = self.coerce(1)

    def __repr__(self):
        return f"<{self.__class__.__name__}({self.name})>"

    def __eq__(self, other):
        return isinstance(other, Ring) and self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def coerce(self, x: Any) -> Any:
        """ Convert `x` into an element of this ring """
        raise NotImplementedError

    def is_zero(self, a) -> bool:
        return a == self.zero

    def add(self, a, b):
        return a + b

    def neg(self, a):
        return -a

    def sub(self, a, b):
        return a - b

    def mul(self, a, b):
        return a * b

    def weight(self, a) -> int:
        raise NotImplementedError

    def degree(self, a) -> int:
        raise NotImplementedError

    def is_unit(self, a) -> bool:
        raise NotImplementedError

    def inverse(self, a):
        raise NotImplementedError

    def divmod(self, a, b) -> Tuple[Any, Any]:
        """ Euclidean division: returns (q, r) with a = q*b + r and degree(r) < degree(b) """
        raise NotImplementedError

    def quotient(self, a, b):
        return self.divmod(a, b)[0]

    def normalizing_unit(self, a):
        """ The unit `u` for which `u * a` is the canonical associate of `a` """
        raise NotImplementedError

    def normalize(self, a):
        if self.is_zero(a):
            return a
        return self.mul(self.normalizing_unit(a), a)

    def is_normalized(self, a) -> bool:
        return self.normalize(a) == a

    def divides(self, d, a) -> bool:
        if self.is_zero(d):
            return self.is_zero(a)
        return self.is_zero(self.divmod(a, d)[1])

    def exact_div(self, a, d):
        """ Divide `a` by `d`, which must divide it """
        MatrixError.assert_true(not self.is_zero(d), "division by zero")
        q, r = self.divmod(a, d)
        MatrixError.assert_true(self.is_zero(r), f"{self.format(d)} does not divide {self.format(a)}")
        return q

    def sum(self, values):
        total = self.zero
        for v in values:
            total = self.add(total, v)
        return total

    def product(self, values):
        total = self.one
        for v in values:
            total = self.mul(total, v)
        return total

    def random_element(self, rng, units_only: bool = False):
        """ Draw a uniform element, using numpy Generator `rng`.
        Only finite rings support this. """
        raise NotImplementedError(f"{self.name} is not finite")

    def format(self, a) -> str:
        return str(a)

    def parse(self, s: str):
        return self.coerce(s)


class IntegerRing(Ring):
    name = "ZZ"

    def coerce(self, x):
        if isinstance(x, Fraction):
            MatrixError.assert_eq(x.denominator, 1, f"{x} is not an integer")
            return x.numerator
        return int(x)

    def weight(self, a) -> int:
        return abs(a)

    def degree(self, a) -> int:
        return abs(a)

    def is_unit(self, a) -> bool:
        return a == 1 or a == -1

    def inverse(self, a):
        if not self.is_unit(a):
            raise NotInvertible(f"{a} is not invertible in {self.name}")
        return a

    def divmod(self, a, b):
        return divmod(a, b)

    def normalizing_unit(self, a):
        return -1 if a < 0 else 1


class RationalField(Ring):
    name = "QQ"
    is_field = True

    def coerce(self, x):
        return Fraction(x)

    def weight(self, a) -> int:
        if a == 0:
            return 0
        return max(abs(a.numerator), a.denominator)

    def degree(self, a) -> int:
        return 0

    def is_unit(self, a) -> bool:
        return a != 0

    def inverse(self, a):
        if a == 0:
            raise NotInvertible(f"0 is not invertible in {self.name}")
        return 1 / a

    def divmod(self, a, b):
        return a / b, self.zero

    def normalizing_unit(self, a):
        return self.inverse(a)


class PrimeField(Ring):
    """ Residues modulo a prime `p`, stored as ints in range(p) """
    is_field = True

    def __init__(self, p: int):
        MatrixError.assert_true(p >= 2, f"invalid modulus {p}")
        self.p = p
        self.name = f"GF({p})"
        super().__init__()

    def coerce(self, x):
        if isinstance(x, Fraction):
            return x.numerator * pow(x.denominator, -1, self.p) % self.p
        return int(x) % self.p

    def add(self, a, b):
        return (a + b) % self.p

    def neg(self, a):
        return -a % self.p

    def sub(self, a, b):
        return (a - b) % self.p

    def mul(self, a, b):
        return a * b % self.p

    def weight(self, a) -> int:
        return 1 if a else 0

    def degree(self, a) -> int:
        return 0

    def is_unit(self, a) -> bool:
        return a != 0

    def inverse(self, a):
        if a == 0:
            raise NotInvertible(f"0 is not invertible in {self.name}")
        return pow(a, -1, self.p)

    def divmod(self, a, b):
        return self.mul(a, self.inverse(b)), self.zero

    def normalizing_unit(self, a):
        return self.inverse(a)

    def random_element(self, rng, units_only: bool = False):
        low = 1 if units_only else 0
        return int(rng.integers(low, self.p))


class PolynomialRing(Ring):
    """ Univariate polynomials over the rationals, as `sympy.Poly` values """
    is_field = False

    def __init__(self, symbol: str = "x"):
        self.gen = sympy.Symbol(symbol)
        self.name = f"QQ[{symbol}]"
        super().__init__()

    @property
    def indeterminate(self) -> sympy.Poly:
        return sympy.Poly(self.gen, self.gen, domain=sympy.QQ)

    def coerce(self, x):
        if isinstance(x, sympy.Poly):
            return x
        if isinstance(x, Fraction):
            x = sympy.Rational(x.numerator, x.denominator)
        elif isinstance(x, str):
            x = sympy.sympify(x)
        return sympy.Poly(x, self.gen, domain=sympy.QQ)

    def is_zero(self, a) -> bool:
        return a.is_zero

    def weight(self, a) -> int:
        return 0 if a.is_zero else a.degree() + 1

    def degree(self, a) -> int:
        return 0 if a.is_zero else a.degree()

    def is_unit(self, a) -> bool:
        return not a.is_zero and a.degree() == 0

    def inverse(self, a):
        if not self.is_unit(a):
            raise NotInvertible(f"{self.format(a)} is not invertible in {self.name}")
        return self.coerce(sympy.S.One / a.LC())

    def divmod(self, a, b):
        return a.div(b)

    def normalizing_unit(self, a):
        return self.coerce(sympy.S.One / a.LC())

    def format(self, a) -> str:
        return str(a.as_expr())


ZZ = IntegerRing()
QQ = RationalField()
GF2 = PrimeField(2)


def ring_from_name(name: str) -> Ring:
    """ Resolve a ring from its `name`: ZZ, QQ, GF(p) or QQ[x] """
    name = name.strip()
    if name == ZZ.name: return ZZ
    if name == QQ.name: return QQ
    m = re.fullmatch(r"GF\((\d+)\)", name)
    if m: return PrimeField(int(m.group(1)))
    m = re.fullmatch(r"QQ\[(\w+)\]", name)
    if m: return PolynomialRing(m.group(1))
    raise ValueError(f"Unknown ring: {name}")
