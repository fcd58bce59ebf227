from typing import Iterable, List

from .errors import MatrixError


class Permutation(object):
    """ Reordering of row or column indices, held as two inverse lookup lists:
    `e2i` from original index to permuted position, `i2e` back again.

    `p[i]` is the (internal) position that (external) index `i` is sent to,
    so a row `i` of `A` becomes row `p[i]` of the permuted matrix. """

    def __init__(self, size: int):
        self.e2i = list(range(size))
        self.i2e = list(range(size))

    @classmethod
    def from_order(cls, order: Iterable[int], size: int) -> "Permutation":
        """ Create the permutation which moves the indices of `order` to the front, in order.
        Indices not listed follow, in ascending order. """
        order = list(order)
        listed = set(order)
        MatrixError.assert_eq(len(listed), len(order), "repeated index in order")
        MatrixError.assert_true(all(0 <= k < size for k in order), "order index out of range")
        p = cls(size)
        p.i2e = order + [k for k in range(size) if k not in listed]
        for i, e in enumerate(p.i2e):
            p.e2i[e] = i
        return p

    def __len__(self):
        return len(self.e2i)

    def __getitem__(self, index: int) -> int:
        return self.e2i[index]

    def __eq__(self, other):
        return isinstance(other, Permutation) and self.e2i == other.e2i

    def __repr__(self):
        return f"<{self.__class__.__name__}({self.e2i})>"

    @property
    def order(self) -> List[int]:
        """ External indices, listed by internal position """
        return list(self.i2e)

    @property
    def inverse(self) -> "Permutation":
        inv = Permutation(len(self))
        inv.e2i, inv.i2e = list(self.i2e), list(self.e2i)
        return inv

    def extended(self, size: int) -> "Permutation":
        """ The same permutation acting on `size` indices, fixing the added ones """
        MatrixError.assert_true(size >= len(self))
        return Permutation.from_order(self.i2e + list(range(len(self), size)), size)

    def as_matrix(self, ring):
        """ The permutation matrix `P` with `(P * A)[p[i], :] == A[i, :]` """
        from .matrix import Matrix
        n = len(self)
        return Matrix.from_components(ring, (n, n), ((self.e2i[k], k, ring.one) for k in range(n)))
