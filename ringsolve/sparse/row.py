from typing import Iterable, Iterator, Optional, Tuple

from ..errors import MatrixError


class Entry(object):
    """ Nonzero element of a row: column-index, value and a link to the next entry. """

    def __init__(self, col: int, val, next: Optional["Entry"] = None):
        self.col = col
        self.val = val
        self.next = next

    def __eq__(self, other):
        return self.col == other.col and self.val == other.val

    def __repr__(self):
        return f"<{self.__class__.__name__}(col={self.col}, val={self.val}, id={id(self)})>"


class SparseRow(object):
    """ Singly-linked list of Entries, strictly increasing in column.
    Zero values are never stored. """

    def __init__(self, entries: Iterable[Tuple[int, object]] = ()):
        self.head: Optional[Entry] = None
        prev = None
        for col, val in entries:
            e = Entry(col, val)
            if prev is None:
                self.head = e
            else:
                MatrixError.assert_true(prev.col < col, "row entries must be sorted by column")
                prev.next = e
            prev = e

    def __iter__(self) -> Iterator[Tuple[int, object]]:
        e = self.head
        while e is not None:
            yield e.col, e.val
            e = e.next

    def entries(self) -> Iterator[Entry]:
        e = self.head
        while e is not None:
            yield e
            e = e.next

    def __len__(self):
        """ Walks the whole row, so linear in its length """
        return sum(1 for _ in self.entries())

    def __eq__(self, other):
        return isinstance(other, SparseRow) and list(self) == list(other)

    def __repr__(self):
        return f"<{self.__class__.__name__}({list(self)})>"

    @property
    def is_empty(self) -> bool:
        return self.head is None

    @property
    def head_col(self) -> Optional[int]:
        return self.head.col if self.head is not None else None

    def drop_head(self):
        if self.head is not None:
            self.head = self.head.next

    def find(self, col: int) -> Tuple[Optional[Entry], Optional[Entry]]:
        """ Find the entry at column `col`.
        Returns a two-tuple (hit, prev) of the entry, or None,
        and the last entry before column `col`, or None. """
        prev = None
        e = self.head
        while e is not None and e.col <= col:
            if e.col == col:
                return e, prev
            prev = e
            e = e.next
        return None, prev

    def get(self, col: int):
        hit, _ = self.find(col)
        return hit.val if hit is not None else None

    def scale(self, ring, r):
        """ Multiply every value in-place by `r` """
        MatrixError.assert_true(not ring.is_zero(r), "cannot scale a row by zero")
        e = self.head
        while e is not None:
            e.val = ring.mul(r, e.val)
            e = e.next

    def weight(self, ring) -> int:
        return sum(ring.weight(a) for _, a in self)

    def copy(self) -> "SparseRow":
        return SparseRow(self)


def add_into(ring, source: SparseRow, target: SparseRow, r) -> int:
    """ Update `target += r * source`, in a single merging pass over both rows.
    New entries are spliced into `target`, cancelled ones are unlinked.
    Returns the change in `target`'s elimination weight.
    `source` is only read, so many targets may share it concurrently. """
    s = source.head
    if s is None:
        return 0

    dw = 0

    # Make sure `target` starts at or before `source`, so the walk below never needs to look back.
    # The placeholder zero is dropped at the end if nothing lands on it.
    if target.head is None or s.col < target.head.col:
        target.head = Entry(s.col, ring.zero, target.head)

    t = prev = target.head
    while s is not None:
        # Now t.col <= s.col.  Walk `t` up to the last entry at or before s.col.
        nxt = t.next
        while nxt is not None and nxt.col <= s.col:
            prev, t = t, nxt
            nxt = t.next

        if t.col == s.col:
            a = t.val
            b = ring.add(a, ring.mul(r, s.val))
            if ring.is_zero(b) and t is not target.head:
                prev.next = t.next  # Short-circuit over `t`
                t = prev
            else:
                t.val = b
            dw += ring.weight(b) - ring.weight(a)
        else:  # Splice a new entry in after `t`
            b = ring.mul(r, s.val)
            if not ring.is_zero(b):
                t.next = Entry(s.col, b, t.next)
                prev, t = t, t.next
                dw += ring.weight(b)

        s = s.next

    if ring.is_zero(target.head.val):
        target.drop_head()

    return dw
