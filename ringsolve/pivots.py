"""
Structural Pivot Search

Selects pivots without any numeric elimination, such that the pivot rows & columns
can be permuted into a leading upper-triangular block with invertible diagonal.

Phases, in order:
* Row-local (Faugere-Lachartre) pivots: leading entries of rows, one per column
* Column extension: the first unreserved invertible entry of each remaining row
* Cycle-free pivots: entries whose column cannot reach back to the row through existing pivots
* Topological ordering of the pivot dependency graph

After "Parallel Sparse PLUQ Factorization modulo p", Bouillaguet, Delaplace & Voge.
"""

import logging
from collections import deque
from graphlib import CycleError, TopologicalSorter
from threading import Lock
from typing import Dict, List, Optional, Set, Tuple

from . import config
from .errors import InvariantError
from .parallel import parallel_for_each
from .permutation import Permutation
from .sparse.matrix import SparseRowMatrix

logger = logging.getLogger(__name__)

Pivot = Tuple[int, int, object]


class PivotResult(object):
    def __init__(self, pivots: List[Pivot], row_permutation: Permutation, col_permutation: Permutation):
        self.pivots = pivots
        self.row_permutation = row_permutation
        self.col_permutation = col_permutation

    @property
    def number_of_pivots(self) -> int:
        return len(self.pivots)

    def __repr__(self):
        return f"<{self.__class__.__name__}(pivots={self.number_of_pivots})>"


class PivotFinder(object):
    def __init__(self, data: SparseRowMatrix, debug: bool = False):
        self.data = data
        self.ring = data.ring
        self.debug = debug
        self.row_weights = [row.weight(self.ring) for row in data.rows]
        self.pivots: Dict[int, Tuple[int, object]] = {}  # col -> (row, value)
        self.pivot_rows: Set[int] = set()
        self._lock = Lock()

    @property
    def shape(self):
        return self.data.shape

    def run(self) -> List[Pivot]:
        self.find_row_pivots()
        self.find_col_pivots()
        self.find_cycle_free_pivots()
        pivots = self.sort_pivots()
        if self.debug and max(self.shape) <= config.DISPLAY_LIMIT:
            logger.debug("\n%s", self.data.display())
        return pivots

    def set_pivot(self, i: int, j: int, a):
        self.pivots[j] = (i, a)
        self.pivot_rows.add(i)

    def is_better(self, i1: int, i2: int) -> bool:
        """ Compare two rows competing for the same leading column: lighter head, then lighter row """
        w1 = self.ring.weight(self.data.row(i1).head.val)
        w2 = self.ring.weight(self.data.row(i2).head.val)
        return (w1, self.row_weights[i1]) < (w2, self.row_weights[i2])

    def find_row_pivots(self):
        ring = self.ring
        found: Dict[int, Tuple[int, object]] = {}
        for i, row in enumerate(self.data.rows):
            head = row.head
            if head is None or not ring.is_unit(head.val):
                continue
            j = head.col
            if j not in found or self.is_better(i, found[j][0]):
                found[j] = (i, head.val)

        for j, (i, a) in found.items():
            self.set_pivot(i, j, a)
        logger.debug("row pivots: %d", len(self.pivots))

    def find_col_pivots(self):
        """ Columns touched by a pivot row are reserved, and so is every column passed over on the way.
        The first unreserved invertible entry of a non-pivot row becomes its pivot. """
        ring = self.ring
        reserved = set()
        for i in self.pivot_rows:
            reserved.update(j for j, _ in self.data.row(i))

        for i, row in enumerate(self.data.rows):
            is_pivot_row = i in self.pivot_rows
            for j, a in row:
                if j in reserved:
                    continue
                reserved.add(j)
                if not is_pivot_row and ring.is_unit(a):
                    self.set_pivot(i, j, a)
                    is_pivot_row = True
        logger.debug("col pivots: %d", len(self.pivots))

    def find_cycle_free_pivots(self):
        """ Search the remaining rows concurrently.
        Each search works on a snapshot of the pivots, and commits only if no other pivot was committed since;
        otherwise it retries on a fresh snapshot. """
        rows = [i for i, row in enumerate(self.data.rows) if i not in self.pivot_rows and not row.is_empty]

        def search(i: int):
            while True:
                with self._lock:
                    snapshot = {j: k for j, (k, _) in self.pivots.items()}
                found = self.find_cycle_free_pivot(i, snapshot)
                if found is None:
                    return
                with self._lock:
                    if len(self.pivots) == len(snapshot):
                        self.set_pivot(*found)
                        return
                logger.debug("row %d: pivots changed during search, retrying", i)

        parallel_for_each(search, rows)
        logger.debug("cycle-free pivots: %d", len(self.pivots))

    def find_cycle_free_pivot(self, i: int, pivots: Dict[int, int]) -> Optional[Pivot]:
        """ Breadth-first search from the pivot columns of row `i`, through the pivot rows.
        Invertible entries of row `i` in columns never reached are safe pivots;
        the one of least (weight, column) is returned. """
        ring = self.ring
        queue = deque()
        candidates: Dict[int, object] = {}

        for j, a in self.data.row(i):
            if j in pivots:
                queue.append(j)
            elif ring.is_unit(a):
                candidates[j] = a

        visited = set(queue)
        while queue and candidates:
            j = queue.popleft()
            for l, _ in self.data.row(pivots[j]):
                if l in pivots:
                    if l not in visited:
                        visited.add(l)
                        queue.append(l)
                else:
                    candidates.pop(l, None)

        if not candidates:
            return None
        j = min(candidates, key=lambda c: (ring.weight(candidates[c]), c))
        return i, j, candidates[j]

    def sort_pivots(self) -> List[Pivot]:
        """ Order the pivots so that each precedes every pivot whose column occurs in its row """
        ts = TopologicalSorter()
        for j in sorted(self.pivots):
            ts.add(j)
            i, _ = self.pivots[j]
            for k, _ in self.data.row(i):
                if k != j and k in self.pivots:
                    ts.add(k, j)
        try:
            order = list(ts.static_order())
        except CycleError as e:
            raise InvariantError(f"cycle in pivot dependencies: {e.args[1]}") from e
        return [(self.pivots[j][0], j, self.pivots[j][1]) for j in order]


def find_pivots(A, debug: bool = False) -> PivotResult:
    """ Find structural pivots of dense matrix `A`,
    along with permutations which move the pivot rows & columns to the front, in pivot order. """
    data = SparseRowMatrix.from_matrix(A)
    pivots = PivotFinder(data, debug=debug).run()
    n, m = data.shape
    return PivotResult(
        pivots=pivots,
        row_permutation=Permutation.from_order([i for i, _, _ in pivots], n),
        col_permutation=Permutation.from_order([j for _, j, _ in pivots], m),
    )
