"""
Randomized Rank over Prime Fields

Starts from structural pivots, which are exact, and grows the pivot set with random
combinations of the remaining rows, each reduced against every accepted pivot.
Combinations double in size whenever a round finds nothing new;
a fruitless round at full size ends the search.
While combinations are smaller than the number of remaining rows every coefficient is one;
only the full-size rounds draw random field elements as coefficients.

The result can understate the rank, with small probability.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from . import config
from .errors import MatrixError
from .parallel import parallel_map
from .sparse.matrix import SparseRowMatrix
from .sparse.row import SparseRow, add_into

logger = logging.getLogger(__name__)


def slot_generators(seed: Optional[int], slots: int) -> List[np.random.Generator]:
    """ Independent generators, one per slot, so concurrent slots never share random state """
    seed = seed if seed is not None else config.RANK_SEED
    return [np.random.default_rng(s) for s in np.random.SeedSequence(seed).spawn(slots)]


class RankCalculator(object):
    def __init__(self, data: SparseRowMatrix, pivots: Sequence, seed: Optional[int] = None):
        MatrixError.assert_true(data.ring.is_field, f"{data.ring.name} is not a field")
        self.data = data
        self.ring = data.ring
        self.pivots = list(pivots)
        pivot_rows = {i for i, _, _ in self.pivots}
        self.remaining = [i for i, row in enumerate(data.rows) if i not in pivot_rows and not row.is_empty]
        self.slots = min(len(self.remaining), config.RANK_SLOTS)
        self.rngs = slot_generators(seed, self.slots)

    def run(self) -> int:
        N = len(self.remaining)
        if N == 0:
            return len(self.pivots)

        buffers = [[self.ring.zero] * self.data.shape[1] for _ in range(self.slots)]
        step = 1
        while step <= N:
            # Only the final, full-size rounds draw random coefficients
            units_only = step < N
            candidates = parallel_map(lambda s: self.candidate(s, step, units_only, buffers[s]), range(self.slots))

            added = 0
            for row in candidates:
                if row.is_empty:
                    continue
                # Reduce again against pivots accepted earlier in this round
                row = self.eliminate_row(row, buffers[0])
                if row.is_empty:
                    continue
                self.accept(row)
                added += 1

            logger.debug("rank step %d: %d pivots, %d added", step, len(self.pivots), added)
            if added == 0:
                if step < N:
                    step = min(2 * step, N)
                else:
                    break

        return len(self.pivots)

    def accept(self, row: SparseRow):
        i = self.data.shape[0]
        self.data.append(row)
        self.pivots.append((i, row.head.col, row.head.val))

    def candidate(self, slot: int, step: int, units_only: bool, buffer: list) -> SparseRow:
        return self.eliminate_row(self.random_row(self.rngs[slot], step, units_only), buffer)

    def random_row(self, rng: np.random.Generator, step: int, units_only: bool) -> SparseRow:
        """ Sum of `step` remaining rows, drawn with replacement.
        Coefficients are all one with `units_only`, and uniform field elements otherwise. """
        ring = self.ring
        row = SparseRow()
        for _ in range(step):
            r = ring.one if units_only else ring.random_element(rng)
            if ring.is_zero(r):
                continue
            i = self.remaining[int(rng.integers(len(self.remaining)))]
            add_into(ring, self.data.row(i), row, r)
        return row

    def eliminate_row(self, row: SparseRow, buffer: list) -> SparseRow:
        """ Reduce `row` against the accepted pivots, in order, by expanding it into the dense `buffer`.
        The buffer is left zeroed. """
        ring = self.ring
        for j, a in row:
            buffer[j] = a

        for i0, j0, u0 in list(self.pivots):
            a = buffer[j0]
            if ring.is_zero(a):
                continue
            r = ring.neg(ring.mul(a, ring.inverse(u0)))
            for j, u in self.data.row(i0):
                buffer[j] = ring.add(buffer[j], ring.mul(r, u))

        entries = []
        for j, a in enumerate(buffer):
            if not ring.is_zero(a):
                entries.append((j, a))
                buffer[j] = ring.zero
        return SparseRow(entries)


def calculate_rank(A, pivots: Optional[Sequence] = None, seed: Optional[int] = None) -> int:
    """ Rank of dense matrix `A` over a prime field.
    `pivots` default to the structural pivots of `A`. """
    if pivots is None:
        from .pivots import find_pivots
        pivots = find_pivots(A).pivots
    return RankCalculator(SparseRowMatrix.from_matrix(A), pivots, seed=seed).run()
