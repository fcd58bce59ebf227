"""
Randomized Rank over GF(2), on a Shared Bit Buffer

The same search as `rank.RankCalculator`, specialized to GF(2):
every slot owns one row of a single `uint8` buffer, and reduces by XOR-ing whole pivot rows at once.
As there, coefficients are all one until the full-size rounds, which draw random bits.
"""

import logging
from typing import Dict, Optional, Sequence

import numpy as np

from . import config
from .errors import MatrixError
from .parallel import parallel_map
from .rank import slot_generators
from .rings import GF2
from .sparse.matrix import SparseRowMatrix
from .sparse.row import SparseRow, add_into

logger = logging.getLogger(__name__)


class FastRankCalculator(object):
    def __init__(self, data: SparseRowMatrix, pivots: Sequence, seed: Optional[int] = None):
        MatrixError.assert_eq(data.ring, GF2, "FastRankCalculator requires GF(2)")
        self.data = data
        self.pivots = list(pivots)
        pivot_rows = {i for i, _, _ in self.pivots}
        self.remaining = [i for i, row in enumerate(data.rows) if i not in pivot_rows and not row.is_empty]
        self.slots = min(len(self.remaining), config.RANK_SLOTS)
        self.rngs = slot_generators(seed, self.slots)
        self.buffer = np.zeros((self.slots, data.shape[1]), dtype=np.uint8)
        self.pivot_cols: Dict[int, np.ndarray] = {i: self.columns_of(data.row(i)) for i in pivot_rows}

    @staticmethod
    def columns_of(row: SparseRow) -> np.ndarray:
        return np.fromiter((j for j, _ in row), dtype=np.intp)

    def run(self) -> int:
        N = len(self.remaining)
        if N == 0:
            return len(self.pivots)

        step = 1
        while step <= N:
            units_only = step < N
            candidates = parallel_map(lambda s: self.candidate(s, step, units_only), range(self.slots))

            added = 0
            for row in candidates:
                if row.is_empty:
                    continue
                row = self.eliminate_row(row, 0)
                if row.is_empty:
                    continue
                self.accept(row)
                added += 1

            logger.debug("fast rank step %d: %d pivots, %d added", step, len(self.pivots), added)
            if added == 0:
                if step < N:
                    step = min(2 * step, N)
                else:
                    break

        return len(self.pivots)

    def accept(self, row: SparseRow):
        i = self.data.shape[0]
        self.data.append(row)
        self.pivot_cols[i] = self.columns_of(row)
        self.pivots.append((i, row.head.col, row.head.val))

    def candidate(self, slot: int, step: int, units_only: bool) -> SparseRow:
        return self.eliminate_row(self.random_row(self.rngs[slot], step, units_only), slot)

    def random_row(self, rng: np.random.Generator, step: int, units_only: bool) -> SparseRow:
        row = SparseRow()
        for _ in range(step):
            if not units_only and not rng.integers(2):
                continue
            i = self.remaining[int(rng.integers(len(self.remaining)))]
            add_into(GF2, self.data.row(i), row, 1)
        return row

    def eliminate_row(self, row: SparseRow, slot: int) -> SparseRow:
        """ Reduce `row` against the accepted pivots within buffer-row `slot`, which is left zeroed """
        buf = self.buffer[slot]
        for j, _ in row:
            buf[j] = 1

        for i0, j0, _ in list(self.pivots):
            if buf[j0]:
                buf[self.pivot_cols[i0]] ^= 1

        nonzero = np.flatnonzero(buf)
        buf[nonzero] = 0
        return SparseRow((int(j), 1) for j in nonzero)


def fast_calculate_rank(A, pivots: Optional[Sequence] = None, seed: Optional[int] = None) -> int:
    """ Rank of dense matrix `A` over GF(2).
    `pivots` default to the structural pivots of `A`. """
    if pivots is None:
        from .pivots import find_pivots
        pivots = find_pivots(A).pivots
    return FastRankCalculator(SparseRowMatrix.from_matrix(A), pivots, seed=seed).run()
