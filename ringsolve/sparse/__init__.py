from .row import Entry, SparseRow, add_into
from .matrix import SparseRowMatrix
from .elimination import EliminationIndex
