"""
Reading & writing SMS-format matrix files

    <rows> <cols> <type>
    <i> <j> <value>      (1-based, one line per nonzero entry)
    ...
    0 0 0

as used by the sparse integer matrix collections (e.g. the homology and GF(2) benchmark sets).
"""

from pathlib import Path
from typing import List, Tuple

from ..errors import MatrixError
from ..rings import ZZ


class SmsFile(object):
    def __init__(self, path, ring=ZZ):
        self.path = path
        self.ring = ring
        self.shape: Tuple[int, int] = (0, 0)
        self.ntype: str = "M"
        self.entries: List[Tuple[int, int, object]] = []
        self.line: int = 1

    def read(self) -> "SmsFile":
        with open(self.path) as f:
            header = f.readline().strip().split()
            if len(header) != 3:
                raise MatrixError(f"{self.path}:1: header parse error: {header}")
            self.shape = (int(header[0]), int(header[1]))
            self.ntype = header[2]

            for line in f:
                self.line += 1
                fields = line.strip().split()
                if not fields:
                    continue
                if len(fields) != 3:
                    raise MatrixError(f"{self.path}:{self.line}: expected 'i j v', got {line.strip()!r}")
                row, col = int(fields[0]), int(fields[1])
                if row == 0 and col == 0:
                    break
                self.entries.append((row, col, self.ring.parse(fields[2])))
            else:
                raise MatrixError(f"{self.path}: missing '0 0 0' terminator")
        return self

    def write(self):
        with open(self.path, "w") as f:
            f.write(f"{self.shape[0]} {self.shape[1]} {self.ntype}\n")
            for row, col, val in self.entries:
                f.write(f"{row} {col} {self.ring.format(val)}\n")
            f.write("0 0 0\n")

    @classmethod
    def from_matrix(cls, path, A, ntype: str = "M") -> "SmsFile":
        self = cls(Path(path), ring=A.ring)
        self.shape = A.shape
        self.ntype = ntype
        self.entries = [(i + 1, j + 1, a) for i, j, a in A.nonzero_components()]
        return self

    def to_mat(self, sparse: bool = False):
        """ Convert to a dense `Matrix`, or with `sparse`, a `SparseRowMatrix` """
        from .matrix import SparseRowMatrix
        data = SparseRowMatrix.from_components(self.ring, self.shape, (
            (r - 1, c - 1, v) for r, c, v in self.entries
        ))
        return data if sparse else data.to_matrix()


def read_sms(path, ring=ZZ, sparse: bool = False):
    """ Read the matrix stored at `path` """
    return SmsFile(path, ring=ring).read().to_mat(sparse=sparse)


def write_sms(path, A, ntype: str = "M") -> Path:
    sf = SmsFile.from_matrix(path, A, ntype=ntype)
    sf.write()
    return sf.path
