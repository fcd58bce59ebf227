"""
Support for storing array-of-entries form matrices, and their expected properties, to YAML
"""

from pathlib import Path
from typing import List, Optional, Tuple

import ruamel.yaml

from ..rings import ring_from_name

yaml = ruamel.yaml.YAML()


@yaml.register_class
class MatrixYaml(object):
    """ A matrix test-case: ring, shape & entries, plus any known results.
    Values are stored as text, in the ring's own `format`. """

    def __init__(self):
        self.desc: str = ""
        self.ring: str = "ZZ"
        self.shape: Tuple[int, int] = (0, 0)
        self.entries: List[Tuple[int, int, str]] = []
        self.rank: Optional[int] = None
        self.smith: Optional[List[str]] = None
        self.rhs: Optional[List[str]] = None
        self.solvable: Optional[bool] = None

    @classmethod
    def from_matrix(cls, A, desc: str = "") -> "MatrixYaml":
        self = cls()
        self.desc = desc
        self.ring = A.ring.name
        self.shape = A.shape
        self.entries = [(i, j, A.ring.format(a)) for i, j, a in A.nonzero_components()]
        return self

    @classmethod
    def from_sms_file(cls, sf, desc: str = "") -> "MatrixYaml":
        from .file import SmsFile
        if not isinstance(sf, SmsFile):
            raise TypeError(sf)

        self = cls()
        self.desc = desc or Path(sf.path).name
        self.ring = sf.ring.name
        self.shape = sf.shape
        self.entries = [(r - 1, c - 1, sf.ring.format(v)) for (r, c, v) in sf.entries]
        return self

    def to_dict(self):
        return dict(
            desc=self.desc,
            ring=self.ring,
            shape=list(self.shape),
            entries=[list(e) for e in self.entries],
            rank=self.rank,
            smith=self.smith,
            rhs=self.rhs,
            solvable=self.solvable,
        )

    @classmethod
    def to_yaml(cls, representer, node):
        d = node.to_dict()
        return representer.represent_dict(d)

    @classmethod
    def from_dict(cls, d: dict):
        self = cls()
        self.desc = d['desc']
        self.ring = d['ring']
        self.shape = d['shape']
        self.entries = d['entries']
        self.rank = d['rank']
        self.smith = d['smith']
        self.rhs = d['rhs']
        self.solvable = d['solvable']
        return self

    def get_ring(self):
        return ring_from_name(self.ring)

    def to_mat(self):
        from ..matrix import Matrix
        ring = self.get_ring()
        return Matrix.from_components(ring, self.shape, ((i, j, ring.parse(v)) for i, j, v in self.entries))

    def rhs_vector(self):
        """ The right-hand side as a column vector, if present """
        if self.rhs is None:
            return None
        from ..matrix import Matrix
        ring = self.get_ring()
        return Matrix.from_rows(ring, [[ring.parse(v)] for v in self.rhs])

    def smith_diagonal(self) -> Optional[list]:
        if self.smith is None:
            return None
        ring = self.get_ring()
        return [ring.parse(v) for v in self.smith]

    def dump(self, file):
        p = Path(file)
        yaml.dump(self, p)

    @classmethod
    def load(cls, file):
        p = Path(file)
        y = yaml.load(p)

        def opt_list(key, conv):
            value = y.get(key)
            return [conv(v) for v in value] if value is not None else None

        d = dict(
            desc=str(y.get('desc') or ""),
            ring=str(y['ring']),
            shape=(int(y['shape'][0]), int(y['shape'][1])),
            entries=[(int(i), int(j), str(v)) for i, j, v in y['entries']],
            rank=int(y['rank']) if y.get('rank') is not None else None,
            smith=opt_list('smith', str),
            rhs=opt_list('rhs', str),
            solvable=bool(y['solvable']) if y.get('solvable') is not None else None,
        )
        return cls.from_dict(d)
