"""
Convert SMS-format matrices, such as those of the sparse integer matrix collections, into YAML test-cases
"""

import os
import sys
from pathlib import Path

from ringsolve import Form, eliminate
from ringsolve.rings import ring_from_name
from ringsolve.sparse.file import SmsFile
from ringsolve.sparse.yaml import MatrixYaml

# Matrices beyond this size are converted without expected results
SOLVE_LIMIT = 200


def convert_sms_to_yaml(src: Path, ring_name: str = "ZZ"):
    """ Convert all *.sms files under `src` to YAML in data/ """
    ring = ring_from_name(ring_name)
    paths = []
    results = []
    for path in sorted(Path(src).glob("*.sms")):
        print(f"Reading {path}")
        paths.append(path)
        res = dict(
            read=False,
            smith=False,
            yaml=False,
        )
        results.append(res)

        try:
            sf = SmsFile(path, ring=ring).read()
        except Exception as e:
            print(e)
            continue
        else:
            res["read"] = True

        y = MatrixYaml.from_sms_file(sf)

        if max(sf.shape) <= SOLVE_LIMIT:
            try:
                E = eliminate(sf.to_mat(), form=Form.SMITH)
            except Exception as e:
                print(e)
            else:
                res["smith"] = True
                y.rank = E.rank
                y.smith = [ring.format(d) for d in E.result.diagonal_components() if not ring.is_zero(d)]

        try:
            y.dump(f"data/{path.stem}.yaml")
        except Exception as e:
            print(e)
            continue
        else:
            res["yaml"] = True

    for path, res in zip(paths, results):
        print(f"{str(path).ljust(50)} : {res}")


if __name__ == '__main__':
    src = sys.argv[1] if len(sys.argv) > 1 else os.environ['SMS_DIR']
    ring_name = sys.argv[2] if len(sys.argv) > 2 else "ZZ"
    convert_sms_to_yaml(Path(src), ring_name)
