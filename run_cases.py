import logging
from pathlib import Path

from ringsolve import Form, eliminate, has_solution
from ringsolve.sparse.yaml import MatrixYaml

SIZE_LIMIT = None


def smith_diagonal(E) -> list:
    """ Nonzero diagonal of a Smith-form result """
    ring = E.ring
    return [d for d in E.result.diagonal_components() if not ring.is_zero(d)]


def is_solvable(A, b) -> bool:
    """ Fields get the pivot-based check; other rings invert through their Smith form """
    if A.ring.is_field:
        return has_solution(A, b)
    return eliminate(A, form=Form.SMITH).invert(b) is not None


def run_case(p: Path, res: dict):
    print(f"Running Test-Case {p.name}")

    try:
        print(f"Reading YAML")
        y = MatrixYaml.load(p)
        print(f"Converting")
        m = y.to_mat()
    except Exception as e:
        print(e)
        return
    else:
        res['read'] = True
        res['shape'] = "x".join(str(k) for k in m.shape)

    if SIZE_LIMIT is not None and max(m.shape) > SIZE_LIMIT:
        print("Size over limit, skipping")
        return

    try:
        print(f"Eliminating")
        E = eliminate(m, form=Form.SMITH)
    except Exception as e:
        print(e)
        return
    else:
        res['smith'] = True

    if y.rank is not None:
        res['rank'] = E.rank == y.rank
        if not res['rank']:
            print(f"Incorrect rank: {E.rank}, expected {y.rank}")

    if y.smith is not None:
        expected = y.smith_diagonal()
        actual = smith_diagonal(E)
        res['diag'] = actual == expected
        if not res['diag']:
            ring = m.ring
            print(f"Incorrect Smith diagonal: {[ring.format(d) for d in actual]}")
            print(f"Expected: {y.smith}")

    if y.rhs is None:
        return

    try:
        print(f"Solving")
        solvable = is_solvable(m, y.rhs_vector())
    except Exception as e:
        print(e)
        return
    else:
        res['solve'] = True
        if y.solvable is not None:
            res['correct'] = solvable == y.solvable
            if res['correct']:
                print(f"Test Case Succeeded: {p.name}")
            else:
                print(f"Incorrect solvability: {solvable}")


def yaml_testcases():
    """ Run all YAML matrices in data/ dir """
    paths = sorted(Path("data/").glob("*.yaml"))

    results = []
    for p in paths:
        res = dict(
            file=p.name,
            shape=None,
            read=False,
            smith=False,
            rank=None,
            diag=None,
            solve=False,
            correct=None,
        )
        results.append(res)
        run_case(p, res)

    if not results:
        print("No test-cases found in data/")
        return

    # Print some summary info
    summary = 'File'.ljust(30)
    for k in results[0]:
        if k != 'file': summary += k.ljust(8)
    summary += '\n'

    for r in results:
        s = r.pop('file').ljust(30)
        for k in r: s += str(r[k]).ljust(8)
        summary += s + '\n'

    print(summary)
    with open('testcases.txt', 'w') as f:
        f.write(summary)


if __name__ == '__main__':
    logging.basicConfig(level=logging.WARNING)
    yaml_testcases()
