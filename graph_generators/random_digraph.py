from typing import List, Tuple

import numpy as np


def generate_random_digraph(n: int, p: float, low: int = 1, high: int = 10) -> Tuple[int, List[Tuple[int, int, int]]]:
    """
    Generates a directed Erdős-Rényi (D(n, p)) random graph.

    Every ordered pair (u, v) with u != v becomes an edge with probability p.

    Returns:
        (n, edges): edges is a list of (u, v, w) with integer w in [low, high).
    """
    if n < 1:
        raise ValueError("n must be >= 1")
    if not 0.0 <= p <= 1.0:
        raise ValueError("p must be in [0, 1]")

    # all off-diagonal (u, v) pairs, row-major
    rows, cols = np.nonzero(~np.eye(n, dtype=bool))

    chosen = np.random.rand(rows.size) < p
    weights = np.random.randint(low, high, size=int(chosen.sum()))

    edges = [(int(u), int(v), int(w))
             for u, v, w in zip(rows[chosen], cols[chosen], weights)]
    return n, edges
