from typing import List, Tuple

import numpy as np


def generate_planted_arborescence(n: int,
                                  extra_edges: int,
                                  root: int = 0,
                                  low: int = 1,
                                  high: int = 10) -> Tuple[int, List[Tuple[int, int, int]]]:
    """
    Generates a directed graph that always has a spanning arborescence.

    A random arborescence is planted first: vertices are visited in a random
    order starting at root, and each one picks its parent among the vertices
    visited before it. Then `extra_edges` random edges are added on top; these
    are what make cycles show up among the cheapest incoming edges.

    Args:
        n (int): Number of vertices.
        extra_edges (int): Number of random non-self-loop edges to add.
        root (int): Root of the planted arborescence.
        low, high (int): Edge weights are drawn from [low, high).

    Returns:
        (n, edges): edges is a list of (u, v, w), in random order.
    """
    if n < 1:
        raise ValueError("n must be >= 1")
    if not 0 <= root < n:
        raise ValueError(f"root must be in [0, {n})")
    if extra_edges < 0:
        raise ValueError("extra_edges must be >= 0")

    others = np.array([v for v in range(n) if v != root], dtype=int)
    order = [root] + np.random.permutation(others).tolist()

    edges = []
    for i in range(1, n):
        parent = order[np.random.randint(0, i)]
        edges.append((int(parent), int(order[i]), int(np.random.randint(low, high))))

    if n > 1:
        for _ in range(extra_edges):
            u, v = np.random.choice(n, size=2, replace=False)
            edges.append((int(u), int(v), int(np.random.randint(low, high))))

    shuffled = np.random.permutation(len(edges))
    return n, [edges[i] for i in shuffled]
