from typing import Iterable, Optional, Tuple

import networkx as nx


def networkx_reference(n: int, root: int, edges: Iterable[Tuple[int, int, int]]) -> Optional[int]:
    """
    Minimum spanning arborescence weight computed with networkx, used as the
    ground truth in tests and benchmarks. Same inputs and outputs as
    chu_liu_edmonds (None when there is no arborescence).
    """
    if n == 1:
        return 0

    G = nx.DiGraph()
    G.add_nodes_from(range(n))
    for u, v, w in edges:
        u, v, w = int(u), int(v), int(w)
        # no edge may enter the root, so every spanning arborescence starts there
        if u == v or v == root:
            continue
        if G.has_edge(u, v) and G[u][v]["weight"] <= w:
            continue
        G.add_edge(u, v, weight=w)

    if G.number_of_edges() < n - 1:
        return None

    weights = [w for _, _, w in G.edges(data="weight")]
    w_max, w_min = max(weights), min(weights)

    # flip to a maximisation with all-positive weights; the offset is large
    # enough that any n - 1 edge branching beats every smaller one
    offset = (n - 1) * (w_max - w_min) + w_max + 1
    for _, _, d in G.edges(data=True):
        d["flipped"] = offset - d["weight"]

    B = nx.maximum_branching(G, attr="flipped")
    if B.number_of_edges() != n - 1 or not nx.is_arborescence(B):
        return None

    return sum(G[u][v]["weight"] for u, v in B.edges())
