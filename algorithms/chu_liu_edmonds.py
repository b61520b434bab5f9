import logging
from numbers import Integral
from typing import Iterable, List, NamedTuple, Optional, Tuple

import networkx as nx
import numpy as np

logger = logging.getLogger(__name__)

# returned when some non-root vertex cannot be reached from the root
NO_ARBORESCENCE = None

Edge = Tuple[int, int, int]

_UNVISITED, _ON_PATH, _SETTLED = 0, 1, 2


class Snapshot(NamedTuple):
    """
    One contraction level of the graph: vertices 0..n-1, (u, v, w) edges.
    A snapshot is never modified; each iteration builds the next one.
    """
    n: int
    root: int
    edges: List[Edge]


def _is_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, (bool, np.bool_))


def _validate(n, root, edges) -> List[Edge]:
    """
    Checks the call contract and returns the solver's own copy of the edges.
    """
    if not _is_int(n) or n < 1:
        raise ValueError(f"n must be a positive integer, got {n!r}")
    if not _is_int(root) or not 0 <= root < n:
        raise ValueError(f"root must be a vertex in [0, {n}), got {root!r}")
    if edges is None:
        raise ValueError("edges is None")

    checked = []
    for idx, edge in enumerate(edges):
        try:
            u, v, w = edge
        except (TypeError, ValueError):
            raise ValueError(
                f"edge {idx} is not a (from, to, weight) triple: {edge!r}") from None
        if not (_is_int(u) and _is_int(v) and _is_int(w)):
            raise ValueError(f"edge {idx} must hold integers: {edge!r}")
        if not (0 <= u < n and 0 <= v < n):
            raise ValueError(
                f"edge {idx} has an endpoint outside [0, {n}): {edge!r}")
        checked.append((int(u), int(v), int(w)))
    return checked


def _select_min_incoming(snapshot: Snapshot) -> List[Optional[Edge]]:
    """
    Cheapest incoming edge per vertex; None for the root and for vertices
    with no incoming edge. On equal weights the first edge seen is kept.
    """
    selection: List[Optional[Edge]] = [None] * snapshot.n
    for edge in snapshot.edges:
        u, v, w = edge
        if u == v or v == snapshot.root:
            continue
        best = selection[v]
        if best is None or w < best[2]:
            selection[v] = edge
    return selection


def _find_cycles(snapshot: Snapshot, selection: List[Optional[Edge]]) -> Tuple[List[int], int]:
    """
    Walks selection chains (v -> source of selection[v] -> ...) and labels
    every vertex with the id of the cycle it sits on, or -1.

    Each walk stops at a settled vertex (the root is settled from the start)
    or at a vertex already on the current walk, which closes a new cycle.
    Walked vertices are settled afterwards, so every vertex is walked once.
    """
    n = snapshot.n
    state = [_UNVISITED] * n
    state[snapshot.root] = _SETTLED
    cycle_of = [-1] * n
    num_cycles = 0

    for start in range(n):
        if state[start] != _UNVISITED:
            continue

        path = []
        u = start
        while state[u] == _UNVISITED:
            state[u] = _ON_PATH
            path.append(u)
            u = selection[u][0]

        if state[u] == _ON_PATH:
            v = u
            while True:
                cycle_of[v] = num_cycles
                v = selection[v][0]
                if v == u:
                    break
            num_cycles += 1

        for v in path:
            state[v] = _SETTLED

    return cycle_of, num_cycles


def _contract(snapshot: Snapshot,
              selection: List[Optional[Edge]],
              cycle_of: List[int],
              num_cycles: int) -> Snapshot:
    """
    Collapses every cycle into one vertex and reweights the crossing edges.

    An edge (u, v, w) entering v costs w - selection[v].w in the contracted
    graph: taking it replaces v's cycle edge, so only the difference is paid.
    Edges whose endpoints land on the same new vertex are dropped.
    """
    n = snapshot.n

    # new indices are handed out in order of each group's lowest old vertex
    relabel = [-1] * n
    cycle_label = [-1] * num_cycles
    new_n = 0
    for v in range(n):
        c = cycle_of[v]
        if c == -1:
            relabel[v] = new_n
            new_n += 1
        elif cycle_label[c] == -1:
            cycle_label[c] = new_n
            relabel[v] = new_n
            new_n += 1
        else:
            relabel[v] = cycle_label[c]

    new_edges: List[Edge] = []
    for u, v, w in snapshot.edges:
        nu, nv = relabel[u], relabel[v]
        if nu == nv:
            continue
        chosen = selection[v]
        # edges into the root have no selection to discount against
        new_edges.append((nu, nv, w - chosen[2] if chosen is not None else w))

    return Snapshot(new_n, relabel[snapshot.root], new_edges)


def _iterate(snapshot: Snapshot) -> Tuple[Optional[int], Optional[Snapshot]]:
    """
    Runs one select / detect / contract round.

    Returns:
        (None, None): a non-root vertex has no incoming edge.
        (weight, None): no cycle was found, weight closes the sum.
        (weight, next_snapshot): weight is this level's share, go on.
    """
    selection = _select_min_incoming(snapshot)

    for v in range(snapshot.n):
        if v != snapshot.root and selection[v] is None:
            logger.debug("vertex %d has no incoming edge (n=%d)", v, snapshot.n)
            return None, None

    cycle_of, num_cycles = _find_cycles(snapshot, selection)
    contribution = sum(edge[2] for edge in selection if edge is not None)

    logger.debug("level n=%d, edges=%d: %d cycle(s), contribution %d",
                 snapshot.n, len(snapshot.edges), num_cycles, contribution)

    if num_cycles == 0:
        return contribution, None
    return contribution, _contract(snapshot, selection, cycle_of, num_cycles)


def chu_liu_edmonds(n: int, root: int, edges: Iterable[Edge]) -> Optional[int]:
    """
    Total weight of the minimum spanning arborescence rooted at `root`.

    Input:
        n: number of vertices, vertices are 0..n-1 (n >= 1)
        root: root vertex
        edges: iterable of (from, to, weight) integer triples, or an (E, 3)
               integer numpy array. Self-loops are ignored. Not modified.
    Output:
        int: weight of the minimum spanning arborescence, or
        NO_ARBORESCENCE (None) if some vertex is unreachable from root.

    Raises ValueError for an invalid n, root, or edge before solving.

    Note: equal-weight incoming edges are resolved by input order, which can
    change which arborescence is implied but never the returned weight.
    Runs in O(n * E).
    """
    snapshot = Snapshot(n, root, _validate(n, root, edges))
    if n == 1:
        return 0

    total = 0
    levels = 0
    while snapshot is not None:
        contribution, snapshot = _iterate(snapshot)
        if contribution is None:
            return NO_ARBORESCENCE
        total += contribution
        levels += 1

    logger.debug("solved after %d level(s): weight %d", levels, total)
    return total


def _whole_weight(w, where: str) -> int:
    """
    Exact int for an integer or a whole-valued float weight such as 2.0.
    """
    if isinstance(w, (bool, np.bool_)):
        raise ValueError(f"{where} has a boolean weight: {w!r}")
    if isinstance(w, Integral):
        return int(w)
    if isinstance(w, (float, np.floating)) and np.isfinite(w) and float(w).is_integer():
        return int(w)
    raise ValueError(f"{where} weight must be a whole number, got {w!r}")


def chu_liu_edmonds_wrapper(graph_matrix: np.ndarray, root: int = 0) -> Optional[int]:
    """
    Matrix front end. graph_matrix[u, v] is the weight of edge u -> v and the
    diagonal is ignored.

    Integer matrices are read as they are: every off-diagonal entry is an
    edge. In a float matrix a non-finite entry (inf or nan) means no edge and
    finite entries must be whole numbers, which pairs well with
    nx.to_numpy_array(G, nonedge=np.inf).
    """
    if graph_matrix is None:
        raise ValueError("graph_matrix is None")
    graph_matrix = np.asarray(graph_matrix)
    if graph_matrix.ndim != 2 or graph_matrix.shape[0] != graph_matrix.shape[1]:
        raise ValueError("graph_matrix must be square")
    n = graph_matrix.shape[0]
    if n == 0:
        raise ValueError("graph_matrix has no vertices")

    if np.issubdtype(graph_matrix.dtype, np.integer):
        mask = np.ones((n, n), dtype=bool)
    else:
        graph_matrix = graph_matrix.astype(float)
        mask = np.isfinite(graph_matrix)
    np.fill_diagonal(mask, False)
    rows, cols = np.nonzero(mask)

    # python ints keep weights exact past 2**53 and past the int64 range
    edges = [(int(u), int(v), _whole_weight(graph_matrix[u, v], f"graph_matrix[{u}, {v}]"))
             for u, v in zip(rows, cols)]
    return chu_liu_edmonds(n, root, edges)


def chu_liu_edmonds_nx(G: nx.DiGraph, root, weight: str = "weight") -> Optional[int]:
    """
    networkx front end. Nodes may be any hashable labels; they are numbered in
    G.nodes order. Parallel edges of a MultiDiGraph are all considered.
    Whole-valued float weights (2.0, as networkx readers produce) are accepted.
    """
    if G is None:
        raise ValueError("G is None")
    if not G.is_directed():
        raise ValueError("G must be a directed graph")
    if G.number_of_nodes() == 0:
        raise ValueError("G has no nodes")
    if root not in G:
        raise ValueError(f"root {root!r} is not a node of G")

    index = {node: i for i, node in enumerate(G.nodes())}
    edges = []
    for u, v, w in G.edges(data=weight):
        if w is None:
            raise ValueError(f"edge ({u!r}, {v!r}) has no '{weight}' attribute")
        edges.append((index[u], index[v], _whole_weight(w, f"edge ({u!r}, {v!r})")))

    return chu_liu_edmonds(len(index), index[root], edges)
