import itertools
import logging

import networkx as nx
import numpy as np
import pytest

from algorithms.chu_liu_edmonds import (
    NO_ARBORESCENCE,
    Snapshot,
    _contract,
    _find_cycles,
    _iterate,
    _select_min_incoming,
    chu_liu_edmonds,
    chu_liu_edmonds_nx,
    chu_liu_edmonds_wrapper,
)
from algorithms.reference import networkx_reference
from graph_generators.planted_arborescence import generate_planted_arborescence
from graph_generators.random_digraph import generate_random_digraph


def brute_force(n, root, edges):
    """Tries every choice of one parent edge per non-root vertex."""
    if n == 1:
        return 0
    candidates = []
    for v in range(n):
        if v == root:
            continue
        incoming = [e for e in edges if e[1] == v and e[0] != v]
        if not incoming:
            return None
        candidates.append(incoming)

    best = None
    for choice in itertools.product(*candidates):
        parent = {v: u for u, v, _ in choice}
        ok = True
        for start in parent:
            seen = set()
            v = start
            while v != root:
                if v in seen:
                    ok = False
                    break
                seen.add(v)
                v = parent[v]
            if not ok:
                break
        if ok:
            total = sum(w for _, _, w in choice)
            best = total if best is None else min(best, total)
    return best


# (n, root, edges, expected)
SCENARIOS = [
    (3, 0, [(0, 1, 10), (0, 2, 5)], 15),
    (3, 0, [(0, 1, 10), (1, 2, 20), (2, 1, 5)], 30),
    (3, 0, [(0, 1, 10)], NO_ARBORESCENCE),
    (3, 0, [(1, 0, 10), (1, 2, 5)], NO_ARBORESCENCE),
    (4, 0, [(0, 1, 10), (1, 2, 10), (2, 3, 10), (3, 1, 10), (0, 3, 30)], 30),
    (4, 0, [(0, 1, 10), (2, 3, 5)], NO_ARBORESCENCE),
    (1, 0, [], 0),
    (2, 0, [(0, 1, 5)], 5),
    (2, 0, [], NO_ARBORESCENCE),
    (3, 0, [(0, 1, 10), (1, 2, -5), (0, 2, 8)], 5),
    (3, 0, [(0, 1, 10), (1, 2, 5), (2, 1, -8)], 15),
    (4, 0, [(0, 1, 10), (0, 2, 12), (1, 2, 5), (2, 1, 3), (0, 3, 20)], 35),
    (5, 4, [(4, 0, 10), (0, 1, 5), (1, 0, 6), (4, 2, 12), (2, 3, 7), (3, 2, 8),
            (4, 1, 18), (4, 3, 22)], 34),
    (5, 0, [(0, 1, 4), (0, 2, 2), (1, 2, 5), (2, 3, 2), (3, 4, 3), (4, 3, 1)], 11),
]


@pytest.mark.parametrize("n, root, edges, expected", SCENARIOS)
def test_known_graphs(n, root, edges, expected):
    assert chu_liu_edmonds(n, root, edges) == expected


@pytest.mark.parametrize("n, root, edges, expected", SCENARIOS)
def test_known_graphs_match_brute_force(n, root, edges, expected):
    assert brute_force(n, root, edges) == expected


def test_single_vertex_ignores_edges():
    assert chu_liu_edmonds(1, 0, [(0, 0, -7), (0, 0, 3)]) == 0


def test_in_tree_is_sum_of_weights():
    edges = [(0, 1, 3), (0, 2, -4), (1, 3, 7), (1, 4, 0), (2, 5, 11)]
    assert chu_liu_edmonds(6, 0, edges) == sum(w for _, _, w in edges)


def test_two_cycle_discount():
    # a <-> b reachable only through r -> a (w=9) or r -> b (w=4)
    r, a, b = 0, 1, 2
    w_ab, w_ba = 2, 6
    edges = [(a, b, w_ab), (b, a, w_ba), (r, a, 9), (r, b, 4)]
    # entering at a replaces b -> a (w_ba), entering at b replaces a -> b (w_ab)
    enter_a = w_ab + w_ba + (9 - w_ba)
    enter_b = w_ab + w_ba + (4 - w_ab)
    assert chu_liu_edmonds(3, r, edges) == min(enter_a, enter_b) == 10


def test_self_loops_are_ignored():
    edges = [(0, 1, 5), (1, 1, -100), (2, 2, -100), (1, 2, 1)]
    assert chu_liu_edmonds(3, 0, edges) == 6


def test_edges_into_root_are_ignored():
    edges = [(0, 1, 5), (1, 0, -100), (1, 2, 1), (2, 0, -50)]
    assert chu_liu_edmonds(3, 0, edges) == 6


def test_parallel_edges_pick_cheapest():
    edges = [(0, 1, 9), (0, 1, 2), (0, 1, 5)]
    assert chu_liu_edmonds(2, 0, edges) == 2


def test_nested_cycles_need_several_levels():
    # {1, 2} is a cycle; after contracting it, {C, 3} forms another one
    edges = [(1, 2, 1), (2, 1, 1), (2, 3, 1), (3, 1, 1), (0, 1, 100), (0, 3, 50)]
    assert chu_liu_edmonds(4, 0, edges) == brute_force(4, 0, edges) == 52


def test_input_edges_are_not_modified():
    edges = [(0, 1, 10), (0, 2, 12), (1, 2, 5), (2, 1, 3), (0, 3, 20)]
    before = list(edges)
    assert chu_liu_edmonds(4, 0, edges) == 35
    assert edges == before
    assert chu_liu_edmonds(4, 0, edges) == 35


def test_numpy_edge_array():
    edges = np.array([[0, 1, 10], [1, 2, 20], [2, 1, 5]], dtype=np.int64)
    snapshot = edges.copy()
    assert chu_liu_edmonds(3, 0, edges) == 30
    assert np.array_equal(edges, snapshot)


def test_accepts_a_generator_of_edges():
    edges = ((u, u + 1, 1) for u in range(4))
    assert chu_liu_edmonds(5, 0, edges) == 4


def test_large_weights_do_not_overflow():
    big = 2**62
    edges = [(0, 1, big), (0, 2, big), (1, 2, big), (2, 1, big)]
    assert chu_liu_edmonds(3, 0, edges) == 2 * big


@pytest.mark.parametrize("n, root, edges", [
    (0, 0, []),
    (-2, 0, []),
    (3, 3, []),
    (3, -1, []),
    (2.0, 0, []),
    (True, 0, []),
    (3, 0, None),
    (3, 0, [(0, 3, 1)]),
    (3, 0, [(-1, 1, 1)]),
    (3, 0, [(0, 1)]),
    (3, 0, [(0, 1, 2.5)]),
    (3, 0, [(0, 1, True)]),
    (3, 0, [5]),
])
def test_contract_violations_raise(n, root, edges):
    with pytest.raises(ValueError):
        chu_liu_edmonds(n, root, edges)


def test_matches_brute_force_on_small_random_graphs():
    np.random.seed(7)
    for _ in range(200):
        n = int(np.random.randint(1, 6))
        root = int(np.random.randint(0, n))
        _, edges = generate_random_digraph(n, 0.5, low=-5, high=10)
        assert chu_liu_edmonds(n, root, edges) == brute_force(n, root, edges)


@pytest.mark.parametrize("seed", range(5))
def test_matches_networkx_on_random_digraphs(seed):
    np.random.seed(seed)
    for _ in range(20):
        n = int(np.random.randint(2, 30))
        root = int(np.random.randint(0, n))
        _, edges = generate_random_digraph(n, 0.25, low=-10, high=30)
        assert chu_liu_edmonds(n, root, edges) == networkx_reference(n, root, edges)


@pytest.mark.parametrize("seed", range(5))
def test_matches_networkx_on_planted_arborescences(seed):
    np.random.seed(100 + seed)
    for _ in range(10):
        n = int(np.random.randint(2, 60))
        root = int(np.random.randint(0, n))
        _, edges = generate_planted_arborescence(n, extra_edges=3 * n, root=root, low=1, high=20)
        result = chu_liu_edmonds(n, root, edges)
        assert result is not NO_ARBORESCENCE
        assert result == networkx_reference(n, root, edges)


def test_select_min_incoming_keeps_first_on_ties():
    snapshot = Snapshot(3, 0, [(0, 1, 4), (2, 1, 4), (0, 2, 1), (1, 1, -1)])
    selection = _select_min_incoming(snapshot)
    assert selection == [None, (0, 1, 4), (0, 2, 1)]


def test_find_cycles_labels_each_cycle():
    # 1 <-> 2 and 3 <-> 4 are cycles, 5 hangs off the second one
    selection = [None, (2, 1, 0), (1, 2, 0), (4, 3, 0), (3, 4, 0), (4, 5, 0)]
    snapshot = Snapshot(6, 0, [])
    cycle_of, num_cycles = _find_cycles(snapshot, selection)
    assert num_cycles == 2
    assert cycle_of[0] == -1 and cycle_of[5] == -1
    assert cycle_of[1] == cycle_of[2]
    assert cycle_of[3] == cycle_of[4]
    assert cycle_of[1] != cycle_of[3]


def test_contract_relabels_and_discounts():
    edges = [(0, 1, 10), (0, 2, 12), (1, 2, 5), (2, 1, 3), (0, 3, 20)]
    snapshot = Snapshot(4, 0, edges)
    selection = _select_min_incoming(snapshot)
    cycle_of, num_cycles = _find_cycles(snapshot, selection)
    contracted = _contract(snapshot, selection, cycle_of, num_cycles)
    assert contracted.n == 3
    assert contracted.root == 0
    assert contracted.edges == [(0, 1, 7), (0, 1, 7), (0, 2, 0)]


def test_iterate_reports_each_outcome():
    assert _iterate(Snapshot(3, 0, [(0, 1, 1)])) == (None, None)
    assert _iterate(Snapshot(3, 0, [(0, 1, 1), (0, 2, 2)])) == (3, None)

    contribution, following = _iterate(Snapshot(3, 0, [(0, 1, 10), (1, 2, 20), (2, 1, 5)]))
    assert contribution == 25
    assert following == Snapshot(2, 0, [(0, 1, 5)])


def test_debug_logging(caplog):
    with caplog.at_level(logging.DEBUG, logger="algorithms.chu_liu_edmonds"):
        chu_liu_edmonds(3, 0, [(0, 1, 10), (1, 2, 20), (2, 1, 5)])
    assert "1 cycle(s)" in caplog.text
    assert "weight 30" in caplog.text


def test_wrapper_reads_weight_matrix():
    inf = np.inf
    matrix = np.array([
        [inf, 10, 12, 20],
        [inf, inf, 5, inf],
        [inf, 3, inf, inf],
        [inf, inf, inf, -99],
    ])
    assert chu_liu_edmonds_wrapper(matrix) == 35


def test_wrapper_nan_means_no_edge():
    matrix = np.full((3, 3), np.nan)
    matrix[0, 1] = 10
    assert chu_liu_edmonds_wrapper(matrix, root=0) is NO_ARBORESCENCE


def test_wrapper_from_networkx_matrix():
    G = nx.DiGraph()
    G.add_weighted_edges_from([(0, 1, 10), (1, 2, 20), (2, 1, 5)])
    matrix = nx.to_numpy_array(G, nodelist=[0, 1, 2], nonedge=np.inf)
    assert chu_liu_edmonds_wrapper(matrix, root=0) == 30


@pytest.mark.parametrize("matrix", [
    None,
    np.zeros((2, 3)),
    np.zeros((0, 0)),
    np.array([[np.inf, 1.5], [np.inf, np.inf]]),
])
def test_wrapper_rejects_bad_matrices(matrix):
    with pytest.raises(ValueError):
        chu_liu_edmonds_wrapper(matrix)


def test_nx_front_end_with_labels():
    G = nx.DiGraph()
    G.add_edge("root", "a", weight=10)
    G.add_edge("a", "b", weight=20)
    G.add_edge("b", "a", weight=5)
    assert chu_liu_edmonds_nx(G, "root") == 30
    assert chu_liu_edmonds_nx(G, "a") is NO_ARBORESCENCE


def test_nx_front_end_multidigraph_and_custom_weight():
    G = nx.MultiDiGraph()
    G.add_edge(0, 1, cost=8)
    G.add_edge(0, 1, cost=3)
    G.add_edge(1, 2, cost=4)
    assert chu_liu_edmonds_nx(G, 0, weight="cost") == 7


def test_nx_front_end_rejects_bad_input():
    with pytest.raises(ValueError):
        chu_liu_edmonds_nx(nx.Graph([(0, 1)]), 0)
    with pytest.raises(ValueError):
        chu_liu_edmonds_nx(nx.DiGraph(), 0)
    with pytest.raises(ValueError):
        chu_liu_edmonds_nx(nx.DiGraph([(0, 1)]), 5)
    with pytest.raises(ValueError):
        chu_liu_edmonds_nx(nx.DiGraph([(0, 1)]), 0)


def test_wrapper_keeps_large_integer_weights_exact():
    big = 2**53 + 1
    matrix = np.zeros((2, 2), dtype=np.int64)
    matrix[0, 1] = big
    matrix[1, 0] = 7
    assert chu_liu_edmonds_wrapper(matrix) == big == chu_liu_edmonds(2, 0, [(0, 1, big)])


def test_wrapper_integer_matrix_uses_every_off_diagonal_entry():
    matrix = np.array([
        [5, 10, 12],
        [0, -1, 5],
        [0, 3, 9],
    ])
    # zero entries are edges too; here they only enter the root and are never picked
    assert chu_liu_edmonds_wrapper(matrix) == 15


def test_wrapper_float_weights_past_int64_stay_exact():
    matrix = np.full((2, 2), np.inf)
    matrix[0, 1] = 2.0**70
    assert chu_liu_edmonds_wrapper(matrix) == 2**70


def test_nx_front_end_accepts_whole_float_weights():
    G = nx.DiGraph()
    G.add_edge(0, 1, weight=2.0)
    G.add_edge(1, 2, weight=np.float64(3.0))
    assert chu_liu_edmonds_nx(G, 0) == 5


def test_nx_front_end_round_trips_through_edgelist():
    G = nx.parse_edgelist(["0 1 10.0", "1 2 20.0", "2 1 5.0"], nodetype=int,
                          data=(("weight", float),), create_using=nx.DiGraph)
    assert chu_liu_edmonds_nx(G, 0) == 30


@pytest.mark.parametrize("w", [2.5, np.inf, np.nan, True, "3"])
def test_nx_front_end_rejects_non_whole_weights(w):
    G = nx.DiGraph()
    G.add_edge(0, 1, weight=w)
    with pytest.raises(ValueError):
        chu_liu_edmonds_nx(G, 0)
