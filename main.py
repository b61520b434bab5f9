import argparse

import pandas as pd
from benchmarking import BenchmarkRunner

from graph_generators.random_digraph import generate_random_digraph
from graph_generators.planted_arborescence import generate_planted_arborescence

from algorithms.chu_liu_edmonds import chu_liu_edmonds, NO_ARBORESCENCE
from algorithms.reference import networkx_reference


SAMPLE_N = 5
SAMPLE_ROOT = 0
SAMPLE_EDGES = [
    (0, 1, 4), (0, 2, 2),
    (1, 2, 5), (2, 3, 2),
    (3, 4, 3), (4, 3, 1),
]

RESULTS_CSV = "benchmark_results.csv"


def run_sample():
    result = chu_liu_edmonds(SAMPLE_N, SAMPLE_ROOT, SAMPLE_EDGES)
    if result is NO_ARBORESCENCE:
        print("Chu-Liu-Edmonds Sample Result: no arborescence")
    else:
        print(f"Chu-Liu-Edmonds Sample Result: {result}")
    return result


def run_benchmark(trials, seed):
    algorithms_to_test = {
        'chu_liu_edmonds': chu_liu_edmonds,
        'networkx': networkx_reference,
    }

    graph_generators = {
        'RD': generate_random_digraph,
        'PA': generate_planted_arborescence,
    }

    models = ['RD', 'PA']

    # networkx is the slow one here, keep n modest
    n_values = [10, 20, 40, 80]

    model_params = {
        'RD': {'p': 0.2},            # D(n, p) with p=0.2, may have no arborescence
        'PA': {'extra_edges': 40},   # planted tree + 40 noise edges
    }

    runner = BenchmarkRunner(algorithms_to_test, graph_generators, seed=seed)
    results_df = runner.run(
        models=models,
        n_values=n_values,
        trials=trials,
        model_params=model_params
    )

    pd.set_option('display.width', 1000)
    pd.set_option('display.max_rows', None)

    print("\nBenchmark Results:")
    print(results_df)

    results_df.to_csv(RESULTS_CSV, index=False)
    print(f"\nResults saved to {RESULTS_CSV}")
    return results_df


def main():
    parser = argparse.ArgumentParser(description="Minimum Spanning Arborescence")

    parser.add_argument("--sample-only", action="store_true",
                        help="Only solve the built-in sample graph")

    parser.add_argument("--trials", type=int, default=20,
                        help="Number of trials per (model, n) pair")

    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed for graph generation")

    args = parser.parse_args()

    run_sample()
    if not args.sample_only:
        run_benchmark(args.trials, args.seed)


if __name__ == "__main__":
    main()
