import pandas as pd
import os
import time
import numpy as np
from tqdm import tqdm
import concurrent.futures
import multiprocessing

from algorithms.chu_liu_edmonds import chu_liu_edmonds
from algorithms.reference import networkx_reference
from graph_generators.random_digraph import generate_random_digraph
from graph_generators.planted_arborescence import generate_planted_arborescence

RNG_SEED = 42
OUTPUT_DIR = "scaling_results"
CSV_FILENAME = "raw_results.csv"

SAMPLES_PER_TYPE = 20
ITERATIONS_PER_GRAPH = 5
START_N = 20
STEP_N = 20

GRAPH_TYPES = ['sparse_digraph', 'dense_digraph', 'planted_arborescence']


def generate_graph(g_type, n, seed):
    """
    Generates a directed graph of the given type, seeded for reproducibility.
    """
    np.random.seed(seed)

    if g_type == 'sparse_digraph':
        p = float(np.clip(2.5 * np.log(max(2, n)) / n, 0.05, 0.5))
        return generate_random_digraph(n, p, low=-5, high=20)

    elif g_type == 'dense_digraph':
        return generate_random_digraph(n, 0.5, low=-5, high=20)

    elif g_type == 'planted_arborescence':
        return generate_planted_arborescence(n, extra_edges=3 * n, low=1, high=50)

    raise ValueError(f"Unknown graph type: {g_type}")


# worker
def process_single_graph(task_args):
    """
    Worker function to handle ONE graph configuration: generate it, get the
    reference weight once, then time the solver over the iterations.
    """
    g_type, n_target, graph_seed = task_args

    n, edges = generate_graph(g_type, n_target, graph_seed)
    m = len(edges)

    true_val = networkx_reference(n, 0, edges)

    times = []
    matches = 0
    for _ in range(ITERATIONS_PER_GRAPH):
        t0 = time.perf_counter()
        value = chu_liu_edmonds(n, 0, edges)
        t1 = time.perf_counter()
        times.append(t1 - t0)
        if value == true_val:
            matches += 1

    return {
        "Graph_Type": g_type,
        "Nodes": n,
        "Edges": m,
        "Density": m / (n * (n - 1)) if n > 1 else 0.0,
        "True_Weight": np.nan if true_val is None else true_val,
        "Has_Arborescence": true_val is not None,

        # O(n * E) bound
        "Pred_CLE": n * max(1, m),

        "Time_CLE_Mean": np.mean(times),
        "Time_CLE_Std": np.std(times),
        "Match_Rate": matches / ITERATIONS_PER_GRAPH,
    }


def run_experiment_concurrently():
    results_data = []

    tasks = []
    for g_type in GRAPH_TYPES:
        for i in range(SAMPLES_PER_TYPE):
            n_target = START_N + i * STEP_N
            graph_seed = RNG_SEED + (i * 1000)
            tasks.append((g_type, n_target, graph_seed))

    total_jobs = len(tasks)

    # leave 1 core free for the OS
    max_workers = max(1, multiprocessing.cpu_count() - 1)

    print(
        f"Spinning up pool with {max_workers} workers for {total_jobs} jobs...")

    with concurrent.futures.ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(process_single_graph, t): t for t in tasks}

        with tqdm(total=total_jobs, desc="Benchmarking (Concurrent)") as pbar:
            for future in concurrent.futures.as_completed(futures):
                try:
                    data = future.result()
                    results_data.append(data)
                except Exception as exc:
                    print(f"Job {futures[future]} generated an exception: {exc}")
                finally:
                    pbar.update(1)

    return pd.DataFrame(results_data)


if __name__ == "__main__":
    os.makedirs(OUTPUT_DIR, exist_ok=True)
    csv_path = os.path.join(OUTPUT_DIR, CSV_FILENAME)

    print("Starting Concurrent Benchmark...")

    df_results = run_experiment_concurrently()

    df_results = df_results.sort_values(by=['Graph_Type', 'Nodes'])

    mismatched = df_results[df_results["Match_Rate"] < 1.0]
    if len(mismatched) > 0:
        print(f"Warning: {len(mismatched)} graph(s) disagreed with networkx")

    df_results.to_csv(csv_path, index=False)
    print(f"\nRaw data saved to {csv_path}")
