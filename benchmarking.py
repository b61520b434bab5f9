import numpy as np
import pandas as pd
import time
import zlib
from typing import List, Dict, Callable, Any, Optional

from algorithms.reference import networkx_reference


class BenchmarkRunner:
    """
    Handles running arborescence benchmarks over random graph models.
    """

    def __init__(self,
                 algorithms: Dict[str, Callable],
                 generators: Dict[str, Callable],
                 reference: Optional[Callable] = networkx_reference,
                 seed: Optional[int] = None):
        """
        Args:
            algorithms (Dict[str, Callable]):
                Dict of {'algo_name': algorithm_function}
                Each function must accept (n, root, edges) and return the
                arborescence weight or None.

            generators (Dict[str, Callable]):
                Dict of {'model_name': generator_function}
                Each function must accept n and **kwargs and return (n, edges).

            reference (Optional[Callable]):
                Solver whose answer every algorithm is checked against.
                If None, no agreement is computed.

            seed (Optional[int]):
                Global random seed for reproducibility.
                If None, randomness is uncontrolled.
        """
        self.algorithms = algorithms
        self.generators = generators
        self.reference = reference
        self.base_seed = seed

        if seed is not None:
            np.random.seed(seed)

    def _trial_seed(self, model_name: str, n: int, i: int) -> int:
        # crc32 keeps the seed stable across interpreter runs, unlike hash()
        key = f"{model_name}:{n}:{i}".encode()
        return (self.base_seed + zlib.crc32(key)) % (2**32 - 1)

    def run(self,
            models: List[str],
            n_values: List[int],
            trials: int,
            model_params: Dict[str, Dict[str, Any]],
            root: int = 0,
            seed_per_trial: bool = True) -> pd.DataFrame:
        """
        Runs the full benchmark.

        Args:
            models (List[str]): List of model names (e.g., ['RD', 'PA']).
            n_values (List[int]): List of graph sizes (n).
            trials (int): Number of trials to run for each (model, n) pair.
            model_params (Dict): Parameters for each model generator.
                                 e.g., {'RD': {'p': 0.1}, 'PA': {'extra_edges': 40}}
            root (int): Root vertex passed to every algorithm.
            seed_per_trial (bool): If True, assigns a deterministic seed per trial
                                   based on (model, n, trial index).

        Returns:
            pd.DataFrame: One row per (model, n, algorithm).
        """
        all_results = []

        for model_name in models:
            if model_name not in self.generators:
                print(
                    f"Warning: Generator '{model_name}' not found. Skipping.")
                continue
            gen_func = self.generators[model_name]
            params = model_params.get(model_name, {})

            for n in n_values:
                print(
                    f"--- Running: Model={model_name}, n={n}, Trials={trials} ---")

                trial_results = {name: {'times': [], 'weights': [], 'agree': []}
                                 for name in self.algorithms}
                edge_counts = []

                for i in range(trials):
                    if self.base_seed is not None and seed_per_trial:
                        np.random.seed(self._trial_seed(model_name, n, i))

                    graph_n, edges = gen_func(n=n, **params)
                    edge_counts.append(len(edges))

                    expected = None
                    if self.reference is not None:
                        expected = self.reference(graph_n, root, list(edges))

                    for algo_name, algo_func in self.algorithms.items():
                        edges_copy = list(edges)

                        start_time = time.perf_counter()
                        weight = algo_func(graph_n, root, edges_copy)
                        end_time = time.perf_counter()

                        data = trial_results[algo_name]
                        data['times'].append(end_time - start_time)
                        data['weights'].append(weight)
                        if self.reference is not None:
                            data['agree'].append(weight == expected)

                for algo_name, data in trial_results.items():
                    found = [w for w in data['weights'] if w is not None]
                    all_results.append({
                        'model': model_name,
                        'n': n,
                        'algorithm': algo_name,
                        'trials': trials,
                        'mean_edges': np.mean(edge_counts),
                        'mean_time_s': np.mean(data['times']),
                        'std_time_s': np.std(data['times']),
                        'mean_weight': np.mean(found) if found else np.nan,
                        'no_arborescence': trials - len(found),
                        'agreement': np.mean(data['agree']) if data['agree'] else np.nan,
                    })

        print("--- Benchmark Complete ---")
        return pd.DataFrame(all_results)
