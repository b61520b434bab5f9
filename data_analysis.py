import os
import math
import zipfile
import shutil
from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from sklearn.linear_model import LinearRegression

INPUT_CSV = os.path.join("scaling_results", "raw_results.csv")
OUT_DIR = "analysis_figures"
ZIP_NAME = "analysis_figures.zip"

CLE_COLOR = "#455A70"
TOPO_PALETTE = ["#FFC759", "#D94B6A", "#607196", "#BABFD1", "#87A878"]


def ensure_dir(path):
    Path(path).mkdir(parents=True, exist_ok=True)


def clear_dir(path):
    if os.path.exists(path):
        shutil.rmtree(path)
    ensure_dir(path)


def loglog_regression(x, y):
    """
    Fits log(y) = slope * log(x) + intercept over the strictly positive points.
    A slope near 1 against the n * E predictor means the bound is tight.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    mask = (x > 0) & (y > 0)
    if mask.sum() < 2:
        return {"slope": np.nan, "intercept": np.nan, "r2": np.nan, "mask": mask}
    lx = np.log(x[mask]).reshape(-1, 1)
    ly = np.log(y[mask])
    reg = LinearRegression().fit(lx, ly)
    return {
        "slope": float(reg.coef_[0]),
        "intercept": float(reg.intercept_),
        "r2": float(reg.score(lx, ly)),
        "mask": mask
    }


def save_fig(fig, out_path, dpi=150):
    base, _ = os.path.splitext(out_path)
    fig.savefig(base + ".png", dpi=dpi, bbox_inches="tight")
    fig.savefig(base + ".pdf", dpi=dpi, bbox_inches="tight")
    plt.close(fig)


def style_axes(ax):
    ax.grid(False)
    for spine in ax.spines.values():
        spine.set_color("black")
        spine.set_linewidth(1.0)
    ax.set_facecolor("white")


def plot_loglog_with_fit(ax, x, y, res, color, marker='o', label=None):
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    mask = res["mask"]
    ax.scatter(x[mask], y[mask], marker=marker, s=40, edgecolor='k', linewidth=0.3,
               alpha=0.85, color=color, label=label, zorder=3)

    if mask.sum() > 1 and not math.isnan(res["slope"]):
        order = np.argsort(x[mask])
        xs = x[mask][order]
        ys_line = np.exp(res["intercept"] + res["slope"] * np.log(xs))
        ax.plot(xs, ys_line, linestyle="--", linewidth=2.0, alpha=0.95,
                color=color, zorder=4, label=f"fit slope={res['slope']:.3f} R2={res['r2']:.3f}")


def zip_outputs(out_dir, zip_name):
    zip_path = os.path.join(out_dir, zip_name)
    with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as z:
        for root, _, files in os.walk(out_dir):
            for f in files:
                if f == zip_name:
                    continue
                z.write(os.path.join(root, f), arcname=f)
    return zip_path


def analyse(df, out_dir):
    """
    Writes per-topology and combined figures plus loglog_summary.csv into
    out_dir and returns the summary frame.
    """
    graph_types = df["Graph_Type"].unique()
    topo_colors = {gt: TOPO_PALETTE[i % len(TOPO_PALETTE)]
                   for i, gt in enumerate(graph_types)}

    summary_rows = []
    master_data = []

    for gt in graph_types:
        sub = df[df["Graph_Type"] == gt].sort_values(
            "Nodes").reset_index(drop=True)

        res = loglog_regression(sub["Pred_CLE"].values, sub["Time_CLE_Mean"].values)
        summary_rows.append({
            "Graph_Type": gt,
            "Slope(log-log)": res["slope"],
            "Intercept(log-log)": res["intercept"],
            "R2": res["r2"],
            "Match_Rate": float(sub["Match_Rate"].mean()),
        })
        master_data.append((gt, sub, res))

        fig, axs = plt.subplots(1, 2, figsize=(14, 6), constrained_layout=True)
        axs[0].set_xscale("log")
        axs[0].set_yscale("log")
        axs[0].set_xlabel("n * E (log scale)")
        axs[0].set_ylabel("Time_CLE_Mean (log scale)")
        axs[0].set_title(f"Time vs Predictor ({gt})")
        style_axes(axs[0])
        plot_loglog_with_fit(axs[0], sub["Pred_CLE"].values, sub["Time_CLE_Mean"].values,
                             res, CLE_COLOR, label="CLE data")
        axs[0].legend(frameon=True, facecolor="white", edgecolor="0.8")

        axs[1].errorbar(sub["Nodes"], sub["Time_CLE_Mean"], yerr=sub["Time_CLE_Std"],
                        marker="o", color=topo_colors[gt], linewidth=2, capsize=3)
        axs[1].set_xlabel("Nodes")
        axs[1].set_ylabel("Time (s)")
        axs[1].set_title(f"Time vs Nodes ({gt})")
        style_axes(axs[1])

        save_fig(fig, os.path.join(out_dir, f"{gt}_scaling.png"))

    fig, ax = plt.subplots(figsize=(12, 8), constrained_layout=True)
    ax.set_xscale("log")
    ax.set_yscale("log")
    for gt, sub, res in master_data:
        plot_loglog_with_fit(ax, sub["Pred_CLE"].values, sub["Time_CLE_Mean"].values,
                             res, topo_colors[gt], label=gt)
    ax.set_xlabel("n * E (log scale)")
    ax.set_ylabel("Time_CLE_Mean (log scale)")
    ax.set_title("Master: Predictor vs Time for all topologies (log-log)")
    style_axes(ax)
    ax.legend(frameon=True, ncol=2)
    save_fig(fig, os.path.join(out_dir, "master_predictor_scatter_loglog.png"))

    summary_df = pd.DataFrame(summary_rows)
    summary_df.to_csv(os.path.join(out_dir, "loglog_summary.csv"), index=False)
    return summary_df


def main():
    if not os.path.exists(INPUT_CSV):
        raise FileNotFoundError(f"Input CSV not found at '{INPUT_CSV}'.")
    df = pd.read_csv(INPUT_CSV)

    clear_dir(OUT_DIR)
    summary_df = analyse(df, OUT_DIR)
    zip_path = zip_outputs(OUT_DIR, ZIP_NAME)

    print(summary_df)
    print("DONE")
    print(f"Outputs written to folder: {OUT_DIR}")
    print(f"Zip archive: {zip_path}")


if __name__ == "__main__":
    main()
