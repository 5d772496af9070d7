# plot_results.py  (loss and parameter curves per replay run)
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

RESULTS_DIR = Path("results")


def load_histories(results_dir: Path = RESULTS_DIR) -> dict:
    """run name -> history DataFrame, for every results/<run>/history.csv."""
    runs = {}
    if not results_dir.exists():
        return runs
    for sub in sorted(results_dir.iterdir()):
        path = sub / "history.csv"
        if sub.is_dir() and path.exists():
            df = pd.read_csv(path)
            if not df.empty:
                runs[sub.name] = df
    return runs


def positive_loss(df: pd.DataFrame) -> pd.DataFrame:
    """Rows with a loss the log axis can show (an exact fit reports 0)."""
    g = df.dropna(subset=["loss"])
    return g[g["loss"] > 0]


def plot_loss(runs: dict, outfile: Path) -> None:
    fig, ax = plt.subplots(figsize=(6.8, 4.0))
    for name, df in runs.items():
        g = positive_loss(df)
        ax.plot(g["trigger"], g["loss"], label=name)
    ax.set_xlabel("Trigger")
    ax.set_ylabel("MSE before update")
    ax.set_yscale("log")
    ax.set_title("Loss vs trigger")
    ax.grid(True, linestyle="--", alpha=0.4)
    ax.legend(title="run")
    fig.tight_layout()
    fig.savefig(outfile, dpi=160)
    plt.close(fig)


def plot_params(name: str, df: pd.DataFrame, outfile: Path) -> None:
    fig, ax = plt.subplots(figsize=(6.8, 4.0))
    ax.plot(df["trigger"], df["bias"], linestyle="--", label="bias")
    for col in [c for c in df.columns if c.startswith("w")]:
        ax.plot(df["trigger"], df[col], label=col)
    ax.set_xlabel("Trigger")
    ax.set_ylabel("Value")
    ax.set_title(f"{name}: parameters vs trigger")
    ax.grid(True, linestyle="--", alpha=0.4)
    ax.legend()
    fig.tight_layout()
    fig.savefig(outfile, dpi=160)
    plt.close(fig)


def main(results_dir: Path = RESULTS_DIR) -> list:
    runs = load_histories(results_dir)
    if not runs:
        print("No history.csv found in results/. Run replay_driver.py first.")
        return []

    plots_dir = results_dir / "plots"
    plots_dir.mkdir(parents=True, exist_ok=True)
    written = [plots_dir / "loss.png"]
    plot_loss(runs, written[0])
    for name, df in runs.items():
        out = plots_dir / f"{name}_params.png"
        plot_params(name, df, out)
        written.append(out)

    print(f"Saved plots to {plots_dir.resolve()}")
    return written


if __name__ == "__main__":
    main()
