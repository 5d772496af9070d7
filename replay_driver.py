# ===================== replay_driver.py =====================
"""Replay a JSONL message trace into a linreg node and record what it emits.

Run examples:
  # Generate a trace, then replay it with the default (full reporting) node
  python make_trace.py --nx 2 --m 8 --bangs 200 --out data/two_features.jsonl
  python replay_driver.py --trace data/two_features.jsonl --nx 2 --m 8

  # Reduced node: only predictions are emitted, bias/weights are read back
  python replay_driver.py --trace data/two_features.jsonl --nx 2 --m 8 --reduced

Each trace line is either {"message": "x 1 2 3"} or
{"selector": "x", "args": [1, 2, 3]}.

Outputs land in results/<name>/ (history.csv, predictions.csv, summary.txt)
"""
from __future__ import annotations
import argparse, csv, json, logging, time
from pathlib import Path
from typing import Iterator, List

import numpy as np

from commands import Command, CommandParseError, build_command, parse_message
from node import LinRegNode

RESULTS_DIR = Path("results")


def load_trace(path) -> Iterator[Command | str]:
    """Yield one command per trace line.

    Lines whose message does not parse are yielded as raw text so the node
    can reject them with its usual diagnostic.
    """
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{lineno}: not JSON ({e.msg})") from None
            if not isinstance(obj, dict):
                raise ValueError(f"{path}:{lineno}: expected a JSON object")

            if "message" in obj:
                yield str(obj["message"])
            elif "selector" in obj:
                args = obj.get("args", [])
                if not isinstance(args, list):
                    raise ValueError(f"{path}:{lineno}: 'args' must be a list")
                try:
                    command = build_command(obj["selector"], args)
                except CommandParseError:
                    command = " ".join([str(obj["selector"])] + [str(a) for a in args])
                yield command
            else:
                raise ValueError(f"{path}:{lineno}: no 'message' or 'selector' field")


class RunRecorder:
    """Collects what the node emits, one row per trigger."""

    def __init__(self, node: LinRegNode):
        self.node = node
        self.nx = node.model.nx
        self.predictions: List[tuple] = []
        self.rows: List[list] = []
        node.predictions.connect(self._on_predictions)

    def _on_predictions(self, values) -> None:
        self.predictions.append(values)

    def after_trigger(self) -> None:
        # read back instead of listening: the reduced node never emits these
        model = self.node.model
        self.rows.append([len(self.rows) + 1, self.node.last_loss, model.bias, *model.weights.tolist()])

    def flush(self, out_dir: Path) -> None:
        with open(out_dir / "history.csv", "w", newline="") as f:
            cw = csv.writer(f)
            cw.writerow(["trigger", "loss", "bias"] + [f"w{j}" for j in range(self.nx)])
            cw.writerows(self.rows)
        with open(out_dir / "predictions.csv", "w", newline="") as f:
            cw = csv.writer(f)
            cw.writerow(["trigger", "sample", "prediction"])
            for t, preds in enumerate(self.predictions, 1):
                cw.writerows([t, i, p] for i, p in enumerate(preds))


def run(args: argparse.Namespace) -> dict:
    name = args.name or Path(args.trace).stem
    out_dir = Path(args.outdir) / name
    out_dir.mkdir(parents=True, exist_ok=True)

    with LinRegNode(args.nx, args.m, args.alpha, report_params=not args.reduced) as node:
        rec = RunRecorder(node)

        t_wall0 = time.perf_counter()
        messages = list(load_trace(args.trace)) + ["bang"] * args.repeat
        for msg in messages:
            before = node.triggers
            if isinstance(msg, str):
                node.send(msg)
            else:
                node.dispatch(msg)
            if node.triggers > before:
                rec.after_trigger()
        wall = time.perf_counter() - t_wall0

        rec.flush(out_dir)
        model = node.model
        result = {
            "run": name,
            "trace": str(args.trace),
            "nx": model.nx,
            "m": model.m,
            "alpha": model.alpha,
            "triggers": node.triggers,
            "rejected": node.rejected,
            "final_loss": node.last_loss,
            "final_bias": model.bias,
            "final_weights": model.weights.tolist(),
            "wall_s": wall,
        }

    weights = np.array2string(np.asarray(result["final_weights"]), precision=6, separator=", ")
    final_loss = "n/a" if result["final_loss"] is None else f"{result['final_loss']:.6g}"
    summary = (
        f"Run: {name}\n"
        f"Trace: {args.trace}\n"
        f"Shape: nx={result['nx']} m={result['m']}\n"
        f"Alpha: {result['alpha']:g}\n"
        f"Triggers: {result['triggers']}\n"
        f"Rejected Commands: {result['rejected']}\n"
        f"Final Loss: {final_loss}\n"
        f"Final Bias: {result['final_bias']:.6g}\n"
        f"Final Weights: {weights}\n"
        f"Wall Time: {wall:.4f} s\n"
    )
    with open(out_dir / "summary.txt", "w", encoding="utf-8") as f:
        f.write(summary)
    print(summary, end="")
    return result


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Replay a JSONL message trace into a linreg node")
    p.add_argument("--trace", required=True, help="Path to JSONL trace file")
    p.add_argument("--nx", type=int, default=1, help="Number of features")
    p.add_argument("--m", type=int, default=1, help="Batch size (samples held at once)")
    p.add_argument("--alpha", type=float, default=0.01, help="Initial learning rate")
    p.add_argument("--reduced", action="store_true", help="Only emit predictions on each trigger")
    p.add_argument("--repeat", type=int, default=0, help="Extra bangs to send after the trace")
    p.add_argument("--name", default=None, help="Run name (defaults to the trace file stem)")
    p.add_argument("--outdir", default=str(RESULTS_DIR))
    p.add_argument("--verbose", action="store_true", help="Log every trigger's loss")
    return p


if __name__ == "__main__":
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(message)s")
    run(args)
