# make_trace.py
"""Write a JSONL message trace for a known linear relation.

  python make_trace.py --nx 2 --m 8 --weights 2 -1 --bias 0.5 --bangs 300

X is drawn from a standard normal, y = w.x + b (+ optional gaussian noise).
The trace sets alpha, X and y, then sends `--bangs` triggers.
"""
import argparse, json, os

import numpy as np


def make_messages(nx, m, weights, bias, noise=0.0, seed=0, bangs=100, alpha=0.1):
    if len(weights) != nx:
        raise ValueError(f"expected {nx} weights, got {len(weights)}")
    rng = np.random.default_rng(seed)
    X = rng.standard_normal((nx, m))               # row j = feature j
    y = np.asarray(weights, dtype=float) @ X + bias
    if noise > 0:
        y = y + rng.normal(0.0, noise, size=m)

    msgs = [
        {"selector": "alpha", "args": [alpha]},
        {"selector": "x", "args": X.ravel().tolist()},  # feature-major
        {"selector": "y", "args": y.tolist()},
    ]
    msgs += [{"message": "bang"}] * bangs
    return msgs


def main():
    ap = argparse.ArgumentParser(description="Generate a linreg JSONL trace")
    ap.add_argument("--nx", type=int, default=1)
    ap.add_argument("--m", type=int, default=8)
    ap.add_argument("--weights", type=float, nargs="+", default=None, help="true weights (default 1..nx)")
    ap.add_argument("--bias", type=float, default=0.0)
    ap.add_argument("--noise", type=float, default=0.0, help="stddev of target noise")
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--bangs", type=int, default=100)
    ap.add_argument("--alpha", type=float, default=0.1)
    ap.add_argument("--out", default=None, help="output path (default data/linear_nx<nx>_m<m>.jsonl)")
    args = ap.parse_args()

    weights = args.weights or [float(j + 1) for j in range(args.nx)]
    out = args.out or os.path.join("data", f"linear_nx{args.nx}_m{args.m}.jsonl")
    os.makedirs(os.path.dirname(out) or ".", exist_ok=True)

    msgs = make_messages(args.nx, args.m, weights, args.bias, args.noise, args.seed, args.bangs, args.alpha)
    with open(out, "w", encoding="utf-8") as f:
        for obj in msgs:
            f.write(json.dumps(obj) + "\n")
    print(f"Wrote {out} ({len(msgs)} messages)")


if __name__ == "__main__":
    main()
