#!/usr/bin/env python3
"""Collect results/*/summary.txt from replay_driver.py runs into results/compare.csv."""
import os, re, csv

BASE = "results"
NUM = r"(-?[0-9]+(?:\.[0-9]+)?(?:[eE][-+]?[0-9]+)?)"
HDR = ["run", "trace", "nx", "m", "alpha", "triggers", "rejected",
       "final_loss", "final_bias", "wall_s"]


def parse_summary(path):
    m = {k: None for k in HDR}
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if s.startswith("Run:"):
                m["run"] = s.split(":", 1)[1].strip()
            elif s.startswith("Trace:"):
                m["trace"] = s.split(":", 1)[1].strip()
            elif s.startswith("Shape:"):
                # "Shape: nx=2 m=8"
                r = re.search(r"nx=(\d+)\s+m=(\d+)", s)
                if r: m["nx"], m["m"] = int(r.group(1)), int(r.group(2))
            elif s.startswith("Alpha:"):
                r = re.search(NUM, s)
                if r: m["alpha"] = float(r.group(1))
            elif s.startswith("Triggers:"):
                r = re.search(r"\d+", s)
                if r: m["triggers"] = int(r.group())
            elif s.startswith("Rejected Commands:"):
                r = re.search(r"\d+", s)
                if r: m["rejected"] = int(r.group())
            elif s.startswith("Final Loss:"):
                r = re.search(NUM, s)
                if r: m["final_loss"] = float(r.group(1))
            elif s.startswith("Final Bias:"):
                r = re.search(NUM, s)
                if r: m["final_bias"] = float(r.group(1))
            elif s.startswith("Wall Time:"):
                r = re.search(NUM, s)
                if r: m["wall_s"] = float(r.group(1))
    return m


def collect(base=BASE):
    rows = []
    for d in sorted(os.listdir(base)):
        path = os.path.join(base, d, "summary.txt")
        if not os.path.isfile(path):  # skip plots/ and other non-run dirs
            continue
        s = parse_summary(path)
        if not s.get("run"):  # fallback to folder name
            s["run"] = d
        rows.append(s)
    return rows


def main(base=BASE):
    if not os.path.isdir(base):
        print("No results/ directory found.")
        return []

    rows = collect(base)
    print("\t".join(HDR))
    for r in rows:
        print("\t".join("" if r.get(k) is None else str(r[k]) for k in HDR))

    out_csv = os.path.join(base, "compare.csv")
    with open(out_csv, "w", newline="") as f:
        w = csv.DictWriter(f, fieldnames=HDR)
        w.writeheader()
        for r in rows:
            w.writerow(r)
    print(f"Wrote {out_csv}")
    return rows


if __name__ == "__main__":
    main()
