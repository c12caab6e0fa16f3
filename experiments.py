# experiments.py

"""
Huffman coding demo and experiments: heap builder vs linear-scan builder

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --demo "hello, wired world"
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 64 --exp2_max_symbols 4096
  python experiments.py --outdir results --exp1_generators uniform256,zipf128,english_like
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt

import huffman as huff


PIPELINES: Dict[str, Callable[[list], huff.HuffmanNode]] = {
    "heap": huff.build_huffman_tree,
    "scan": huff.build_huffman_tree_scan,
}


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: Dict[int, int]) -> float:
    """Entropy in bits per symbol of the histogram, the lower bound for any prefix code"""
    total = sum(ft.values())
    return -sum((c / total) * math.log2(c / total) for c in ft.values())


# Synthetic dataset generators (symbols are ints so alphabets may exceed a byte)

def _sample(rng: random.Random, symbols: List[int], weights: List[float], size: int) -> List[int]:
    return rng.choices(symbols, weights=weights, k=size)

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> List[int]:
    rng = random.Random(seed)
    return [rng.randrange(alphabet) for _ in range(size)]

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> List[int]:
    rng = random.Random(seed)
    symbols = list(range(256))
    rest = (1.0 - dom_frac) / 255
    weights = [dom_frac if s == dominant else rest for s in symbols]
    return _sample(rng, symbols, weights, size)

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> List[int]:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return _sample(rng, list(range(alphabet)), weights, size)

def gen_english_like(size: int, seed: int = 0) -> List[int]:
    rng = random.Random(seed)
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample(rng, [ord(ch) for ch in chars], weights, size)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], List[int]]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size: int, seed: int) -> Tuple[str, List[int]]:
    """
    Unknown dataset names fall back to uniform256 so a typo does not abort a long run
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_uniform256", gen_uniform(size, alphabet=256, seed=seed)
    return name, fn(size, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    input_symbols: int
    run_id: int
    pipeline: str  # "heap" or "scan"
    unique_symbols: int

    build_tree_ms: float
    code_table_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    encoded_bits: int
    bits_per_symbol: float
    entropy_bits: float
    redundancy_bits: float  # bits_per_symbol - entropy_bits
    correctness_ok: int  # 1 or 0


def run_one(data: List[int], pipeline: str) -> MetricRow:
    build = PIPELINES.get(pipeline)
    if build is None:
        raise ValueError(f"pipeline must be one of {sorted(PIPELINES)}, got {pipeline!r}")

    ft = huff.frequency_table(data)
    leaves = huff.leaves_from_frequencies(ft)

    t0 = now_ns()
    root = build(leaves)
    t1 = now_ns()
    code_map = huff.generate_huffman_codes(root)
    t2 = now_ns()
    bits = huff.huffman_encode(data, code_map)
    t3 = now_ns()
    decoded = huff.huffman_decode(bits, root)
    t4 = now_ns()

    n = max(1, len(data))
    bits_per_symbol = len(bits) / n
    entropy = shannon_entropy(ft)

    return MetricRow(
        exp_name="",
        dataset_name="",
        input_symbols=len(data),
        run_id=0,
        pipeline=pipeline,
        unique_symbols=len(ft),
        build_tree_ms=ns_to_ms(t1 - t0),
        code_table_ms=ns_to_ms(t2 - t1),
        encode_ms=ns_to_ms(t3 - t2),
        decode_ms=ns_to_ms(t4 - t3),
        total_ms=ns_to_ms(t4 - t0),
        encoded_bits=len(bits),
        bits_per_symbol=bits_per_symbol,
        entropy_bits=entropy,
        redundancy_bits=bits_per_symbol - entropy,
        correctness_ok=1 if decoded == list(data) else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = ("bits_per_symbol", "redundancy_bits", "build_tree_ms", "encode_ms", "decode_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, input_symbols, unique_symbols, pipeline and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.input_symbols, r.unique_symbols, r.pipeline)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "input_symbols", "unique_symbols", "pipeline", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, n_symbols, unique, pipeline = key
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "input_symbols": n_symbols,
                "unique_symbols": unique,
                "pipeline": pipeline,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def _mean_of(rows: List[MetricRow], field: str, **match) -> float:
    vals = [getattr(r, field) for r in rows if all(getattr(r, k) == v for k, v in match.items())]
    return statistics.mean(vals) if vals else float("nan")

def _line_chart(path: Path, title: str, xlabel: str, ylabel: str, series: Dict[str, Tuple[list, list]],
                xticklabels: Optional[List[str]] = None) -> None:
    plt.figure()
    for label, (x, y) in series.items():
        plt.plot(x, y, marker="o", label=label)
    if xticklabels is not None:
        plt.xticks(list(range(len(xticklabels))), xticklabels, rotation=20, ha="right")
    if xlabel:
        plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title)
    plt.legend()
    plt.tight_layout()
    plt.savefig(path, dpi=200)
    plt.close()


def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    x = list(range(len(datasets)))

    _line_chart(
        outdir / "exp1_bits_per_symbol.png",
        "Experiment 1: Code Length vs Entropy by Distribution", "", "Bits per Symbol",
        {
            "huffman": (x, [_mean_of(exp_rows, "bits_per_symbol", dataset_name=d, pipeline="heap") for d in datasets]),
            "entropy": (x, [_mean_of(exp_rows, "entropy_bits", dataset_name=d, pipeline="heap") for d in datasets]),
        },
        xticklabels=datasets,
    )
    _line_chart(
        outdir / "exp1_build_time.png",
        "Experiment 1: Tree Build Time by Distribution", "", "Build Time (ms)",
        {p: (x, [_mean_of(exp_rows, "build_tree_ms", dataset_name=d, pipeline=p) for d in datasets])
         for p in PIPELINES},
        xticklabels=datasets,
    )


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_alphabet_scaling"]
    if not exp_rows:
        return

    sizes = sorted(set(r.unique_symbols for r in exp_rows))
    _line_chart(
        outdir / "exp2_build_time.png",
        "Experiment 2: Tree Build Time vs Alphabet Size", "Distinct Symbols", "Build Time (ms)",
        {p: (sizes, [_mean_of(exp_rows, "build_tree_ms", unique_symbols=s, pipeline=p) for s in sizes])
         for p in PIPELINES},
    )


def plot_experiment_3(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp3_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.input_symbols for r in dist_rows))
        _line_chart(
            outdir / f"exp3_codec_time_{dist}.png",
            f"Experiment 3: Encode/Decode Time vs Size ({dist})", "Input Symbols", "Time (ms)",
            {
                "encode": (sizes, [_mean_of(dist_rows, "encode_ms", input_symbols=s, pipeline="heap") for s in sizes]),
                "decode": (sizes, [_mean_of(dist_rows, "decode_ms", input_symbols=s, pipeline="heap") for s in sizes]),
            },
        )


# Demo

def run_demo(text: str) -> int:
    if not text:
        print("Nothing to encode: empty text")
        return 1
    root = huff.build_tree_from_frequencies(huff.frequency_table(text))
    code_map = huff.generate_huffman_codes(root)
    bits = huff.huffman_encode(text, code_map)
    decoded = "".join(huff.huffman_decode(bits, root))

    print("tree:", huff.format_tree(root))
    for symbol, code in sorted(code_map.items(), key=lambda kv: (len(kv[1]), kv[1])):
        print(f"  {symbol!r}: {code}")
    print(f"code: {bits}")
    print(f"text: {decoded}")
    print(f"bits: {len(bits)} ({len(bits) / len(text):.3f} per symbol, "
          f"entropy {shannon_entropy(huff.frequency_table(text)):.3f})")
    return 0 if decoded == text else 1


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--demo", type=str, nargs="?", const="hello, wired world", default=None,
                    help="Encode and decode TEXT, printing tree, codes and bits, then exit")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (alphabet scaling)")
    ap.add_argument("--no_exp3", action="store_true", help="Disable experiment 3 (size scaling)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=64, help="Experiment 1 input length in K symbols")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_symbols", type=int, default=16, help="Experiment 2 smallest alphabet (power-of-two growth)")
    ap.add_argument("--exp2_max_symbols", type=int, default=2048, help="Experiment 2 largest alphabet")

    # Experiment 3 controls
    ap.add_argument("--exp3_min_kb", type=int, default=4, help="Experiment 3 min length in K symbols (power-of-two growth)")
    ap.add_argument("--exp3_max_kb", type=int, default=256, help="Experiment 3 max length in K symbols")
    ap.add_argument("--exp3_generators", type=str, default="uniform256,zipf128,repetitive90",
                    help="Comma-separated dataset generator names for experiment 3")

    args = ap.parse_args(argv)

    if args.demo is not None:
        return run_demo(args.demo)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    def record(exp_name: str, dataset_name: str, run_id: int, data: List[int]) -> None:
        for pipeline in PIPELINES:
            row = run_one(data, pipeline)
            row.exp_name = exp_name
            row.dataset_name = dataset_name
            row.run_id = run_id
            rows.append(row)

    # Experiment 1: distributions (fixed length)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                record("exp1_distribution", dataset_name, run_id, data)

    # Experiment 2: alphabet scaling, every symbol present so the tree has exactly that many leaves
    if not args.no_exp2:
        k = max(2, args.exp2_min_symbols)
        while k <= args.exp2_max_symbols:
            for run_id in range(1, args.runs + 1):
                data = list(range(k)) + gen_uniform(4 * k, alphabet=k, seed=args.seed + 10_000 + k + run_id)
                record("exp2_alphabet_scaling", f"uniform{k}", run_id, data)
            k *= 2

    # Experiment 3: input size scaling (powers of 2)
    if not args.no_exp3:
        sizes: List[int] = []
        s = max(1, args.exp3_min_kb) * 1024
        while s <= max(1, args.exp3_max_kb) * 1024:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp3_generators):
            for size in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_dataset(gen_name, size, args.seed + 200_000 + size + run_id)
                    record("exp3_size_scaling", dataset_name, run_id, data)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)
    plot_experiment_3(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
