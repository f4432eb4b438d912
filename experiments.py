"""
Huffman coding system experiments

Measures how close the built codes get to the Shannon entropy of the
input, and what building, coding and reloading a saved tree cost

Outputs (in --outdir):
  - metrics.csv     (raw row per run per pipeline)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 64 --no_exp2
  python experiments.py --outdir results --exp1_generators uniform26,zipf64,english_like

Notes:
  - pipeline "tree" decodes with the instance that built the tree
  - pipeline "reloaded" decodes with a fresh instance restored from save()
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import string
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib.pyplot as plt

import huffman as huff
from huffman_system import HuffmanCodingSystem


PIPELINES = ("tree", "reloaded")
ALPHABET = string.ascii_letters + string.digits + string.punctuation + " "


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: Dict[str, int]) -> float:
    """Bits per symbol of the empirical distribution"""
    total = sum(ft.values())
    return -sum((f / total) * math.log2(f / total) for f in ft.values())


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, symbols: str, weights: List[float], size: int) -> str:
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)

    out = []
    for _ in range(size):
        r = rng.random()
        lo, hi = 0, len(cdf) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if r <= cdf[mid]:
                hi = mid
            else:
                lo = mid + 1
        out.append(symbols[lo])
    return "".join(out)

def gen_uniform(size: int, alphabet: int = 26, seed: int = 0) -> str:
    rng = random.Random(seed)
    symbols = ALPHABET[:alphabet]
    return "".join(rng.choice(symbols) for _ in range(size))

def gen_repetitive(size: int, dominant: str = "A", dom_frac: float = 0.90, seed: int = 0) -> str:
    rng = random.Random(seed)
    other_symbols = [ch for ch in ALPHABET if ch != dominant]
    return "".join(dominant if rng.random() < dom_frac else rng.choice(other_symbols) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 64, s: float = 1.2, seed: int = 0) -> str:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return _sample_cdf(rng, ALPHABET[:alphabet], weights, size)

def gen_english_like(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        "\n"
    )
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
    return _sample_cdf(rng, chars, weights, size)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform26": lambda size, seed: gen_uniform(size, alphabet=26, seed=seed),
    "uniform94": lambda size, seed: gen_uniform(size, alphabet=94, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "zipf16": lambda size, seed: gen_zipf_like(size, alphabet=16, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant="A", dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant="A", dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size: int, seed: int) -> Tuple[str, str]:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"Unknown generator {name!r}, choose from: {', '.join(sorted(GENERATOR_REGISTRY))}")
    return name, fn(size, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    text_length: int
    run_id: int
    pipeline: str  # "tree" or "reloaded"
    unique_symbols: int

    build_ms: float
    encode_ms: float
    save_ms: float
    load_ms: float
    decode_ms: float
    total_ms: float

    encoded_bits: int
    serialized_tree_chars: int
    avg_code_length: float
    entropy_bits: float
    efficiency: float  # entropy / average code length, 1.0 is optimal
    correctness_ok: int  # 1 or 0


def run_one(text: str, pipeline: str) -> MetricRow:
    if pipeline not in PIPELINES:
        raise ValueError(f"pipeline must be one of {PIPELINES}")

    ft = huff.freq_table(text)
    system = HuffmanCodingSystem()

    t0 = now_ns()
    system.build_from_text(text)
    t1 = now_ns()
    build_ms = ns_to_ms(t1 - t0)

    t2 = now_ns()
    bits = system.encode(text)
    t3 = now_ns()
    encode_ms = ns_to_ms(t3 - t2)

    save_ms = 0.0
    load_ms = 0.0
    decoder = system
    if pipeline == "reloaded":
        t4 = now_ns()
        saved = system.save()
        t5 = now_ns()
        save_ms = ns_to_ms(t5 - t4)

        decoder = HuffmanCodingSystem()
        t6 = now_ns()
        decoder.load(saved)
        t7 = now_ns()
        load_ms = ns_to_ms(t7 - t6)
    else:
        saved = system.save()

    # length is needed for the single-symbol case, whose code is empty
    t8 = now_ns()
    decoded = decoder.decode(bits, length=len(text))
    t9 = now_ns()
    decode_ms = ns_to_ms(t9 - t8)

    avg_len = system.average_code_length(ft)
    entropy = shannon_entropy(ft)
    efficiency = entropy / avg_len if avg_len > 0 else 1.0

    return MetricRow(
        exp_name="",
        dataset_name="",
        text_length=len(text),
        run_id=0,
        pipeline=pipeline,
        unique_symbols=len(ft),
        build_ms=build_ms,
        encode_ms=encode_ms,
        save_ms=save_ms,
        load_ms=load_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + encode_ms + save_ms + load_ms + decode_ms,
        encoded_bits=len(bits),
        serialized_tree_chars=len(saved),
        avg_code_length=avg_len,
        entropy_bits=entropy,
        efficiency=efficiency,
        correctness_ok=1 if decoded == text else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    names = [f.name for f in fields(MetricRow)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


SUMMARY_METRICS = ("avg_code_length", "entropy_bits", "efficiency", "build_ms", "encode_ms", "decode_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, text_length, pipeline and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.text_length, r.pipeline)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "text_length", "pipeline", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, length, pipeline = key
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "text_length": length,
                "pipeline": pipeline,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution" and r.pipeline == "tree"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    plt.plot(x, [mean_for(d, "avg_code_length") for d in datasets], marker="o", label="Huffman average code length")
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="o", label="Shannon entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Code Length vs Entropy by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_code_length.png", dpi=200)
    plt.close()

    plt.figure()
    plt.bar(x, [mean_for(d, "efficiency") for d in datasets])
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylim(0.0, 1.05)
    plt.ylabel("Entropy / Average Code Length")
    plt.title("Experiment 1: Coding Efficiency by Distribution")
    plt.tight_layout()
    plt.savefig(outdir / "exp1_efficiency.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    distributions = sorted(set(r.dataset_name for r in exp_rows))

    for dist in distributions:
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.text_length for r in dist_rows))

        def mean_size(size: int, pipeline: str, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.text_length == size and r.pipeline == pipeline]
            return statistics.mean(vals) if vals else float("nan")

        for field, label in (("encode_ms", "Encode Time (ms)"), ("decode_ms", "Decode Time (ms)"),
                             ("total_ms", "Total Time (ms)")):
            plt.figure()
            for p in PIPELINES:
                plt.plot(sizes, [mean_size(s, p, field) for s in sizes], marker="o", label=p)
            plt.xlabel("Text Length (characters)")
            plt.ylabel(label)
            plt.title(f"Experiment 2: {label} vs Size ({dist})")
            plt.legend()
            plt.tight_layout()
            plt.savefig(outdir / f"exp2_{field}_{dist}.png", dpi=200)
            plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    ap.add_argument("--exp1_size_kb", type=int, default=64, help="Experiment 1 fixed text length in K characters")
    ap.add_argument("--exp1_generators", type=str, default="uniform26,uniform94,zipf64,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    ap.add_argument("--exp2_min_kb", type=int, default=1, help="Experiment 2 min length in K characters (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=256, help="Experiment 2 max length in K characters")
    ap.add_argument("--exp2_generators", type=str, default="zipf64,english_like",
                    help="Comma-separated dataset generator names for experiment 2")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, text = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                for pipeline in PIPELINES:
                    row = run_one(text, pipeline)
                    row.exp_name = "exp1_distribution"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        sizes: List[int] = []
        s = max(1, args.exp2_min_kb) * 1024
        while s <= max(1, args.exp2_max_kb) * 1024:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, text = generate_dataset(gen_name, size, args.seed + 10_000 + size + run_id)
                    for pipeline in PIPELINES:
                        row = run_one(text, pipeline)
                        row.exp_name = "exp2_size_scaling"
                        row.dataset_name = dataset_name
                        row.run_id = run_id
                        rows.append(row)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
