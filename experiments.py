# experiments.py

"""
Huffman code-table compressor benchmarks

Measures how close the code gets to the Shannon entropy of the input and how much
the text code table costs on top of the packed bitstream

Outputs (in --outdir):
  - metrics.csv     (raw row per run per dataset)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 64 --exp2_max_kb 1024
  python experiments.py --outdir results --exp1_generators uniform256,zipf128,english_like
"""

from __future__ import annotations

import argparse
import csv
import io
import math
import random
import statistics
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt

import huffman as huff
from bitio import BitReader


ALPHABET_SIZE = 256
EOF = ALPHABET_SIZE


def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def entropy_bits(frequencies: Sequence[int]) -> float:
    total = sum(frequencies)
    if total == 0:
        return 0.0
    return -sum((f / total) * math.log2(f / total) for f in frequencies if f > 0)


# Synthetic dataset generators

def _sample(rng: random.Random, symbols: Sequence[int], weights: Sequence[float], size: int) -> bytes:
    return bytes(rng.choices(symbols, weights=weights, k=size))

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    weights = [1.0 / ((rank + 1) ** s) for rank in range(alphabet)]
    return _sample(random.Random(seed), range(alphabet), weights, size)

def gen_english_like(size: int, seed: int = 0) -> bytes:
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n.,"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch in "\n.,":
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0 if ch.islower() else 0.6)
        else:
            weights.append(2.0 if ch.islower() else 0.2)
    return _sample(random.Random(seed), [ord(ch) for ch in chars], weights, size)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}, expected one of {', '.join(sorted(GENERATOR_REGISTRY))}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int

    entropy_bits: float
    avg_code_bits: float

    build_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    code_table_bytes: int
    compressed_bytes: int
    compression_ratio: float          # bitstream only
    compression_ratio_with_table: float

    correctness_ok: int  # 1 or 0


def run_one(data: bytes) -> MetricRow:
    t0 = now_ns()
    frequencies = huff.count_frequencies(data, ALPHABET_SIZE)
    root = huff.build_huffman_tree(frequencies)
    t1 = now_ns()

    table = io.StringIO()
    huff.write_code_table(root, table)
    code_table_bytes = len(table.getvalue().encode("ascii"))

    t2 = now_ns()
    code_map = huff.generate_huffman_codes(root)
    bitstring = huff.huffman_encode(data, code_map, EOF)
    packed = huff.pack_bits(bitstring)
    t3 = now_ns()

    # decode from the persisted table, the way decompression sees it
    t4 = now_ns()
    restored = huff.read_code_table(io.StringIO(table.getvalue()))
    decoded = bytes(huff.huffman_decode(restored, BitReader(packed), EOF))
    t5 = now_ns()

    lengths = huff.code_lengths(root)
    total = max(1, len(data))
    avg_code_bits = sum(frequencies[s] * lengths[s] for s in range(ALPHABET_SIZE) if frequencies[s]) / total

    build_ms = ns_to_ms(t1 - t0)
    encode_ms = ns_to_ms(t3 - t2)
    decode_ms = ns_to_ms(t5 - t4)

    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        unique_symbols=sum(1 for f in frequencies if f),
        entropy_bits=entropy_bits(frequencies),
        avg_code_bits=avg_code_bits,
        build_ms=build_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + encode_ms + decode_ms,
        code_table_bytes=code_table_bytes,
        compressed_bytes=len(packed),
        compression_ratio=len(packed) / total,
        compression_ratio_with_table=(len(packed) + code_table_bytes) / total,
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = (
    "compression_ratio",
    "compression_ratio_with_table",
    "entropy_bits",
    "avg_code_bits",
    "build_ms",
    "encode_ms",
    "decode_ms",
    "total_ms",
)

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev per metric
    """
    groups: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        groups.setdefault((r.exp_name, r.dataset_name, r.file_size_bytes), []).append(r)

    fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs"]
    for m in SUMMARY_METRICS:
        fields += [f"{m}_mean", f"{m}_stdev"]
    fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for (exp_name, dataset_name, size_b), items in sorted(groups.items()):
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def plot_distributions(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    x = list(range(len(datasets)))

    def mean_for(dataset: str, field: str) -> float:
        return statistics.mean(getattr(r, field) for r in exp_rows if r.dataset_name == dataset)

    plt.figure()
    plt.plot(x, [mean_for(d, "compression_ratio") for d in datasets], marker="o", label="bitstream")
    plt.plot(x, [mean_for(d, "compression_ratio_with_table") for d in datasets], marker="o", label="bitstream + code table")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Compression Ratio by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_compression_ratio.png", dpi=200)
    plt.close()

    plt.figure()
    plt.bar([i - 0.2 for i in x], [mean_for(d, "entropy_bits") for d in datasets], width=0.4, label="entropy")
    plt.bar([i + 0.2 for i in x], [mean_for(d, "avg_code_bits") for d in datasets], width=0.4, label="avg code length")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Average Code Length vs Entropy")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_code_length_vs_entropy.png", dpi=200)
    plt.close()


def plot_size_scaling(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            return statistics.mean(getattr(r, field) for r in dist_rows if r.file_size_bytes == size)

        plt.figure()
        for field, label in (("build_ms", "build"), ("encode_ms", "encode"), ("decode_ms", "decode")):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=label)
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Runtime vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_time_{dist}.png", dpi=200)
        plt.close()

        plt.figure()
        plt.plot(sizes, [mean_size(s, "compression_ratio_with_table") for s in sizes], marker="o")
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("(Compressed + Code Table) / Original")
        plt.title(f"Code Table Overhead vs Size ({dist})")
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_ratio_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    ap.add_argument("--exp1_size_kb", type=int, default=256, help="Experiment 1 fixed input size in KB")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    ap.add_argument("--exp2_min_kb", type=int, default=1, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=1024, help="Experiment 2 max size in KB")
    ap.add_argument("--exp2_generators", type=str, default="zipf128,english_like",
                    help="Comma-separated dataset generator names for experiment 2")
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    rows: List[MetricRow] = []

    try:
        # Experiment 1: distributions (fixed size)
        if not args.no_exp1:
            fixed_size = max(1, args.exp1_size_kb) * 1024
            for gen_name in parse_csv_list(args.exp1_generators):
                for run_id in range(1, args.runs + 1):
                    row = run_one(generate_dataset(gen_name, fixed_size, args.seed + run_id))
                    row.exp_name = "exp1_distribution"
                    row.dataset_name = gen_name
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
                for size_b in sizes:
                    for run_id in range(1, args.runs + 1):
                        row = run_one(generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id))
                        row.exp_name = "exp2_size_scaling"
                        row.dataset_name = gen_name
                        row.run_id = run_id
                        rows.append(row)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    plot_distributions(rows, outdir)
    plot_size_scaling(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
