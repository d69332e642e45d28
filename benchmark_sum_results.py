# benchmark_sum_results.py — Aggregate "sum" benchmark results and compare rates against Indexed Collection.
# Reads benchmark/benchmark.sum.<token>.results.txt, keeps the best rate per length for each series,
# then prints two JSON arrays: absolute rates by length, and rates relative to the baseline series.
# Usage:
#   python benchmark_sum_results.py [--dir benchmark] [--baseline "Indexed Collection"]
#                                   [--csv sum_results.csv] [--plots plots] [--dpi 220] [--summary sum_summary.md]
import os
import re
import math
import sys
import argparse
from dataclasses import dataclass
from datetime import datetime, UTC
from enum import Enum
from pathlib import Path
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

DIR = Path(__file__).resolve().parent / "benchmark"
RE_FILE = re.compile(r"benchmark\.sum\.(.+)\.results\.txt$")
RE_LEN = re.compile(r"len=(\d+)")
RE_RATE = re.compile(r"rate: ([.\d]+)")
REFERENCE = "Indexed Collection"


class Series(Enum):
    ACCESSOR_PROTOCOL = "Accessor Protocol"
    INDEXED_COLLECTION = "Indexed Collection"
    ITERATOR = "Iterator"
    PROPERTY_ACCESSORS = "Property Accessors"
    PROXY = "Proxy"
    UNKNOWN = "(unknown)"

    @classmethod
    def from_token(cls, token: str) -> "Series":
        for s in cls:
            if s is not cls.UNKNOWN and s.name.lower() == token:
                return s
        return cls.UNKNOWN


@dataclass(frozen=True)
class ResultFile:
    path: Path
    raw_text: str


@dataclass(frozen=True)
class Measurement:
    length: int
    rate: float


@dataclass(frozen=True)
class SeriesResult:
    label: str
    lengths: tuple
    rates: tuple


def log(msg):
    print(msg, file=sys.stderr)

def find_result_files(directory) -> list[Path]:
    directory = Path(directory)
    return [(directory / name).resolve() for name in os.listdir(directory) if RE_FILE.search(name)]

def load_result_files(paths) -> list[ResultFile]:
    out = []
    for path in paths:
        with open(path, encoding="utf-8") as f:
            out.append(ResultFile(Path(path), f.read()))
    return out

def resolve_name(path) -> str:
    m = RE_FILE.search(os.path.basename(path))
    if m is None:
        return Series.UNKNOWN.value
    return Series.from_token(m.group(1)).value

def parse_results(text: str) -> list[Measurement]:
    """Pair every `len=<int>` line with the `rate: <float>` line that follows it.

    Lines matching neither pattern are skipped. A length without a rate, or a
    rate without a length, raises ValueError with the 1-based line number.
    """
    out = []
    pending = None
    for lineno, line in enumerate(text.splitlines(), start=1):
        m = RE_LEN.search(line)
        if m:
            if pending is not None:
                raise ValueError(f"line {lineno}: len={m.group(1)} follows len={pending[1]} (line {pending[0]}) without a rate")
            pending = (lineno, int(m.group(1)))
            continue
        m = RE_RATE.search(line)
        if m:
            if pending is None:
                raise ValueError(f"line {lineno}: rate: {m.group(1)} has no preceding len=")
            out.append(Measurement(pending[1], float(m.group(1))))
            pending = None
    if pending is not None:
        raise ValueError(f"line {pending[0]}: len={pending[1]} has no rate before end of input")
    return out

def group_results(measurements) -> pd.Series:
    """Rates per length, lengths in first-seen order."""
    df = pd.DataFrame([(m.length, m.rate) for m in measurements], columns=["length", "rate"])
    return df.groupby("length", sort=False)["rate"].agg(list)

def compute_maximum_rates(grouped: pd.Series):
    assert all(len(rates) > 0 for rates in grouped), "empty rate bucket"
    # python ints: rates past 2**63 must not wrap
    return [int(n) for n in grouped.index], [math.floor(max(rates)) for rates in grouped]

def process_file(f: ResultFile) -> SeriesResult:
    label = resolve_name(f.path)
    if label == Series.UNKNOWN.value:
        log(f"warning: unrecognized series token in {f.path.name}")
    try:
        measurements = parse_results(f.raw_text)
    except ValueError as e:
        raise ValueError(f"{f.path}: {e}") from e
    lengths, rates = compute_maximum_rates(group_results(measurements))
    log(f"{label}: {len(measurements)} measurements, {len(lengths)} lengths ({f.path.name})")
    return SeriesResult(label, tuple(lengths), tuple(rates))

def zip_results(results, baseline=REFERENCE) -> pd.DataFrame:
    ref = next((r for r in results if r.label == baseline), None)
    if ref is None:
        raise ValueError(f"no results for baseline series `{baseline}`. Found: {[r.label for r in results]}")
    table = pd.DataFrame({"Length": list(ref.lengths)})
    for r in results:
        if r.lengths != ref.lengths:
            raise ValueError("unexpected error. Results have different sets of lengths. "
                             f"Name: `{r.label}`. Lengths: [{','.join(map(str, r.lengths))}].")
        # positional: rates[i] belongs to lengths[i]
        table[r.label] = list(r.rates)
    return table

def normalize_results(table: pd.DataFrame, baseline=REFERENCE) -> pd.DataFrame:
    rates = table.drop(columns="Length").astype(float)
    # DataFrame.round is half-to-even
    rel = rates.div(rates[baseline], axis=0).round(3)
    return pd.concat([table[["Length"]], rel], axis=1)

def to_json(table: pd.DataFrame) -> str:
    return table.to_json(orient="records")

def write_csv(table, normalized, path):
    rel = normalized.drop(columns="Length").add_suffix(" (relative)")
    out = pd.concat([table, rel], axis=1)
    out.to_csv(path, index=False, encoding="utf-8")
    log(f"Wrote {path}")

def plot_rates(table, outdir, dpi):
    os.makedirs(outdir, exist_ok=True)
    plt.figure(figsize=(10,6))
    for label in table.columns.drop("Length"):
        plt.plot(table['Length'], table[label], marker='o', label=label)
    plt.title("Max rate vs length — sum")
    plt.xlabel("array length"); plt.ylabel("ops/sec (higher is better)"); plt.xscale('log')
    plt.legend(); plt.grid(True, linestyle='--', linewidth=0.5)
    path = os.path.join(outdir, "sum_rates.png")
    plt.tight_layout(); plt.savefig(path, dpi=dpi); plt.close()
    log(f"Wrote {path}")
    return path

def plot_relative(normalized, baseline, outdir, dpi):
    os.makedirs(outdir, exist_ok=True)
    pivot = normalized.set_index('Length')
    ax = pivot.plot(kind='bar', rot=0, figsize=(13,6), legend=True)
    ax.set_title(f"Rate relative to {baseline} (higher is better)")
    ax.set_xlabel("array length"); ax.set_ylabel("× baseline rate")
    for bars in ax.containers:
        ax.bar_label(bars, labels=[f"{v:.2f}" if np.isfinite(v) else "" for v in bars.datavalues], fontsize=8)
    slug = re.sub(r"\W+", "_", baseline).strip("_").lower()
    path = os.path.join(outdir, f"sum_relative_to_{slug}.png")
    plt.tight_layout(); plt.savefig(path, dpi=dpi); plt.close()
    log(f"Wrote {path}")
    return path

def write_summary(table, normalized, baseline, path):
    lines = []
    lines.append(f"# Sum Benchmark Summary ({datetime.now(UTC).isoformat()})\n")
    lines.append(f"Baseline: {baseline}\n")
    others = [c for c in table.columns if c not in ("Length", baseline)]
    for i in range(len(table)):
        N = int(table['Length'].iloc[i])
        base = table[baseline].iloc[i]
        lines.append(f"## len={N}\n")
        lines.append(f"- {baseline}: {base} ops/sec")
        for label in others:
            rel = normalized[label].iloc[i]
            lines.append(f"- {label}: {table[label].iloc[i]} ops/sec -> {rel:.3f}x vs {baseline}")
        lines.append("")
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write("\n".join(lines))
    log(f"Wrote {path}")

def main(argv=None):
    ap = argparse.ArgumentParser(description="Aggregate sum benchmark results.")
    ap.add_argument("--dir", default=str(DIR), help="directory holding benchmark.sum.*.results.txt files")
    ap.add_argument("--baseline", default=REFERENCE, help="series every rate is normalized against")
    ap.add_argument("--csv", help="also write absolute and relative rates to this CSV file")
    ap.add_argument("--plots", help="also write PNG plots into this directory")
    ap.add_argument("--dpi", type=int, default=220)
    ap.add_argument("--summary", help="also write a markdown summary to this file")
    args = ap.parse_args(argv)

    paths = find_result_files(args.dir)
    if not paths:
        raise SystemExit(f"No result files found in {args.dir}. Expected: benchmark.sum.<name>.results.txt")
    log(f"Found {len(paths)} result files in {args.dir}")

    results = [process_file(f) for f in load_result_files(paths)]
    table = zip_results(results, args.baseline)
    normalized = normalize_results(table, args.baseline)

    print(to_json(table))
    print(to_json(normalized))

    if args.csv:
        write_csv(table, normalized, args.csv)
    if args.plots:
        plot_rates(table, args.plots, args.dpi)
        plot_relative(normalized, args.baseline, args.plots, args.dpi)
    if args.summary:
        write_summary(table, normalized, args.baseline, args.summary)

if __name__ == "__main__":
    main()
