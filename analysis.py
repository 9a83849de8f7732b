#!/usr/bin/env python3
"""
Radar scope log analysis script.

Reads a scope_log.csv produced by World and computes:

- Basic counts:
    * Rows per kind (WARNING / VIOLATION / MIT_SAFE / MIT_CAUTION / MIT_DANGER)
    * Number of distinct frames with a conflict
    * Conflict alerts fired

- Closest approach:
    * Minimum lateral and vertical separation over flagged pairs
    * Closest pair overall

- Miles in trail:
    * Worst (smallest) in-trail spacing and its pair
    * Worst projected spacing

Usage:
    python analysis.py logs/scope_log.csv
    python analysis.py logs/scope_log.csv --out-csv summary.csv
"""

import argparse
import csv
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass
class LogRow:
    time_s: float
    kind: str
    ac0: str
    ac1: str
    lateral_nm: float
    vertical_ft: Optional[float]
    projected_nm: Optional[float]
    alert: bool


def _opt_float(value: str) -> Optional[float]:
    value = (value or "").strip()
    return float(value) if value else None


# ---------------------------------------------------------------------------
# I/O
# ---------------------------------------------------------------------------

def load_log(path: str) -> List[LogRow]:
    """
    Load the scope log CSV into a list of LogRow objects, sorted by time.
    """
    rows: List[LogRow] = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for r in reader:
            try:
                rows.append(
                    LogRow(
                        time_s=float(r["time_s"]),
                        kind=r["kind"],
                        ac0=r["ac0"],
                        ac1=r["ac1"],
                        lateral_nm=float(r["lateral_nm"]),
                        vertical_ft=_opt_float(r["vertical_ft"]),
                        projected_nm=_opt_float(r["projected_nm"]),
                        alert=(str(r["alert"]).strip() == "1"),
                    )
                )
            except KeyError as e:
                raise RuntimeError(f"Missing expected column in CSV: {e}")
    rows.sort(key=lambda x: x.time_s)
    return rows


def is_conflict(row: LogRow) -> bool:
    return row.kind in ("WARNING", "VIOLATION")


# ---------------------------------------------------------------------------
# Metric computations
# ---------------------------------------------------------------------------

def compute_basic_counts(rows: List[LogRow]) -> Dict[str, float]:
    counts = Counter(r.kind for r in rows)
    conflict_frames = {r.time_s for r in rows if is_conflict(r)}
    alert_frames = {r.time_s for r in rows if r.alert}

    out: Dict[str, float] = {f"count_{k}": v for k, v in counts.items()}
    out["total_rows"] = len(rows)
    out["conflict_frames"] = len(conflict_frames)
    out["alerts_fired"] = len(alert_frames)
    return out


def compute_closest_approach(rows: List[LogRow]) -> Dict[str, float]:
    """
    Closest lateral / vertical separation over every flagged pair.
    """
    conflicts = [r for r in rows if is_conflict(r)]
    if not conflicts:
        return {"min_lateral_nm": 0.0, "min_vertical_ft": 0.0, "closest_pair": "-"}

    closest = min(conflicts, key=lambda r: (r.lateral_nm, r.vertical_ft or 0.0))
    min_vertical = min(r.vertical_ft for r in conflicts if r.vertical_ft is not None)

    per_pair: Dict[str, int] = defaultdict(int)
    for r in conflicts:
        per_pair[f"{r.ac0}/{r.ac1}"] += 1

    return {
        "min_lateral_nm": closest.lateral_nm,
        "min_vertical_ft": min_vertical,
        "closest_pair": f"{closest.ac0}/{closest.ac1}",
        "closest_time_s": closest.time_s,
        "distinct_pairs": len(per_pair),
        "max_frames_any_pair": max(per_pair.values()),
    }


def compute_mit(rows: List[LogRow]) -> Dict[str, float]:
    mit = [r for r in rows if r.kind.startswith("MIT_")]
    if not mit:
        return {"mit_rows": 0}

    worst = min(mit, key=lambda r: r.lateral_nm)
    projected = [r for r in mit if r.projected_nm is not None]
    out: Dict[str, float] = {
        "mit_rows": len(mit),
        "worst_mit_nm": worst.lateral_nm,
        "worst_mit_pair": f"{worst.ac0}->{worst.ac1}",
    }
    if projected:
        out["worst_projected_nm"] = min(r.projected_nm for r in projected)
    return out


# ---------------------------------------------------------------------------
# Main / reporting
# ---------------------------------------------------------------------------

def print_block(title: str, metrics: Dict[str, float]) -> None:
    print(title)
    for k in sorted(metrics.keys()):
        print(f"{k:25s}: {metrics[k]}")
    print()


def write_metrics_csv(path: str, blocks: Dict[str, Dict[str, float]]) -> None:
    """
    Flatten named metric blocks into a single-row CSV for easy comparison
    across runs.
    """
    flat: Dict[str, float] = {}
    for block_name, metrics in blocks.items():
        for k, v in metrics.items():
            flat[f"{block_name}.{k}"] = v

    fieldnames = sorted(flat.keys())
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerow(flat)


def main():
    parser = argparse.ArgumentParser(description="Analyze radar scope log CSV.")
    parser.add_argument("csv_path", nargs="?", default="logs/scope_log.csv",
                        help="Path to scope_log.csv")
    parser.add_argument(
        "--out-csv",
        help="Optional path to write a single-row CSV summary of all metrics.",
        default=None,
    )
    args = parser.parse_args()

    rows = load_log(args.csv_path)

    basic = compute_basic_counts(rows)
    closest = compute_closest_approach(rows)
    mit = compute_mit(rows)

    print_block("=== Basic Counts ===", basic)
    print_block("=== Closest Approach ===", closest)
    print_block("=== Miles In Trail ===", mit)

    if args.out_csv:
        all_blocks = {
            "basic": basic,
            "closest": closest,
            "mit": mit,
        }
        write_metrics_csv(args.out_csv, all_blocks)
        print(f"Metric summary written to: {args.out_csv}")


if __name__ == "__main__":
    main()
