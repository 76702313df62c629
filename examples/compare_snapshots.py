#!/usr/bin/env python3
"""
diffai - Snapshot Comparison Example

This example compares two in-memory model snapshots and prints the
changes in both output formats.
"""

from diffai import (
    ComparisonOptions,
    diff,
    format_output,
    summarize,
)


def main():
    print("=" * 60)
    print("diffai - Snapshot Comparison")
    print("=" * 60)

    snapshot_v1 = {
        "model": {
            "layer1": {"weight": [[1.0, 2.0], [3.0, 4.0]], "bias": [0.1, 0.2]},
            "layer2": {"weight": [[0.5, 0.5], [0.5, 0.5]]},
        },
        "optimizer": {"name": "adam", "lr": 0.001},
        "step": 100,
    }

    snapshot_v2 = {
        "model": {
            "layer1": {"weight": [[1.1, 2.0], [3.0, 4.0]], "bias": [0.1, 0.2]},
            "layer2": {"weight": [[0.6, 0.4], [0.5, 0.5]]},
            "layer3": {"weight": [[1.0]]},
        },
        "optimizer": {"name": "adam", "lr": 0.0005},
        "step": 200,
    }

    # Example 1: Exact comparison
    print("\n1. Exact comparison...")
    entries = diff(snapshot_v1, snapshot_v2)
    print(format_output(entries, "diffai"))

    summary = summarize(entries)
    print(f"\n   Added: {summary.added}  Removed: {summary.removed}  "
          f"Modified: {summary.modified}  Type changed: {summary.type_changed}")

    # Example 2: Tolerance and filtering
    print("\n" + "-" * 60)
    print("2. Weights only, ignoring changes below 0.15...")
    options = ComparisonOptions(epsilon=0.15, path_filter="model")
    print(format_output(diff(snapshot_v1, snapshot_v2, options), "diffai"))

    # Example 3: JSON export
    print("\n" + "-" * 60)
    print("3. JSON export...")
    json_output = format_output(entries, "json")
    print(f"   JSON export: {len(json_output)} characters")

    print("\n" + "=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
