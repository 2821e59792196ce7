#!/usr/bin/env python3
"""
Sample Analysis Script.
Demonstrates usage of the Warranty Analytics Engine.
"""

from warranty_engine import FilterState, WarrantyAnalyticsEngine
from warranty_engine.core.storage import InMemoryStorage
from warranty_engine.ingestion.csv_reader import sample_csv_text


def main() -> None:
    """Run sample analysis demonstration."""
    print("=" * 70)
    print("WARRANTY ANALYTICS ENGINE - SAMPLE ANALYSIS")
    print("=" * 70)
    print()

    # Initialize engine with in-memory state
    engine = WarrantyAnalyticsEngine(storage=InMemoryStorage())
    print(f"Rules Version: {engine.rule_store.version}")

    # Load the bundled export
    result = engine.load_csv(sample_csv_text())
    print(f"Claims Loaded: {len(result.claims)} (dropped {result.stats.dropped_rows})")
    print()

    # Print full report
    formatter = engine.analyze_with_formatter()
    formatter.print_full()

    # Filtered view
    print()
    print("-" * 70)
    print("FILTERED: Sentra")
    print("-" * 70)
    report = engine.analyze(FilterState(model="Sentra"))
    print(f"Claims: {report.kpi.total_claims}, Cost: {report.kpi.total_cost:,.0f}")

    # Preview a rule change before activating it
    print()
    print("-" * 70)
    print("RULE PREVIEW DEMO")
    print("-" * 70)
    editor = engine.editor()
    editor.add_rule("phenomena", label="Armrest", keywords="armrest", priority=50)
    preview = engine.preview(editor.build(version="sample-draft"))
    for row in preview.phenomenon_diff:
        if row.delta:
            print(f"{row.label:<30} {row.baseline:>4} -> {row.candidate:>4} ({row.delta:+d})")
    print(f"Unclassified: {preview.baseline_unclassified} -> {preview.candidate_unclassified}")

    # Also show JSON
    print()
    print("-" * 70)
    print("JSON Output (first 500 chars):")
    print("-" * 70)
    json_output = formatter.to_json()
    print(json_output[:500] + "..." if len(json_output) > 500 else json_output)


if __name__ == "__main__":
    main()
