"""Command-line interface for warranty claim QA and summaries."""

import argparse
import logging
import sys
from pathlib import Path

from .analytics.aggregation import aggregate_data, calculate_kpis
from .authoring.preview import build_distribution, count_unclassified, is_unclassified, preview_rule_set
from .config import get_settings
from .core.models import AnalysisReport
from .core.rule_store import RuleSetValidationError, load_default_rule_set, parse_rule_set_from_json, serialize_rule_set
from .core.rules import ClassificationRuleSet
from .ingestion.cleaner import clean_data
from .ingestion.csv_reader import read_csv_file
from .reporting.csv_export import build_summary_csv, build_unclassified_csv
from .reporting.performance import (
    DEFAULT_PERFORMANCE_LOG,
    GroundTruthError,
    append_performance_log,
    load_ground_truth,
    measure_accuracy,
)
from .reporting.summary import AnalysisReportFormatter
from .sync.enrichment import enrich_claims
from .sync.http import HttpClassificationProvider
from .utils.log import configure_logging

logger = logging.getLogger(__name__)


def load_rule_file(path: str | None) -> ClassificationRuleSet:
    """Load a rule-set JSON file, or the packaged default when no path is given."""
    if not path:
        return load_default_rule_set()
    return parse_rule_set_from_json(Path(path).read_text(encoding="utf-8"))


def write_output(content: str, output: str | None) -> None:
    if output:
        Path(output).write_text(content, encoding="utf-8")
        print(f"Saved to {output}")
    else:
        print(content)


def run_qa(args: argparse.Namespace) -> int:
    """Classify a QA sample with baseline (and optionally candidate) rules."""
    baseline_rules = load_rule_file(args.baseline)
    candidate_rules = load_rule_file(args.rules) if args.rules else None

    result = clean_data(read_csv_file(args.csv_path), baseline_rules)
    baseline = result.claims
    stats = result.stats

    print(f"QA Classification Summary ({args.csv_path})")
    print(f"Baseline rules version: {baseline_rules.version}")
    if candidate_rules is not None:
        print(f"Candidate rules version: {candidate_rules.version}")
    print(f"Total records: {len(baseline)}")
    print(
        f"Dropped rows: {stats.dropped_rows} (missing date {stats.missing_date}, "
        f"model {stats.missing_model}, description {stats.missing_description})"
    )
    print(f"Baseline unclassified: {count_unclassified(baseline)}")
    for label, count in sorted(build_distribution(baseline, "phenomenon").items(), key=lambda kv: -kv[1]):
        print(f"  {label:<40} {count:>6}")

    candidate = baseline
    if candidate_rules is not None:
        preview = preview_rule_set(baseline, candidate_rules)
        candidate = preview.claims
        print("\nCandidate distribution vs baseline (phenomenon):")
        print(f"  {'phenomenon':<40} {'baseline':>8} {'candidate':>9} {'delta':>6}")
        for row in preview.phenomenon_diff:
            print(f"  {row.label:<40} {row.baseline:>8} {row.candidate:>9} {row.delta:>+6}")
        print(f"Candidate unclassified: {preview.candidate_unclassified}")

    if args.unclassified:
        targets = [claim for claim in candidate if is_unclassified(claim)]
        Path(args.unclassified).write_text(build_unclassified_csv(targets), encoding="utf-8")
        print(f"Saved {len(targets)} unclassified records to {args.unclassified}")
    return 0


def run_summary(args: argparse.Namespace) -> int:
    """Print KPI and Pareto summaries for a CSV export."""
    rules = load_rule_file(args.rules)
    result = clean_data(read_csv_file(args.csv_path), rules)
    kpi = calculate_kpis(result.claims)
    aggregated = aggregate_data(result.claims)

    if args.format == "csv":
        write_output(build_summary_csv(kpi, aggregated), args.output)
        return 0

    formatter = AnalysisReportFormatter(
        AnalysisReport(rules_version=rules.version, stats=result.stats, kpi=kpi, aggregated=aggregated)
    )
    content = formatter.to_json() if args.format == "json" else formatter.to_text()
    write_output(content, args.output)
    return 0


def run_accuracy(args: argparse.Namespace) -> int:
    """Enrich a QA sample through the AI proxy and log phenomenon accuracy."""
    rules = load_rule_file(args.rules)
    claims = clean_data(read_csv_file(args.csv_path), rules).claims
    enriched = enrich_claims(claims, HttpClassificationProvider())

    entry = measure_accuracy(
        enriched,
        load_ground_truth(args.truth),
        provider=get_settings().ai_provider,
        dataset=Path(args.csv_path).name,
    )
    log_path = append_performance_log(entry, args.log_file)

    print(f"Model performance ({entry.dataset}, provider {entry.provider})")
    print(f"Evaluated: {entry.evaluated}")
    print(f"Matches:   {entry.matches}")
    print(f"Accuracy:  {entry.accuracy:.3f}")
    print(f"Logged to {log_path}")
    return 0


def run_export_rules(args: argparse.Namespace) -> int:
    """Write a validated rule set (default or given) as indented JSON."""
    write_output(serialize_rule_set(load_rule_file(args.rules)), args.output)
    return 0


def setup_argparser() -> argparse.ArgumentParser:
    """Set up command-line argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="warranty-engine",
        description="Classify and summarize warranty claim exports",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    qa = subparsers.add_parser("qa", help="Compare classification of a QA sample across rule sets")
    qa.add_argument("csv_path", help="Claim CSV file")
    qa.add_argument("--baseline", help="Baseline rule-set JSON (default: packaged rules)")
    qa.add_argument("--rules", help="Candidate rule-set JSON to compare against the baseline")
    qa.add_argument("--unclassified", help="Write unclassified claims to this CSV file")
    qa.set_defaults(handler=run_qa)

    summary = subparsers.add_parser("summary", help="KPI and Pareto summary for a claim CSV")
    summary.add_argument("csv_path", help="Claim CSV file")
    summary.add_argument("--rules", help="Rule-set JSON (default: packaged rules)")
    summary.add_argument("--format", choices=["text", "csv", "json"], default="text")
    summary.add_argument("--output", "-o", help="Write to a file instead of stdout")
    summary.set_defaults(handler=run_summary)

    accuracy = subparsers.add_parser("accuracy", help="Measure AI phenomenon accuracy against ground truth")
    accuracy.add_argument("csv_path", help="QA sample CSV file")
    accuracy.add_argument("--truth", required=True, help="Ground-truth JSON keyed by claim id")
    accuracy.add_argument("--rules", help="Rule-set JSON (default: packaged rules)")
    accuracy.add_argument(
        "--log-file",
        default=str(DEFAULT_PERFORMANCE_LOG),
        help=f"JSON-lines log to append to (default: {DEFAULT_PERFORMANCE_LOG})",
    )
    accuracy.set_defaults(handler=run_accuracy)

    export = subparsers.add_parser("export-rules", help="Export a rule set as JSON")
    export.add_argument("--rules", help="Rule-set JSON to validate and re-export")
    export.add_argument("--output", "-o", help="Write to a file instead of stdout")
    export.set_defaults(handler=run_export_rules)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = setup_argparser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)

    try:
        return args.handler(args)
    except FileNotFoundError as exc:
        print(f"[X] File not found: {exc.filename}", file=sys.stderr)
        return 1
    except (RuleSetValidationError, GroundTruthError) as exc:
        print(f"[X] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
