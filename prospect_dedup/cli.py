#!/usr/bin/env python3
"""
Prospect Dedup: Command Line

Runs the duplicate engine over a JSON file of records.

Usage:
    prospect-dedup scan --input prospects.json --output-dir output/dedup/
    prospect-dedup check --input prospects.json --name "Joe's Pizza" --phone 555-123-4567
    prospect-dedup merge --input prospects.json --keep 1 --merge 2 3

Dependencies:
    pip install rapidfuzz pyyaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from . import __version__
from .algorithms.blocking import BLOCKING_STRATEGIES
from .algorithms.composite_scorer import EngineConfig
from .engine import DEFAULT_MAX_RESULTS, DuplicateEngine
from .errors import DedupError
from .models import CandidateRecord, ScanReport
from .record_store import JsonRecordStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def load_config(path: str | None) -> EngineConfig:
    if path is None:
        return EngineConfig()
    config = EngineConfig.from_yaml(path)
    logger.info("Loaded duplicate rules from %s", path)
    return config


def resolve_id(store: JsonRecordStore, raw: str) -> Any:
    """Command-line ids are strings; JSON ids are often integers."""
    if store.get(raw) is not None:
        return raw
    try:
        as_int = int(raw)
    except ValueError:
        return raw
    return as_int if store.get(as_int) is not None else raw


def write_scan_output(report: ScanReport, output_dir: str) -> None:
    """Write duplicate pairs, groups and a summary as timestamped JSON files."""
    out_path = Path(output_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")

    pairs_path = out_path / f"duplicate_pairs_{ts}.json"
    with open(pairs_path, "w", encoding="utf-8") as f:
        json.dump([p.to_dict() for p in report.pairs], f, indent=2, ensure_ascii=False, default=str)
    logger.info("Wrote %d pairs to %s", len(report.pairs), pairs_path)

    groups_path = out_path / f"duplicate_groups_{ts}.json"
    with open(groups_path, "w", encoding="utf-8") as f:
        json.dump([g.to_dict() for g in report.groups], f, indent=2, ensure_ascii=False, default=str)
    logger.info("Wrote %d groups to %s", len(report.groups), groups_path)

    summary = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **report.summary(),
    }
    summary_path = out_path / f"scan_summary_{ts}.json"
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)
    logger.info("Wrote summary to %s", summary_path)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_scan(args: argparse.Namespace) -> int:
    engine = DuplicateEngine(load_config(args.config))
    store = JsonRecordStore(args.input)
    records = store.fetch_all()

    if args.dry_run:
        n = len(records)
        print(f"DRY RUN: {n} records, {n * (n - 1) // 2} pairs in an exhaustive scan.")
        return 0

    report = engine.scan_collection(
        records,
        potential_threshold=args.threshold,
        blocking=args.blocking,
    )
    logger.info("  Duplicate pairs          : %d", report.summary()["duplicate_pairs"])
    logger.info("  Potential duplicate pairs: %d", report.summary()["potential_duplicate_pairs"])
    logger.info("  Groups                   : %d", len(report.groups))

    write_scan_output(report, args.output_dir)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    engine = DuplicateEngine(load_config(args.config))
    store = JsonRecordStore(args.input)
    candidate = CandidateRecord(
        business_name=args.name,
        phone=args.phone,
        address=args.address,
        city=args.city,
        state=args.state,
        postal_code=args.zip,
        website=args.website,
        email=args.email,
    )
    result = engine.check_duplicate(candidate, store.fetch_all(), max_results=args.max_results)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
    return 0


def cmd_merge(args: argparse.Namespace) -> int:
    engine = DuplicateEngine()
    store = JsonRecordStore(args.input)
    keep_id = resolve_id(store, args.keep)
    merge_ids = [resolve_id(store, mid) for mid in args.merge]
    outcome = engine.merge(keep_id, merge_ids, store)
    print(json.dumps(
        {
            "kept_id": outcome.record.record_id,
            "merged_ids": outcome.merged_ids,
            "fields_filled": outcome.fields_filled,
            "record": outcome.record.to_dict(),
        },
        indent=2,
        ensure_ascii=False,
        default=str,
    ))
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prospect-dedup",
        description="Fuzzy duplicate detection for business-contact records",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    p_scan = subparsers.add_parser("scan", help="Scan a record file for duplicate pairs and groups")
    p_scan.add_argument("--input", "-i", required=True, help="JSON file with a list of records")
    p_scan.add_argument(
        "--output-dir",
        default="output/dedup",
        help="Directory for scan output (default: output/dedup/)",
    )
    p_scan.add_argument("--config", "-c", default=None, help="Path to a dedup_rules.yaml")
    p_scan.add_argument(
        "--blocking",
        choices=sorted(BLOCKING_STRATEGIES),
        default=None,
        help="Only compare records sharing a blocking key (default: compare every pair)",
    )
    p_scan.add_argument("--threshold", type=float, default=None, help="Potential-duplicate threshold for this scan")
    p_scan.add_argument("--dry-run", action="store_true", help="Show record and pair counts without scoring")

    p_check = subparsers.add_parser("check", help="Check one new record against a record file")
    p_check.add_argument("--input", "-i", required=True, help="JSON file with existing records")
    p_check.add_argument("--config", "-c", default=None, help="Path to a dedup_rules.yaml")
    p_check.add_argument("--name", required=True, help="Business name")
    p_check.add_argument("--phone")
    p_check.add_argument("--address")
    p_check.add_argument("--city")
    p_check.add_argument("--state")
    p_check.add_argument("--zip")
    p_check.add_argument("--website")
    p_check.add_argument("--email")
    p_check.add_argument("--max-results", type=int, default=DEFAULT_MAX_RESULTS)

    p_merge = subparsers.add_parser("merge", help="Merge records in a record file")
    p_merge.add_argument("--input", "-i", required=True, help="JSON file with records (rewritten in place)")
    p_merge.add_argument("--keep", required=True, help="Id of the record to keep")
    p_merge.add_argument("--merge", nargs="+", required=True, help="Ids of the records to merge away")

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {"scan": cmd_scan, "check": cmd_check, "merge": cmd_merge}
    if args.command not in commands:
        parser.print_help()
        return 0

    try:
        return commands[args.command](args)
    except DedupError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
