"""
Command-line entry point for CompanyDedupe.

Runs a duplicate check for one company against a file of existing
companies, or ranks existing company names by similarity to a query.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import pandas as pd

from company_dedupe.match.decision import CompanyCandidate, DuplicateDecisionEngine
from company_dedupe.match.report import (
    build_score_report,
    candidates_from_frame,
    get_report_statistics,
    save_score_report,
)
from company_dedupe.match.text_similarity import NAME_SEARCH_SCORERS, find_similar_names
from company_dedupe.normalize.config import load_normalization_config

logger = logging.getLogger(__name__)


def load_candidates(input_path: str) -> List[CompanyCandidate]:
    """
    Load existing company records from a local file.

    Args:
        input_path: CSV, JSON lines or Parquet file

    Returns:
        List of candidates
    """
    path = Path(input_path)
    if not path.exists():
        raise ValueError(f"Candidates file not found: {input_path}")

    if input_path.endswith(".csv"):
        df = pd.read_csv(input_path, dtype=str, keep_default_na=False, na_values=[""])
    elif input_path.endswith(".parquet"):
        df = pd.read_parquet(input_path).astype("string")
    elif input_path.endswith(".json") or input_path.endswith(".jsonl"):
        df = pd.read_json(input_path, lines=True, dtype=False).astype("string")
    else:
        raise ValueError(f"Unsupported file format: {input_path}")

    logger.info(f"Read {len(df)} candidate rows from {input_path}")
    return candidates_from_frame(df)


def run_check(args: argparse.Namespace) -> int:
    config = load_normalization_config(args.config)
    engine = DuplicateDecisionEngine(config)
    candidates = load_candidates(args.candidates)

    start_time = time.time()
    result = engine.check(
        args.name,
        candidates,
        tax_id=args.tax_id,
        registration_number=args.registration_number,
    )
    logger.info(f"Duplicate check completed in {time.time() - start_time:.3f} seconds")

    if args.report:
        report_df = build_score_report(engine, args.name, candidates)
        save_score_report(report_df, args.report, get_report_statistics(report_df))

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


def run_similar(args: argparse.Namespace) -> int:
    config = load_normalization_config(args.config)
    engine = DuplicateDecisionEngine(config)
    candidates = load_candidates(args.candidates)

    names = [candidate.name for candidate in candidates if candidate.name]
    matches = find_similar_names(
        args.name,
        names,
        engine.scorer.normalizer,
        algorithm=args.algorithm,
        threshold=args.threshold,
        limit=args.limit,
    )

    print(json.dumps([{"name": name, "similarity": score} for name, score in matches],
                     indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CompanyDedupe duplicate company detection")
    parser.add_argument("--config", default=None,
                        help="Configuration file path (defaults to $COMPANY_DEDUPE_CONFIG "
                             "or config/company_dedupe.yaml)")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check a new company against existing companies")
    check.add_argument("--name", required=True, help="Company name being registered")
    check.add_argument("--tax-id", help="Tax identification number")
    check.add_argument("--registration-number", help="Company registration number")
    check.add_argument("--candidates", required=True, help="Existing companies (CSV, JSON lines or Parquet)")
    check.add_argument("--report", help="Write per-candidate scores to this CSV file")
    check.set_defaults(handler=run_check)

    similar = subparsers.add_parser("similar", help="Rank existing company names by similarity")
    similar.add_argument("--name", required=True, help="Company name to search for")
    similar.add_argument("--candidates", required=True, help="Existing companies (CSV, JSON lines or Parquet)")
    similar.add_argument("--algorithm", choices=sorted(NAME_SEARCH_SCORERS), help="Similarity algorithm")
    similar.add_argument("--threshold", type=float, help="Minimum similarity between 0 and 1")
    similar.add_argument("--limit", type=int, help="Maximum number of results")
    similar.set_defaults(handler=run_similar)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CompanyDedupe."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        return args.handler(args)
    except ValueError as e:
        logger.error(f"Duplicate check failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
