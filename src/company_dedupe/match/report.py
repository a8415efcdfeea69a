"""
Batch scoring reports for CompanyDedupe.

Turns per-candidate similarity scores into a pandas DataFrame for review
and export, and converts candidate tables into CompanyCandidate records.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from company_dedupe.match.decision import CompanyCandidate, DuplicateDecisionEngine

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "candidate_id",
    "candidate_name",
    "matched_on",
    "jaccard_score",
    "token_overlap",
    "character_similarity",
    "confidence",
    "is_duplicate",
    "band",
    "unique_tokens_query",
    "unique_tokens_candidate",
    "common_tokens",
]

CANDIDATE_COLUMNS = ["id", "name", "tax_id", "registration_number", "legal_name"]


def candidates_from_frame(df: pd.DataFrame) -> List[CompanyCandidate]:
    """
    Convert a candidate table into CompanyCandidate records.

    Args:
        df: DataFrame with an ``id`` and ``name`` column and optional
            ``tax_id``, ``registration_number`` and ``legal_name`` columns

    Returns:
        List of candidates (missing cells become None)
    """
    if "id" not in df.columns:
        raise ValueError("Candidate data must contain an 'id' column")

    candidates = []
    for _, row in df.iterrows():
        record = {
            column: (None if pd.isna(row[column]) else row[column])
            for column in CANDIDATE_COLUMNS
            if column in df.columns
        }
        candidates.append(CompanyCandidate.from_mapping(record))

    logger.info(f"Loaded {len(candidates)} candidates")
    return candidates


def build_score_report(engine: DuplicateDecisionEngine,
                       query_name: str,
                       candidates: Sequence[CompanyCandidate]) -> pd.DataFrame:
    """
    Score every candidate and collect the metrics into a DataFrame.

    Args:
        engine: Decision engine providing the scorer and confidence bands
        query_name: Raw company name being registered
        candidates: Existing companies

    Returns:
        DataFrame with one row per scored candidate, highest confidence first
    """
    rows = []
    for score in engine.score_candidates(query_name, candidates):
        result = score.result
        rows.append({
            "candidate_id": score.candidate.id,
            "candidate_name": score.candidate.name,
            "matched_on": score.matched_on,
            "jaccard_score": result.jaccard_score,
            "token_overlap": result.token_overlap,
            "character_similarity": result.character_similarity,
            "confidence": result.confidence,
            "is_duplicate": result.is_duplicate,
            "band": engine.band_for(result.confidence),
            "unique_tokens_query": " ".join(sorted(result.unique_tokens_query)),
            "unique_tokens_candidate": " ".join(sorted(result.unique_tokens_candidate)),
            "common_tokens": " ".join(sorted(result.common_tokens)),
        })

    report_df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    if not report_df.empty:
        report_df = report_df.sort_values("confidence", ascending=False, kind="mergesort")
        report_df = report_df.reset_index(drop=True)

    logger.info(f"Scored {len(report_df)} candidates for '{query_name}'")
    return report_df


def get_report_statistics(report_df: pd.DataFrame) -> Dict[str, Any]:
    """
    Calculate summary statistics for a score report.

    Args:
        report_df: Output of build_score_report

    Returns:
        Dictionary with score statistics
    """
    if report_df.empty or "confidence" not in report_df.columns:
        return {
            "total_candidates": 0,
            "duplicate_count": 0,
            "mean_confidence": 0.0,
            "max_confidence": 0.0,
            "band_distribution": {},
        }

    scores = report_df["confidence"]

    return {
        "total_candidates": len(report_df),
        "duplicate_count": int(report_df["is_duplicate"].sum()),
        "mean_confidence": float(scores.mean()),
        "max_confidence": float(scores.max()),
        "band_distribution": {
            band: int(count) for band, count in report_df["band"].value_counts().items()
        },
    }


def save_score_report(report_df: pd.DataFrame, output_path: str,
                      statistics: Optional[Dict[str, Any]] = None) -> None:
    """Write a score report to CSV."""
    report_df.to_csv(output_path, index=False)
    if statistics is not None:
        logger.info(f"Score report saved to {output_path}: {statistics['total_candidates']} candidates, "
                    f"{statistics['duplicate_count']} duplicates")
    else:
        logger.info(f"Score report saved to {output_path}")
