"""Serialization of analysis results.

Results are stored as JSON between pipeline steps, and exported as CSV or
Excel tables of the ranked points for use in other tools.
"""

import logging
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from zipf_pipes.models import AnalysisResult, FitMetrics, RankedPoint, SourceInfo, WordCount

logger = logging.getLogger(__name__)

# Column name for each RankedPoint field, in export order
EXPORT_COLUMNS = {
    "rank": "Rank",
    "word": "Word",
    "actual_frequency": "ActualFrequency",
    "log_rank": "LogRank",
    "log_frequency": "LogFrequency",
    "ideal_frequency": "IdealFrequency",
    "fitted_frequency": "FittedFrequency",
    "percent_divergence_from_ideal": "PercentDivergenceFromIdeal",
    "percent_difference_from_fitted": "PercentDifferenceFromFitted",
}

# Decimals kept in CSV exports. Excel exports keep full precision.
CSV_DECIMALS = {
    "LogRank": 4,
    "LogFrequency": 4,
    "IdealFrequency": 2,
    "FittedFrequency": 2,
    "PercentDivergenceFromIdeal": 2,
    "PercentDifferenceFromFitted": 2,
}

XLSX_SHEET_NAME = "Zipf Analysis"


def result_to_dict(result: AnalysisResult) -> dict:
    """Convert an analysis result to plain JSON-compatible data."""
    return asdict(result)


def result_from_dict(data: dict) -> AnalysisResult:
    """Rebuild an analysis result from the output of result_to_dict.

    Raises:
        ValueError: If required fields are missing or malformed.
    """
    try:
        return AnalysisResult(
            id=data["id"],
            source_info=SourceInfo(**data["source_info"]),
            raw_word_counts=tuple(WordCount(**wc) for wc in data["raw_word_counts"]),
            ranked_points=tuple(RankedPoint(**p) for p in data["ranked_points"]),
            fit_metrics=FitMetrics(**data["fit_metrics"]),
            top_words=tuple(WordCount(**wc) for wc in data["top_words"]),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed analysis result: {e}") from e


def points_to_frame(points: tuple[RankedPoint, ...] | list[RankedPoint]) -> pd.DataFrame:
    """Tabulate ranked points, one row per word in rank order."""
    frame = pd.DataFrame([asdict(point) for point in points], columns=list(EXPORT_COLUMNS))
    return frame.rename(columns=EXPORT_COLUMNS)


def export_csv(result: AnalysisResult, path: str | Path) -> Path:
    """Write the ranked points of an analysis to a CSV file.

    Raises:
        ValueError: If the analysis has no ranked points.
    """
    if not result.ranked_points:
        raise ValueError("No data available to export.")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    frame = points_to_frame(result.ranked_points).round(CSV_DECIMALS)
    frame.to_csv(path, index=False, encoding="utf-8")

    logger.info(f"Exported {len(frame)} rows to {path}")
    return path


def export_xlsx(result: AnalysisResult, path: str | Path) -> Path:
    """Write the ranked points of an analysis to an Excel workbook.

    Raises:
        ValueError: If the analysis has no ranked points.
    """
    if not result.ranked_points:
        raise ValueError("No data available to export.")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    frame = points_to_frame(result.ranked_points)
    frame.to_excel(path, sheet_name=XLSX_SHEET_NAME, index=False)

    logger.info(f"Exported {len(frame)} rows to {path}")
    return path


EXPORTERS = {
    "csv": export_csv,
    "xlsx": export_xlsx,
}
