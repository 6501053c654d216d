"""Data models for the Zipf Pipes project.

This module contains dataclasses representing the core domain objects. They
are frozen, so a finished analysis can be handed to any consumer without
being changed underneath it.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WordCount:
    """A unique word with its number of occurrences.

    Attributes:
        word: The word (lowercase when it comes from the tokenizer)
        count: Number of occurrences in the source
    """
    word: str
    count: int


@dataclass(frozen=True)
class SourceInfo:
    """Descriptive metadata about the document an analysis was made from.

    Attributes:
        name: File name of the source (e.g., "essay.docx")
        media_type: MIME type inferred from the file suffix
        size: Size of the source in bytes
        word_count: Approximate total number of words (None if unknown)
        unique_word_count: Number of unique words (None if unknown)
    """
    name: str
    media_type: str
    size: int
    word_count: int | None = None
    unique_word_count: int | None = None


@dataclass(frozen=True)
class RankedPoint:
    """A single word placed on the rank/frequency curve.

    Attributes:
        rank: 1-based position after sorting by descending frequency
        word: The word
        actual_frequency: Observed count
        log_rank: log10(rank)
        log_frequency: log10(actual_frequency)
        ideal_frequency: Frequency of the rank 1 word divided by rank
        fitted_frequency: Frequency predicted by the fitted power law
        percent_divergence_from_ideal: (actual - ideal) / actual * 100
        percent_difference_from_fitted: (actual - fitted) / actual * 100
    """
    rank: int
    word: str
    actual_frequency: int
    log_rank: float
    log_frequency: float
    ideal_frequency: float
    fitted_frequency: float
    percent_divergence_from_ideal: float
    percent_difference_from_fitted: float


@dataclass(frozen=True)
class FitMetrics:
    """Least-squares line through the (log_rank, log_frequency) pairs.

    Attributes:
        slope: Slope of the line (close to -1 for text following Zipf's Law)
        intercept: log10 of the frequency predicted for rank 1
        r_squared: Coefficient of determination of the fit
    """
    slope: float
    intercept: float
    r_squared: float


@dataclass(frozen=True)
class AnalysisResult:
    """Complete Zipf analysis of a single source.

    Attributes:
        id: Identifier of the analysis (see transform.make_analysis_id)
        source_info: Metadata about the analyzed source
        raw_word_counts: Word counts exactly as received, unsorted and unfiltered
        ranked_points: Points with a positive count, in ascending rank order
        fit_metrics: Parameters of the log-log regression
        top_words: The most frequent words, in descending frequency order
    """
    id: str
    source_info: SourceInfo
    raw_word_counts: tuple[WordCount, ...]
    ranked_points: tuple[RankedPoint, ...]
    fit_metrics: FitMetrics
    top_words: tuple[WordCount, ...]


@dataclass(frozen=True)
class AnalysisFailure:
    """An analysis that could not be completed.

    Attributes:
        id: Identifier of the attempted analysis
        reason: Human readable cause, suitable for showing to an end user
    """
    id: str
    reason: str


@dataclass(frozen=True)
class LoadedDocument:
    """Word counts read from a document, ready to be analyzed.

    Attributes:
        id: Identifier for the analysis of this document
        source_info: Metadata about the document
        word_counts: One entry per unique word
    """
    id: str
    source_info: SourceInfo
    word_counts: tuple[WordCount, ...]
