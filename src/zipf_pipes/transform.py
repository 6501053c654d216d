import logging
import math
import unicodedata
from collections import Counter
from pathlib import Path

import regex

from zipf_pipes.config import TOP_N_WORDS
from zipf_pipes.extract import ACCEPTED_FILE_TYPES, read_source
from zipf_pipes.models import (
    AnalysisFailure,
    AnalysisResult,
    FitMetrics,
    LoadedDocument,
    RankedPoint,
    SourceInfo,
    WordCount,
)
from zipf_pipes.statistics import linear_regression

logger = logging.getLogger(__name__)

# A word is a run of letters, optionally joined to further runs of letters by
# an apostrophe or a hyphen: "don't" and "mother-in-law" are single words.
# Letters may carry combining marks, so accented text in any script counts.
# Numeric characters such as "²", "½" or "Ⅻ" are not letters.
LETTERS = r"\p{L}[\p{L}\p{M}]*"
WORD_PATTERN = regex.compile(rf"{LETTERS}(?:['’-]{LETTERS})*")

NO_DATA = "no data"
INSUFFICIENT_DATA = "insufficient data for regression"
COUNTS_TOO_LARGE = "word counts too large to analyze"


def normalize_text(text: str) -> str:
    """Normalize text for word counting.

    Text is lowercased and composed (NFC), so an accented letter typed as a
    base letter plus a combining mark reads the same as the precomposed one.

    Examples:
        >>> normalize_text("The CAT")
        'the cat'
    """
    return unicodedata.normalize("NFC", text.lower())


def tokenize(text: str) -> list[str]:
    """Split text into normalized words.

    Digits, punctuation and whitespace only separate words and are never part
    of one. Leading and trailing apostrophes and hyphens are dropped.

    Examples:
        >>> tokenize("Don't stop, mother-in-law! 42 times -- 'twas")
        ["don't", 'stop', 'mother-in-law', 'times', 'twas']
    """
    return WORD_PATTERN.findall(normalize_text(text))


def count_words(text: str) -> dict[str, int]:
    """Count the occurrences of each unique word in a text.

    Examples:
        >>> count_words("The cat sat on the mat.")
        {'the': 2, 'cat': 1, 'sat': 1, 'on': 1, 'mat': 1}
    """
    return dict(Counter(tokenize(text)))


def compute_word_counts(text: str) -> list[WordCount]:
    """Compute word counts for a text.

    Returns:
        List of WordCount objects, one per unique lowercase word
    """
    return [WordCount(word=word, count=count) for word, count in count_words(text).items()]


def compute_text_statistics(text: str, word_counts: list[WordCount]) -> tuple[int, int]:
    """Describe the size of a text.

    The total is a plain whitespace split, so it may count things the
    tokenizer ignores (numbers, stray punctuation). It is descriptive only
    and never used in the analysis.

    Returns:
        Tuple of (approximate total word count, unique word count)
    """
    return len(text.split()), len(word_counts)


def make_analysis_id(name: str, size: int, modified: float | None = None) -> str:
    """Build an identifier for the analysis of a file.

    Examples:
        >>> make_analysis_id("essay.docx", 1024, 1700000000.5)
        'essay.docx-1024-1700000000500'
        >>> make_analysis_id("essay.docx", 1024)
        'essay.docx-1024'
    """
    if modified is None:
        return f"{name}-{size}"
    return f"{name}-{size}-{int(modified * 1000)}"


def read_document(name: str, content: bytes, modified: float | None = None) -> LoadedDocument:
    """Read a document and produce the word counts to analyze.

    Text documents go through the tokenizer. Spreadsheets already hold
    aggregated (word, frequency) pairs and are used as they are.

    Args:
        name: File name, used to choose a reader
        content: Raw bytes of the file
        modified: Modification time in seconds since the epoch, if known

    Returns:
        A LoadedDocument with source metadata and word counts

    Raises:
        ValueError: If the document cannot be read (see extract.read_source)
    """
    source = read_source(name, content)

    if isinstance(source, str):
        word_counts = compute_word_counts(source)
        total_words, unique_words = compute_text_statistics(source, word_counts)
    else:
        word_counts = source
        total_words = sum(word_count.count for word_count in word_counts)
        unique_words = len(word_counts)

    source_info = SourceInfo(
        name=name,
        media_type=ACCEPTED_FILE_TYPES.get(Path(name).suffix.lower(), "application/octet-stream"),
        size=len(content),
        word_count=total_words,
        unique_word_count=unique_words,
    )

    logger.info(f"Read {name}: {total_words} words, {unique_words} unique")

    return LoadedDocument(
        id=make_analysis_id(name, len(content), modified),
        source_info=source_info,
        word_counts=tuple(word_counts),
    )


def rank_word_counts(word_counts: list[WordCount] | tuple[WordCount, ...]) -> list[WordCount]:
    """Sort word counts by descending count, breaking ties alphabetically.

    Examples:
        >>> rank_word_counts([WordCount("of", 5), WordCount("the", 9), WordCount("and", 5)])
        [WordCount(word='the', count=9), WordCount(word='and', count=5), WordCount(word='of', count=5)]
    """
    return sorted(word_counts, key=lambda wc: (-wc.count, wc.word))


def percent_difference(actual: float, expected: float) -> float:
    """Difference between actual and expected as a percentage of actual.

    Returns 0.0 when actual is not positive.
    """
    if actual <= 0:
        return 0.0
    return (actual - expected) / actual * 100


def analyze(
    analysis_id: str,
    source_info: SourceInfo,
    word_counts: list[WordCount] | tuple[WordCount, ...],
    top_n: int = TOP_N_WORDS,
) -> AnalysisResult | AnalysisFailure:
    """Measure how closely a set of word counts follows Zipf's Law.

    Words are ranked by descending count (ties broken alphabetically), and a
    straight line is fitted by least squares to log10(count) against
    log10(rank). Each ranked word is then compared with two predictions:

    - the ideal Zipf frequency, count of the rank 1 word divided by rank
    - the fitted frequency, 10 ** (slope * log10(rank) + intercept)

    Words with a non-positive count have no logarithm. They are left out of
    the ranked points and the fit, but kept in the raw word counts and may
    still appear among the top words.

    Args:
        analysis_id: Identifier of the analysis
        source_info: Metadata about the source of the counts
        word_counts: One entry per unique word, duplicates already merged
        top_n: Number of most frequent words to keep for summaries

    Returns:
        An AnalysisResult, or an AnalysisFailure when there are no word
        counts, fewer than two words with a positive count, or counts too
        large to represent as floats.

    Example:
        >>> counts = [WordCount("the", 100), WordCount("of", 50), WordCount("and", 33)]
        >>> result = analyze("doc", SourceInfo("doc.txt", "text/plain", 0), counts)
        >>> [p.ideal_frequency for p in result.ranked_points][:2]
        [100.0, 50.0]
    """
    if not word_counts:
        logger.warning(f"Analysis {analysis_id} failed: {NO_DATA}")
        return AnalysisFailure(id=analysis_id, reason=NO_DATA)

    ranked = rank_word_counts(word_counts)

    # (rank, word count) pairs that can be placed on a log-log scale
    usable = [
        (rank, word_count)
        for rank, word_count in enumerate(ranked, start=1)
        if word_count.count > 0 and rank > 0
    ]

    if len(usable) < 2:
        logger.warning(f"Analysis {analysis_id} failed: {INSUFFICIENT_DATA} ({len(usable)} usable words)")
        return AnalysisFailure(id=analysis_id, reason=INSUFFICIENT_DATA)

    log_ranks = [math.log10(rank) for rank, _ in usable]
    log_frequencies = [math.log10(word_count.count) for _, word_count in usable]

    fit = linear_regression(log_ranks, log_frequencies)
    if fit is None:
        return AnalysisFailure(id=analysis_id, reason=INSUFFICIENT_DATA)

    max_frequency = ranked[0].count

    ranked_points = []
    try:
        for (rank, word_count), log_rank, log_frequency in zip(usable, log_ranks, log_frequencies):
            ideal_frequency = max_frequency / rank
            fitted_frequency = 10 ** (fit.slope * log_rank + fit.intercept)

            ranked_points.append(
                RankedPoint(
                    rank=rank,
                    word=word_count.word,
                    actual_frequency=word_count.count,
                    log_rank=log_rank,
                    log_frequency=log_frequency,
                    ideal_frequency=ideal_frequency,
                    fitted_frequency=fitted_frequency,
                    percent_divergence_from_ideal=percent_difference(word_count.count, ideal_frequency),
                    percent_difference_from_fitted=percent_difference(word_count.count, fitted_frequency),
                )
            )
    # Counts beyond the float range cannot be divided or compared as floats
    except OverflowError as e:
        logger.warning(f"Analysis {analysis_id} failed: {COUNTS_TOO_LARGE} ({e})")
        return AnalysisFailure(id=analysis_id, reason=COUNTS_TOO_LARGE)

    logger.info(
        f"Analysis {analysis_id}: {len(ranked_points)} ranked words, slope={fit.slope:.4f}, "
        f"r_squared={fit.r_squared:.4f}"
    )

    return AnalysisResult(
        id=analysis_id,
        source_info=source_info,
        raw_word_counts=tuple(word_counts),
        ranked_points=tuple(ranked_points),
        fit_metrics=FitMetrics(
            slope=fit.slope,
            intercept=fit.intercept,
            r_squared=fit.r_squared,
        ),
        top_words=tuple(ranked[: max(top_n, 0)]),
    )
