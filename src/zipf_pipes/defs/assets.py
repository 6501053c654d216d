import json
from pathlib import Path

import dagster as dg
from pydantic import Field

from zipf_pipes.config import ANALYSIS_DIR, EXPORTS_DIR, TOP_N_WORDS
from zipf_pipes.defs.resources import DocumentStore
from zipf_pipes.export import EXPORTERS, result_from_dict
from zipf_pipes.models import AnalysisFailure, AnalysisResult, LoadedDocument
from zipf_pipes.transform import analyze

# Partition Definitions
document_partitions = dg.DynamicPartitionsDefinition(name="documents")


def _stored_results() -> list[tuple[str, AnalysisResult]]:
    """Load every analysis result stored by the analysis I/O manager."""
    results = []
    for analysis_file in sorted(ANALYSIS_DIR.glob("*.json")):
        data = json.loads(analysis_file.read_text(encoding="utf-8"))
        results.append((analysis_file.stem, result_from_dict(data)))
    return results


# ==============================================================================
# Documents Domain: Files dropped in the documents directory
# ==============================================================================


@dg.asset
def documents(context: dg.AssetExecutionContext, document_store: DocumentStore) -> list[str]:
    """Discover all documents waiting in the documents directory.

    Every supported file (.docx, .doc, .xlsx, .txt) becomes a partition of
    the downstream assets, named after the file.
    """
    names = document_store.list_documents()
    context.log.info(f"Found {len(names)} documents in {document_store.documents_dir}")

    current_partitions = set(context.instance.get_dynamic_partitions("documents"))
    new_partitions = [name for name in names if name not in current_partitions]

    if new_partitions:
        context.instance.add_dynamic_partitions("documents", new_partitions)
        context.log.info(f"Added {len(new_partitions)} new documents: {new_partitions}")

    return names


@dg.asset_check(asset=documents)
def documents_found(
    _: dg.AssetCheckExecutionContext, documents: list[str]
) -> dg.AssetCheckResult:
    """Check that there is at least one document to analyze."""
    count = len(documents)
    passed = count > 0

    return dg.AssetCheckResult(
        passed=passed,
        description=f"Found {count} documents"
        if passed
        else "No supported documents found, add files to the documents directory",
        metadata={"count": count},
    )


@dg.asset(
    partitions_def=document_partitions,
    deps=[dg.AssetDep("documents")],
)
def document_word_counts(
    context: dg.AssetExecutionContext, document_store: DocumentStore
) -> LoadedDocument:
    """Read a single document and count its words.

    Text documents are tokenized and aggregated into unique lowercase words.
    Spreadsheets already hold (word, frequency) pairs and are used as they are.
    """
    name = context.partition_key
    context.log.info(f"Reading {name}")

    document = document_store.read_document(name)
    info = document.source_info

    context.log.info(
        f"{name}: {info.word_count} words, {info.unique_word_count} unique"
    )
    context.add_output_metadata(
        {
            "word_count": info.word_count,
            "unique_word_count": info.unique_word_count,
            "size": info.size,
        }
    )

    return document


# ==============================================================================
# Analysis Domain: Zipf's Law fit per document
# ==============================================================================


class ZipfConfig(dg.Config):
    """Configuration for the Zipf analysis."""

    top_n: int = Field(
        default=TOP_N_WORDS,
        ge=0,
        description="Number of most frequent words to keep for summaries",
    )


@dg.asset(
    partitions_def=document_partitions,
    io_manager_key="analysis_json_io",
)
def zipf_analysis(
    context: dg.AssetExecutionContext,
    config: ZipfConfig,
    document_word_counts: LoadedDocument,
) -> AnalysisResult:
    """Rank the words of a document and fit a power law to them.

    Stored as {document}.json in the XDG data directory. Fails the run with
    a readable message when the document has too few words to fit a line.
    """
    name = context.partition_key
    context.log.info(
        f"Analyzing {len(document_word_counts.word_counts)} words from {name} (top_n={config.top_n})"
    )

    result = analyze(
        document_word_counts.id,
        document_word_counts.source_info,
        document_word_counts.word_counts,
        top_n=config.top_n,
    )

    if isinstance(result, AnalysisFailure):
        raise dg.Failure(
            description=f"Could not analyze {name}: {result.reason}",
            metadata={"reason": result.reason},
        )

    metrics = result.fit_metrics
    context.log.info(
        f"Fitted slope {metrics.slope:.4f}, intercept {metrics.intercept:.4f}, "
        f"R² {metrics.r_squared:.4f}"
    )

    if result.top_words:
        context.log.info(
            f"Top 5 words: {[(wc.word, wc.count) for wc in result.top_words[:5]]}"
        )

    context.add_output_metadata(
        {
            "slope": metrics.slope,
            "intercept": metrics.intercept,
            "r_squared": metrics.r_squared,
            "ranked_words": len(result.ranked_points),
        }
    )

    return result


@dg.asset_check(asset=zipf_analysis)
def analysis_ranks_contiguous(_: dg.AssetCheckExecutionContext) -> dg.AssetCheckResult:
    """Check that stored analyses rank words 1..n by descending frequency."""
    invalid = []
    results = _stored_results()

    for name, result in results:
        ranks = [point.rank for point in result.ranked_points]
        frequencies = [point.actual_frequency for point in result.ranked_points]

        if ranks != list(range(1, len(ranks) + 1)):
            invalid.append(f"{name}: ranks not contiguous")
        elif any(a < b for a, b in zip(frequencies, frequencies[1:])):
            invalid.append(f"{name}: frequencies not descending")

    passed = len(invalid) == 0

    return dg.AssetCheckResult(
        passed=passed,
        description=f"All {len(results)} analyses have contiguous ranks"
        if passed
        else "; ".join(invalid),
        metadata={"total_analyses": len(results), "invalid_count": len(invalid)},
    )


@dg.asset_check(asset=zipf_analysis)
def analysis_ideal_anchored(_: dg.AssetCheckExecutionContext) -> dg.AssetCheckResult:
    """Check that the ideal curve of every stored analysis starts at the top word.

    The ideal frequency at rank 1 must equal the observed frequency of the
    most frequent word.
    """
    invalid = []
    results = _stored_results()

    for name, result in results:
        if not result.ranked_points:
            invalid.append(name)
            continue

        top = result.ranked_points[0]
        if top.ideal_frequency != top.actual_frequency:
            invalid.append(name)

    passed = len(invalid) == 0

    return dg.AssetCheckResult(
        passed=passed,
        description=f"All {len(results)} analyses are anchored to their top word"
        if passed
        else f"{len(invalid)} analyses not anchored: {invalid}",
        metadata={"total_analyses": len(results), "invalid": invalid},
    )


# ==============================================================================
# Export Domain: Tables for use in other tools
# ==============================================================================


class ExportConfig(dg.Config):
    """Configuration for exporting analysis tables."""

    output_dir: str = Field(
        default=str(EXPORTS_DIR),
        description="Directory to write exported tables to",
    )
    formats: list[str] = Field(
        default=["csv", "xlsx"],
        description="Export formats to write, any of 'csv' and 'xlsx'",
    )


@dg.asset(partitions_def=document_partitions)
def zipf_export(
    context: dg.AssetExecutionContext,
    config: ExportConfig,
    zipf_analysis: AnalysisResult,
) -> None:
    """Export the ranked points of an analysis as CSV and Excel tables.

    Files are written as {document}_analysis.{format} in the exports directory.
    """
    name = context.partition_key

    unknown = [fmt for fmt in config.formats if fmt not in EXPORTERS]
    if unknown:
        raise ValueError(
            f"Unknown export formats {unknown}, expected any of {sorted(EXPORTERS)}"
        )

    paths = []
    for fmt in config.formats:
        path = Path(config.output_dir) / f"{name}_analysis.{fmt}"
        EXPORTERS[fmt](zipf_analysis, path)
        context.log.info(f"Exported {name} as {fmt} to {path}")
        paths.append(str(path))

    context.add_output_metadata({"paths": paths})
