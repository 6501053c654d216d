import io
import logging
import math
import numbers
import re
import warnings
import zipfile
from pathlib import Path
from typing import Any, Callable

import pandas as pd
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from zipf_pipes.models import WordCount

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MEDIA_TYPE = "application/msword"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MEDIA_TYPE = "application/vnd.ms-excel"
TEXT_MEDIA_TYPE = "text/plain"

# File suffixes we know how to read, with the media type reported for them
ACCEPTED_FILE_TYPES = {
    ".docx": DOCX_MEDIA_TYPE,
    ".doc": DOC_MEDIA_TYPE,
    ".xlsx": XLSX_MEDIA_TYPE,
    ".xls": XLS_MEDIA_TYPE,
    ".txt": TEXT_MEDIA_TYPE,
}

# Header fragments used to locate the word and frequency columns of a table
WORD_HEADERS = ("word", "term")
FREQUENCY_HEADERS = ("freq", "count")

# Number of data rows sampled when inferring column types from content
SAMPLE_ROWS = 5

NUMBER_PATTERN = re.compile(r"^\d+(\.\d+)?$")
LEADING_INTEGER_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def extract_docx_text(content: bytes) -> str:
    """Extract the raw text of a Word (.docx) document.

    The document body lives in `word/document.xml` inside the zip archive.
    Every `<w:p>` paragraph becomes one block of text, built from its `<w:t>`
    runs, with `<w:tab>` and `<w:br>` kept as tab and newline.

    Returns:
        The paragraphs of the document separated by blank lines.

    Raises:
        ValueError: If the content is not a readable .docx archive.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            document_xml = archive.read("word/document.xml")
    except zipfile.BadZipFile as e:
        raise ValueError(f"Could not open document archive: {e}") from e
    except KeyError as e:
        raise ValueError("Document archive has no word/document.xml") from e

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(document_xml, "html.parser")

    paragraphs: list[str] = []
    for paragraph in soup.find_all("w:p"):
        parts: list[str] = []
        for node in paragraph.find_all(["w:t", "w:tab", "w:br"]):
            if node.name == "w:t":
                parts.append(node.get_text())
            elif node.name == "w:tab":
                parts.append("\t")
            else:
                parts.append("\n")
        paragraphs.append("".join(parts))

    logger.info(f"Extracted {len(paragraphs)} paragraphs from document")
    return "\n\n".join(paragraphs)


def extract_plain_text(content: bytes) -> str:
    """Decode a plain text document.

    Raises:
        ValueError: If the content is not valid UTF-8.
    """
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"File is not valid UTF-8 text: {e}") from e


def classify_cell(value: Any) -> str:
    """Classify a spreadsheet cell as 'empty', 'number', 'string' or 'mixed'.

    Strings made only of digits (e.g., "12" or "3.5") count as numbers, since
    spreadsheets exported from other tools often store counts as text.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "empty"
    if isinstance(value, bool):
        return "mixed"
    if isinstance(value, numbers.Real):
        return "number"
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return "empty"
        if NUMBER_PATTERN.match(stripped):
            return "number"
        return "string"
    return "mixed"


def infer_columns(rows: list[list[Any]]) -> tuple[int, int]:
    """Locate the word and frequency columns of a table.

    Header names are tried first: the first column whose header contains
    "word" or "term" holds the words, the first containing "freq" or "count"
    holds the frequencies. If either is still missing, up to SAMPLE_ROWS data
    rows are scanned, and the first column holding only text (or blanks) and
    the first holding only numbers (or blanks) are picked.

    Args:
        rows: The table, with the header as the first row

    Returns:
        Tuple of (word column index, frequency column index)

    Raises:
        ValueError: If the columns cannot be identified with confidence.

    Examples:
        >>> infer_columns([["Term", "Count"], ["the", 10]])
        (0, 1)
        >>> infer_columns([[None, None], [5, "the"], [3, "of"]])
        (1, 0)
    """
    header = rows[0] if rows else []
    width = max((len(row) for row in rows), default=0)

    word_col = -1
    freq_col = -1

    for i, name in enumerate(header):
        name = str(name).lower() if classify_cell(name) != "empty" else ""
        if word_col == -1 and any(part in name for part in WORD_HEADERS):
            word_col = i
        if freq_col == -1 and any(part in name for part in FREQUENCY_HEADERS):
            freq_col = i

    if word_col == -1 or freq_col == -1:
        sample = rows[1 : SAMPLE_ROWS + 1]

        for i in range(width):
            types = [classify_cell(row[i] if i < len(row) else None) for row in sample]

            if (
                word_col == -1
                and all(t in ("string", "empty") for t in types)
                and "string" in types
            ):
                word_col = i
            if (
                freq_col == -1
                and all(t in ("number", "empty") for t in types)
                and "number" in types
            ):
                freq_col = i

    if word_col == -1 or freq_col == -1 or word_col == freq_col:
        raise ValueError(
            "Could not reliably infer word and frequency columns. Please ensure "
            "the first sheet has clear 'word' (text) and 'frequency' (number) columns."
        )

    return word_col, freq_col


def parse_count(value: Any) -> int | None:
    """Parse a frequency cell into an integer, or None if it is not a number.

    Fractional values are truncated, matching how "12.7" reads as 12.
    """
    kind = classify_cell(value)
    if kind == "empty" or kind == "mixed":
        return None
    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            return None
        return int(value)

    match = LEADING_INTEGER_PATTERN.match(str(value))
    return int(match.group(1)) if match else None


def read_word_table(content: bytes) -> list[WordCount]:
    """Read (word, frequency) pairs from the first sheet of a workbook.

    pandas detects the format from the content: openpyxl reads .xlsx and
    xlrd reads legacy .xls workbooks.

    Rows with a blank word, or a frequency that is missing, unparsable or not
    positive, are skipped.

    Returns:
        List of WordCount objects in sheet order.

    Raises:
        ValueError: If the workbook cannot be read, has fewer than two rows,
            the columns cannot be inferred, or no valid pairs are found.
    """
    try:
        frame = pd.read_excel(
            io.BytesIO(content), sheet_name=0, header=None, dtype=object
        )
    except (ValueError, OSError, zipfile.BadZipFile) as e:
        raise ValueError(f"Could not read spreadsheet: {e}") from e

    rows = frame.astype(object).where(frame.notna(), None).values.tolist()

    # Need at least a header and one row of data
    if len(rows) < 2:
        raise ValueError("Spreadsheet has insufficient data (less than 2 rows).")

    word_col, freq_col = infer_columns(rows)
    logger.info(f"Using column {word_col} for words and {freq_col} for frequencies")

    word_counts: list[WordCount] = []
    skipped = 0

    for row in rows[1:]:
        raw_word = row[word_col] if word_col < len(row) else None
        word = str(raw_word).strip() if classify_cell(raw_word) != "empty" else ""
        count = parse_count(row[freq_col] if freq_col < len(row) else None)

        if not word or count is None or count <= 0:
            skipped += 1
            continue

        word_counts.append(WordCount(word=word, count=count))

    if skipped:
        logger.warning(f"Skipped {skipped} rows without a word and a positive frequency")

    if not word_counts:
        raise ValueError("No valid word-frequency pairs found in the spreadsheet.")

    logger.info(f"Read {len(word_counts)} word-frequency pairs from spreadsheet")
    return word_counts


# Readers for each supported suffix. Text readers feed the tokenizer, table
# readers produce word counts directly.
TEXT_READERS: dict[str, Callable[[bytes], str]] = {
    ".docx": extract_docx_text,
    ".txt": extract_plain_text,
}

TABLE_READERS: dict[str, Callable[[bytes], list[WordCount]]] = {
    ".xlsx": read_word_table,
    ".xls": read_word_table,
}

# Formats without a dedicated reader, and the reader we try in their place
FALLBACK_READERS = {
    ".doc": ".docx",
}


def resolve_reader(name: str) -> tuple[str, bool]:
    """Decide which reader to use for a file, based on its suffix.

    Args:
        name: File name of the source

    Returns:
        Tuple of (reader suffix, whether this is a fallback reader)

    Raises:
        ValueError: If no reader can handle the file type.

    Examples:
        >>> resolve_reader("essay.DOCX")
        ('.docx', False)
        >>> resolve_reader("old.doc")
        ('.docx', True)
    """
    suffix = Path(name).suffix.lower()

    if suffix in TEXT_READERS or suffix in TABLE_READERS:
        return suffix, False

    if substitute := FALLBACK_READERS.get(suffix):
        logger.warning(
            f"No dedicated reader for {suffix} files, trying the {substitute} "
            f"reader for {name}. Results may be incomplete."
        )
        return substitute, True

    supported = ", ".join(sorted(ACCEPTED_FILE_TYPES))
    raise ValueError(f"Unsupported file type '{suffix}' for {name} (supported: {supported})")


def read_source(name: str, content: bytes) -> str | list[WordCount]:
    """Read a source document into text or into word counts.

    Returns:
        The extracted text for documents, or a list of WordCount objects for
        spreadsheets, which arrive already aggregated.

    Raises:
        ValueError: If the file type is unsupported or the content unreadable.
    """
    if not content:
        raise ValueError(f"{name} is empty")

    suffix, fallback = resolve_reader(name)

    if suffix in TABLE_READERS:
        return TABLE_READERS[suffix](content)

    try:
        return TEXT_READERS[suffix](content)
    except ValueError as e:
        if fallback:
            requested = Path(name).suffix.lower()
            raise ValueError(
                f"Could not read {name} with the {suffix} reader. Legacy {requested} "
                f"files are not fully supported, convert it to {suffix} first: {e}"
            ) from e
        raise


if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.INFO)
    path = Path(sys.argv[1])
    source = read_source(path.name, path.read_bytes())
    if isinstance(source, str):
        print(source)
    else:
        for word_count in source:
            print(f"{word_count.word}\t{word_count.count}")
