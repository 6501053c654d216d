"""Unit tests for the document and spreadsheet readers."""

import io
import logging
import zipfile

import pandas as pd
import pytest

from zipf_pipes.extract import (
    extract_docx_text,
    extract_plain_text,
    infer_columns,
    parse_count,
    read_source,
    read_word_table,
    resolve_reader,
)
from zipf_pipes.models import WordCount

DOCUMENT_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
<w:body>
<w:p><w:r><w:t>The cat</w:t></w:r><w:r><w:t xml:space="preserve"> sat.</w:t></w:r></w:p>
<w:p><w:r><w:t>The</w:t><w:tab/><w:t>CAT</w:t></w:r></w:p>
</w:body>
</w:document>
"""


def make_docx(document_xml: str = DOCUMENT_XML) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr("word/document.xml", document_xml)
    return buffer.getvalue()


def make_xlsx(frame: pd.DataFrame, header: bool = True) -> bytes:
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False, header=header)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Text readers


def test_extract_docx_text_joins_runs_per_paragraph() -> None:
    assert extract_docx_text(make_docx()) == "The cat sat.\n\nThe\tCAT"


def test_extract_docx_text_rejects_non_archive() -> None:
    with pytest.raises(ValueError, match="archive"):
        extract_docx_text(b"plain bytes")


def test_extract_docx_text_requires_document_part() -> None:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("other.xml", "<x/>")

    with pytest.raises(ValueError, match="word/document.xml"):
        extract_docx_text(buffer.getvalue())


def test_extract_plain_text() -> None:
    assert extract_plain_text("Ærø".encode("utf-8")) == "Ærø"
    with pytest.raises(ValueError, match="UTF-8"):
        extract_plain_text(b"\xff\xfe")


# ---------------------------------------------------------------------------
# Column inference


def test_infer_columns_from_headers() -> None:
    rows = [["Rank", "Frequency", "Term"], [1, 10, "the"]]
    assert infer_columns(rows) == (2, 1)


def test_infer_columns_from_data_types() -> None:
    rows = [["a", "b", "c"], [1, "the", "10"], [2, "of", "7"], [3, None, 4]]
    # Column 0 is numeric too, and comes first
    assert infer_columns(rows) == (1, 0)


def test_infer_columns_combines_header_and_data() -> None:
    rows = [["Word", "n"], ["the", 10], ["of", 7]]
    assert infer_columns(rows) == (0, 1)


def test_infer_columns_fails_when_ambiguous() -> None:
    rows = [["a", "b"], ["x", "y"], ["z", "w"]]
    with pytest.raises(ValueError, match="infer word and frequency columns"):
        infer_columns(rows)


def test_parse_count() -> None:
    assert parse_count(12) == 12
    assert parse_count(12.7) == 12
    assert parse_count("7") == 7
    assert parse_count("3.9") == 3
    assert parse_count("abc") is None
    assert parse_count(None) is None
    assert parse_count(float("nan")) is None
    assert parse_count(True) is None


# ---------------------------------------------------------------------------
# Spreadsheet reader


def test_read_word_table_with_headers() -> None:
    frame = pd.DataFrame(
        {
            "Word": ["the", " of ", "and", "to", "a", None],
            "Frequency": [10, "7", -3, "abc", None, 4],
        }
    )

    assert read_word_table(make_xlsx(frame)) == [WordCount("the", 10), WordCount("of", 7)]


def test_read_word_table_infers_columns_without_headers() -> None:
    frame = pd.DataFrame({"a": ["header", "the", "of"], "b": ["row", 12, 9]})

    assert read_word_table(make_xlsx(frame, header=False)) == [
        WordCount("the", 12),
        WordCount("of", 9),
    ]


def test_read_word_table_needs_data_rows() -> None:
    frame = pd.DataFrame({"Word": [], "Count": []})
    with pytest.raises(ValueError, match="insufficient data"):
        read_word_table(make_xlsx(frame))


def test_read_word_table_needs_valid_pairs() -> None:
    frame = pd.DataFrame({"Word": ["the", "of"], "Count": [0, -1]})
    with pytest.raises(ValueError, match="No valid word-frequency pairs"):
        read_word_table(make_xlsx(frame))


def test_read_word_table_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        read_word_table(b"not a spreadsheet")


def test_read_source_reads_xls_workbooks() -> None:
    frame = pd.DataFrame({"Word": ["the", "of"], "Count": [10, 7]})

    # The workbook format is detected from the content, not the suffix
    assert read_source("counts.xls", make_xlsx(frame)) == [WordCount("the", 10), WordCount("of", 7)]


def test_read_source_rejects_unreadable_xls() -> None:
    with pytest.raises(ValueError, match="Could not read spreadsheet"):
        read_source("counts.xls", b"not a spreadsheet")


# ---------------------------------------------------------------------------
# Reader selection


def test_resolve_reader_is_case_insensitive() -> None:
    assert resolve_reader("Essay.DOCX") == (".docx", False)
    assert resolve_reader("counts.xlsx") == (".xlsx", False)
    assert resolve_reader("legacy.XLS") == (".xls", False)
    assert resolve_reader("notes.txt") == (".txt", False)


def test_resolve_reader_falls_back_for_doc(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="zipf_pipes.extract"):
        assert resolve_reader("old.doc") == (".docx", True)

    assert "No dedicated reader for .doc files" in caplog.text


def test_resolve_reader_rejects_unknown_types() -> None:
    with pytest.raises(ValueError, match="Unsupported file type '.pdf'"):
        resolve_reader("paper.pdf")


def test_read_source_reads_doc_saved_as_docx() -> None:
    assert read_source("renamed.doc", make_docx()) == "The cat sat.\n\nThe\tCAT"


def test_read_source_reports_legacy_doc_failure() -> None:
    with pytest.raises(ValueError, match="Legacy .doc files are not fully supported"):
        read_source("legacy.doc", b"\xd0\xcf\x11\xe0 binary word file")


def test_read_source_rejects_empty_files() -> None:
    with pytest.raises(ValueError, match="empty"):
        read_source("empty.txt", b"")
