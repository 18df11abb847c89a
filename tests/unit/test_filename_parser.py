"""Unit tests for filename classification."""

from __future__ import annotations

import pytest

from src.models.documents import DocumentType
from src.services.ingestion.filename_parser import (
    detect_document_type,
    extract_grantee_name,
    extract_reference_number,
    parse_filename,
)


class TestExtractReferenceNumber:
    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("2024010B_Acme Org_Grant Description.pdf", "2024010B"),
            ("2025067_GranteeName_Survey.docx", "2025067"),
            ("Acme 2023005A closeout.docx", "2023005A"),
            ("report-2039999.pdf", "2039999"),
            ("2025001_Org_Annual_Impact_Report.pdf", "2025001"),
        ],
    )
    def test_finds_reference_number(self, filename: str, expected: str) -> None:
        assert extract_reference_number(filename) == expected

    def test_rejects_numbers_embedded_in_longer_digit_runs(self) -> None:
        assert extract_reference_number("12024010B notes.pdf") is None
        assert extract_reference_number("202401012.pdf") is None

    def test_rejects_out_of_range_decades(self) -> None:
        assert extract_reference_number("2019001_Acme.pdf") is None
        assert extract_reference_number("2040001_Acme.pdf") is None

    def test_first_match_wins(self) -> None:
        assert extract_reference_number("2024001A and 2024002B.pdf") == "2024001A"

    def test_no_reference_number(self) -> None:
        assert extract_reference_number("Acme Org Grant Description.pdf") is None


class TestDetectDocumentType:
    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("Acme Grant Description.pdf", DocumentType.GRANT_DESCRIPTION),
            ("Acme Grant Proposal v2.docx", DocumentType.GRANT_DESCRIPTION),
            ("Acme Project Description.docx", DocumentType.GRANT_DESCRIPTION),
            ("Acme Midpoint Transcript.docx", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
            ("Acme_MidCheckInTranscript_2025.docx", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
            ("Acme Midpoint Survey.pdf", DocumentType.MIDPOINT_SURVEY),
            ("Acme Mid-year survey.pdf", DocumentType.MIDPOINT_SURVEY),
            ("Acme Impact Survey 2024.pdf", DocumentType.IMPACT_SURVEY),
            ("Acme Annual Report.pdf", DocumentType.IMPACT_SURVEY),
            ("Acme Closeout Transcript.docx", DocumentType.CLOSEOUT_TRANSCRIPT),
            ("Acme close out call.docx", DocumentType.CLOSEOUT_TRANSCRIPT),
            ("Acme check-in notes.docx", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
            ("Acme call transcript.txt", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
            ("Acme survey.pdf", DocumentType.IMPACT_SURVEY),
            ("2025001_Org_Annual_Impact_Report.pdf", DocumentType.IMPACT_SURVEY),
            ("Org Impact Report survey.pdf", DocumentType.IMPACT_SURVEY),
        ],
    )
    def test_detects_type(self, filename: str, expected: DocumentType) -> None:
        assert detect_document_type(filename) == expected

    def test_is_case_insensitive(self) -> None:
        assert detect_document_type("ACME GRANT DESCRIPTION.PDF") == DocumentType.GRANT_DESCRIPTION

    def test_more_specific_pattern_wins(self) -> None:
        # "midpoint survey" must not fall through to the bare "survey" rule.
        assert detect_document_type("midpoint survey.pdf") == DocumentType.MIDPOINT_SURVEY
        # A closeout transcript mentions "transcript" but is not a check-in.
        assert detect_document_type("closeout transcript.pdf") == DocumentType.CLOSEOUT_TRANSCRIPT

    def test_unknown_type(self) -> None:
        assert detect_document_type("budget.xlsx") is None


class TestExtractGranteeName:
    def test_strips_reference_keywords_and_extension(self) -> None:
        name = extract_grantee_name("2024010B_Acme Org_Grant Description.pdf", "2024010B")
        assert name == "Acme Org"

    def test_strips_years(self) -> None:
        assert extract_grantee_name("Acme Org_Impact Report_2024.pdf", None) == "Acme Org"

    def test_collapses_separators(self) -> None:
        assert extract_grantee_name("Bright--Futures__Alliance survey.pdf", None) == (
            "Bright Futures Alliance"
        )

    def test_short_remainder_is_none(self) -> None:
        assert extract_grantee_name("2024010B Grant Description.pdf", "2024010B") is None
        assert extract_grantee_name("AB survey.pdf", None) is None


class TestParseFilename:
    def test_full_parse(self) -> None:
        parsed = parse_filename("2024010B Acme Org Grant Description.pdf")
        assert parsed.reference_number == "2024010B"
        assert parsed.document_type == DocumentType.GRANT_DESCRIPTION
        assert parsed.grantee_name == "Acme Org"

    def test_nothing_recognised(self) -> None:
        parsed = parse_filename("x.pdf")
        assert parsed.reference_number is None
        assert parsed.document_type is None
        assert parsed.grantee_name is None

    def test_never_raises_on_odd_input(self) -> None:
        parsed = parse_filename("")
        assert parsed.reference_number is None
