"""Unit tests for the deterministic segmentation strategies and the dispatcher."""

from __future__ import annotations

import pytest

from src.models.documents import (
    ChunkMetadata,
    DocumentType,
    DriveFile,
    ExtractedDocument,
    SectionType,
)
from src.services.ingestion.segmenters.base import (
    SizeSegmenter,
    accumulate_paragraphs,
    new_chunk_uid,
    split_paragraphs,
)
from src.services.ingestion.segmenters.dispatch import DocumentSegmenter
from src.services.ingestion.segmenters.grant_description import (
    GrantDescriptionSegmenter,
    classify_heading,
    clean_heading,
    is_heading,
)
from src.services.ingestion.segmenters.llm_transcript import LLMTranscriptSegmenter
from src.services.ingestion.segmenters.surveys import (
    ImpactSurveySegmenter,
    MidpointSurveySegmenter,
    classify_question,
    split_by_questions,
)
from src.services.ingestion.segmenters.transcripts import ParagraphTranscriptSegmenter


def _make_doc(text: str, document_type: DocumentType = DocumentType.GRANT_DESCRIPTION) -> ExtractedDocument:
    return ExtractedDocument(
        file=DriveFile(id="f1", name="doc.pdf", mime_type="application/pdf", modified_time="t1"),
        text=text,
        document_type=document_type,
    )


def _paragraph(length: int, char: str = "a") -> str:
    return char * length


# ======================================================================
# Paragraph accumulation
# ======================================================================


class TestParagraphs:
    def test_split_paragraphs_drops_blank_and_short(self) -> None:
        text = "First paragraph here.\n\n\n\nok\n\n   \n\nSecond paragraph here."
        assert split_paragraphs(text) == ["First paragraph here.", "ok", "Second paragraph here."]
        assert split_paragraphs(text, min_length=5) == [
            "First paragraph here.",
            "Second paragraph here.",
        ]

    def test_accumulate_respects_budget_including_separators(self) -> None:
        paragraphs = [_paragraph(40), _paragraph(40), _paragraph(40)]
        blocks = accumulate_paragraphs(paragraphs, budget=82)
        # 40 + 2 + 40 = 82 fits; adding another 2 + 40 does not.
        assert [len(b) for b in blocks] == [82, 40]

    def test_oversize_paragraph_is_its_own_block(self) -> None:
        paragraphs = [_paragraph(10), _paragraph(500, "b"), _paragraph(10, "c")]
        blocks = accumulate_paragraphs(paragraphs, budget=100)
        assert blocks == [_paragraph(10), _paragraph(500, "b"), _paragraph(10, "c")]

    def test_blocks_never_exceed_budget_unless_single_paragraph(self) -> None:
        paragraphs = [_paragraph(n) for n in (300, 700, 200, 1600, 50, 900, 600)]
        for block in accumulate_paragraphs(paragraphs, budget=1500):
            assert len(block) <= 1500 or "\n\n" not in block

    def test_empty(self) -> None:
        assert accumulate_paragraphs([], budget=100) == []


class TestChunkUid:
    def test_format_and_uniqueness(self) -> None:
        uids = {new_chunk_uid() for _ in range(100)}
        assert len(uids) == 100
        assert all(uid.startswith("chunk_") and uid.count("_") == 2 for uid in uids)


# ======================================================================
# Generic strategy
# ======================================================================


class TestSizeSegmenter:
    def test_sections_numbered_and_tagged(self) -> None:
        text = "\n\n".join([_paragraph(900), _paragraph(900, "b")])
        segments = SizeSegmenter(1500).split(text)

        assert [s.heading for s in segments] == ["Section 1", "Section 2"]
        assert all(s.section_type == SectionType.FULL_DOCUMENT for s in segments)

    def test_whitespace_only_yields_nothing(self) -> None:
        assert SizeSegmenter().split("  \n\n  ") == []


# ======================================================================
# Grant descriptions
# ======================================================================


class TestGrantDescriptionHeadings:
    @pytest.mark.parametrize(
        "line",
        ["PROJECT SUMMARY", "# Budget", "## Scope of Work", "2. Timeline", "  BUDGET  "],
    )
    def test_is_heading(self, line: str) -> None:
        assert is_heading(line)

    @pytest.mark.parametrize(
        "line",
        [
            "AB",                       # too short
            "X" * 100,                  # too long
            "This is an ordinary sentence.",
            "2024",                     # capitals test needs at least one letter
            "---",
        ],
    )
    def test_is_not_heading(self, line: str) -> None:
        assert not is_heading(line)

    def test_clean_heading(self) -> None:
        assert clean_heading("## Project Summary") == "Project Summary"
        assert clean_heading("3. Budget") == "Budget"

    @pytest.mark.parametrize(
        "heading, expected",
        [
            ("Executive Summary", SectionType.PROJECT_SUMMARY),
            ("Scope of Work", SectionType.SCOPE_OF_WORK),
            ("Key Partners", SectionType.PARTNERSHIPS),
            ("Technology Approach", SectionType.TECHNOLOGY),
            ("Milestones", SectionType.TIMELINE),
            ("Expected Outcomes", SectionType.OUTCOMES),
            ("Evaluation Plan", SectionType.MEASUREMENT),
            ("Budget", SectionType.BUDGET),
            ("Miscellaneous", SectionType.PROJECT_SUMMARY),
        ],
    )
    def test_classify_heading(self, heading: str, expected: SectionType) -> None:
        assert classify_heading(heading) == expected

    def test_summary_pattern_checked_before_outcomes(self) -> None:
        # "Overview of impact" matches both; the earlier pattern wins.
        assert classify_heading("Overview of impact") == SectionType.PROJECT_SUMMARY


class TestGrantDescriptionSegmenter:
    def test_splits_on_headings(self) -> None:
        text = (
            "# Project Summary\n"
            "Acme Org will train 500 welders across three counties.\n"
            "# Budget\n"
            "The total budget is $250,000 over two years of delivery."
        )
        segments = GrantDescriptionSegmenter().split(text)

        assert [(s.section_type, s.heading) for s in segments] == [
            (SectionType.PROJECT_SUMMARY, "Project Summary"),
            (SectionType.BUDGET, "Budget"),
        ]
        assert segments[0].text == "Acme Org will train 500 welders across three counties."

    def test_short_section_bodies_dropped(self) -> None:
        text = "# Project Summary\nA long enough summary of the project.\n# Budget\ntbd soon\n"
        segments = GrantDescriptionSegmenter().split(text)
        assert [s.heading for s in segments] == ["Project Summary"]

    def test_preamble_before_first_heading_kept(self) -> None:
        text = (
            "Prepared for the review committee in March.\n"
            "# Budget\n"
            "The total budget is $250,000 over two years."
        )
        segments = GrantDescriptionSegmenter().split(text)
        assert segments[0].heading == ""
        assert segments[0].section_type == SectionType.PROJECT_SUMMARY

    def test_no_headings_falls_back_to_size(self) -> None:
        text = "\n\n".join([_paragraph(1200), _paragraph(1200, "b")])
        segments = GrantDescriptionSegmenter().split(text)

        assert [s.heading for s in segments] == ["Section 1", "Section 2"]
        assert all(s.section_type == SectionType.FULL_DOCUMENT for s in segments)

    def test_all_sections_too_short_falls_back(self) -> None:
        text = "# Summary\nshort\n# Budget\ntiny"
        [segment] = GrantDescriptionSegmenter().split(text)
        assert segment.section_type == SectionType.FULL_DOCUMENT
        assert segment.heading == "Section 1"


# ======================================================================
# Surveys
# ======================================================================

_IMPACT_SURVEY = """Q1: How many participants did you reach this year?
We reached 1,200 participants across four sites.

Q2: What challenges did you face?
Hiring instructors was the main obstacle in the first half.

Q3. What are your plans for next year?
Expanding to two new counties with employer partners.
"""


class TestSplitByQuestions:
    def test_splits_on_markers(self) -> None:
        blocks = split_by_questions(_IMPACT_SURVEY)
        assert [b.question for b in blocks] == [
            "Q1: How many participants did you reach this year?",
            "Q2: What challenges did you face?",
            "Q3. What are your plans for next year?",
        ]

    @pytest.mark.parametrize(
        "text",
        [
            "Question 1 Reach\nanswer one\nQuestion 2 Depth\nanswer two",
            "1. Reach\nanswer one\n2) Depth\nanswer two",
            "# Reach\nanswer one\n# Depth\nanswer two",
        ],
    )
    def test_marker_variants(self, text: str) -> None:
        assert len(split_by_questions(text)) == 2

    def test_unbroken_block_uses_prefix_as_question(self) -> None:
        [block] = split_by_questions("Q1: " + "x" * 150)
        assert len(block.question) == 100


class TestImpactSurveySegmenter:
    @pytest.mark.parametrize(
        "question, expected",
        [
            ("How many people did you reach?", SectionType.BREADTH_SCALE),
            ("What outcomes did graduates see?", SectionType.DEPTH_OUTCOMES),
            ("What lessons did you learn?", SectionType.LEARNINGS),
            ("Describe any obstacles.", SectionType.CHALLENGES),
            ("What are your plans?", SectionType.FUTURE_PLANS),
            ("How was your experience with the cohort?", SectionType.FEEDBACK),
            ("Describe co-investment secured.", SectionType.FINANCIAL),
            ("Anything else?", SectionType.DEPTH_OUTCOMES),
        ],
    )
    def test_classify_question(self, question: str, expected: SectionType) -> None:
        assert classify_question(question) == expected

    def test_blocks_tagged_by_question(self) -> None:
        segments = ImpactSurveySegmenter().split(_IMPACT_SURVEY)
        assert [s.section_type for s in segments] == [
            SectionType.BREADTH_SCALE,
            SectionType.CHALLENGES,
            SectionType.FUTURE_PLANS,
        ]

    def test_heading_truncated(self) -> None:
        text = "Q1: " + "How many " * 40 + "\nanswer text long enough\nQ2: Other\nmore answer text here"
        segments = ImpactSurveySegmenter().split(text)
        assert len(segments[0].heading) == 200

    def test_single_block_falls_back(self) -> None:
        segments = ImpactSurveySegmenter().split("Free-form narrative without any questions at all.")
        assert [s.section_type for s in segments] == [SectionType.FULL_DOCUMENT]


class TestMidpointSurveySegmenter:
    def test_positional_tags(self) -> None:
        text = (
            "1. What stage is the project in?\nPilot stage.\n"
            "2. What progress have you made?\nTwo cohorts graduated.\n"
            "3. Any early signals?\nEmployers are hiring graduates.\n"
            "4. Challenges?\nTransport for rural participants.\n"
            "5. Anything else?\nNo.\n"
        )
        segments = MidpointSurveySegmenter().split(text)
        assert [s.section_type for s in segments] == [
            SectionType.STAGE,
            SectionType.PROGRESS,
            SectionType.EARLY_SIGNALS,
            SectionType.CHALLENGES,
            SectionType.FULL_DOCUMENT,
        ]

    def test_unstructured_survey_is_one_segment(self) -> None:
        text = "We are mid-way through the grant and things are going well overall."
        [segment] = MidpointSurveySegmenter().split(text)
        assert segment.heading == "Midpoint Survey"
        assert segment.section_type == SectionType.FULL_DOCUMENT
        assert segment.text == text

    def test_too_many_questions_is_one_segment(self) -> None:
        text = "\n".join(f"{i}. Question {i}\nAnswer {i}" for i in range(1, 9))
        segments = MidpointSurveySegmenter().split(text)
        assert len(segments) == 1


# ======================================================================
# Transcripts
# ======================================================================


class TestParagraphTranscriptSegmenter:
    def test_groups_and_tags_progress(self) -> None:
        paragraphs = [f"Speaker {i}: " + "words " * 60 for i in range(10)]
        segments = ParagraphTranscriptSegmenter(1500).split("\n\n".join(paragraphs))

        assert len(segments) > 1
        assert all(s.section_type == SectionType.PROGRESS for s in segments)
        assert segments[0].heading == "Transcript segment 1"
        assert all(len(s.text) <= 1500 for s in segments)

    def test_short_lines_dropped(self) -> None:
        text = "Thanks!\n\nDana: The cohort finished ahead of schedule this spring.\n\nBye."
        [segment] = ParagraphTranscriptSegmenter().split(text)
        assert segment.text == "Dana: The cohort finished ahead of schedule this spring."

    def test_only_short_lines_keeps_whole_text(self) -> None:
        segments = ParagraphTranscriptSegmenter().split("Hi.\n\nHello.\n\nBye.")
        assert len(segments) == 1


# ======================================================================
# Dispatcher
# ======================================================================


class TestDocumentSegmenter:
    @pytest.fixture()
    def base_metadata(self) -> ChunkMetadata:
        return ChunkMetadata(
            document_type=DocumentType.GRANT_DESCRIPTION,
            reference_number="2024010B",
            grantee_name="Acme Org",
            source_file="doc.pdf",
        )

    @pytest.mark.parametrize(
        "document_type, strategy",
        [
            (DocumentType.GRANT_DESCRIPTION, GrantDescriptionSegmenter),
            (DocumentType.IMPACT_SURVEY, ImpactSurveySegmenter),
            (DocumentType.MIDPOINT_SURVEY, MidpointSurveySegmenter),
            (DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT, ParagraphTranscriptSegmenter),
            (DocumentType.CLOSEOUT_TRANSCRIPT, ParagraphTranscriptSegmenter),
        ],
    )
    def test_strategy_for_type(self, document_type, strategy) -> None:
        assert isinstance(DocumentSegmenter().strategy_for(document_type), strategy)

    def test_llm_strategy_only_when_enabled(self, mock_llm_provider) -> None:
        llm = LLMTranscriptSegmenter(mock_llm_provider, fallback=ParagraphTranscriptSegmenter())
        segmenter = DocumentSegmenter(llm)

        assert segmenter.strategy_for(DocumentType.CLOSEOUT_TRANSCRIPT, use_llm=True) is llm
        assert isinstance(
            segmenter.strategy_for(DocumentType.CLOSEOUT_TRANSCRIPT, use_llm=False),
            ParagraphTranscriptSegmenter,
        )
        assert isinstance(
            segmenter.strategy_for(DocumentType.GRANT_DESCRIPTION, use_llm=True),
            GrantDescriptionSegmenter,
        )

    @pytest.mark.asyncio
    async def test_chunks_numbered_with_metadata(self, base_metadata) -> None:
        text = (
            "# Project Summary\nAcme Org will train 500 welders across three counties.\n"
            "# Budget\nThe total budget is $250,000 over two years of delivery."
        )
        chunks = await DocumentSegmenter().segment(_make_doc(text), base_metadata)

        assert [c.metadata.chunk_index for c in chunks] == [0, 1]
        assert [c.metadata.section_type for c in chunks] == [
            SectionType.PROJECT_SUMMARY,
            SectionType.BUDGET,
        ]
        assert all(c.metadata.chunk_uid == c.chunk_uid for c in chunks)
        assert len({c.chunk_uid for c in chunks}) == 2
        assert all(c.metadata.reference_number == "2024010B" for c in chunks)
        # The base record is not mutated.
        assert base_metadata.chunk_index == 0
        assert base_metadata.chunk_uid == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("document_type", list(DocumentType))
    async def test_non_blank_text_always_yields_chunks(self, base_metadata, document_type) -> None:
        doc = _make_doc("Short but not empty.", document_type)
        chunks = await DocumentSegmenter().segment(doc, base_metadata)
        assert len(chunks) >= 1
