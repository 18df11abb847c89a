"""Best-effort identity extraction from grant document filenames.

Filenames follow loose conventions such as::

    2024010B_Acme Org_RFP3_Grant Description.pdf
    Acme Org_MidCheckInTranscript_2025.docx

:func:`parse_filename` pulls out the grant reference number, a document type
and a candidate grantee name.  Every field may come back ``None``; the
orchestrator falls back to the folder's default type and logs files whose
identity cannot be resolved.
"""

from __future__ import annotations

import re

from src.models.documents import DocumentType, ParsedFilename

# Ordered most specific first; the first match wins.
_DOC_TYPE_PATTERNS: list[tuple[re.Pattern[str], DocumentType]] = [
    (re.compile(pattern, re.IGNORECASE), doc_type)
    for pattern, doc_type in [
        # Grant descriptions
        (r"grant\s*desc", DocumentType.GRANT_DESCRIPTION),
        (r"grant\s*proposal", DocumentType.GRANT_DESCRIPTION),
        (r"project\s*desc", DocumentType.GRANT_DESCRIPTION),
        # Midpoint check-in transcripts
        (r"midpoint.*transcript", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
        (r"mid.*check.*in.*transcript", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
        (r"checkin.*transcript", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
        (r"check.*in.*transcript", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
        # Midpoint surveys
        (r"midpoint.*survey", DocumentType.MIDPOINT_SURVEY),
        (r"mid.*survey", DocumentType.MIDPOINT_SURVEY),
        # Annual impact surveys / reports
        (r"impact.*survey", DocumentType.IMPACT_SURVEY),
        (r"annual.*survey", DocumentType.IMPACT_SURVEY),
        (r"impact.*report", DocumentType.IMPACT_SURVEY),
        (r"annual.*report", DocumentType.IMPACT_SURVEY),
        # Closeout transcripts
        (r"closeout.*transcript", DocumentType.CLOSEOUT_TRANSCRIPT),
        (r"close.*out.*transcript", DocumentType.CLOSEOUT_TRANSCRIPT),
        (r"closeout", DocumentType.CLOSEOUT_TRANSCRIPT),
        (r"close.*out", DocumentType.CLOSEOUT_TRANSCRIPT),
        # Generic fallbacks
        (r"check.*in", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
        (r"checkin", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
        (r"transcript", DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT),
        (r"survey", DocumentType.IMPACT_SURVEY),
    ]
]

# 20XXXXX with an optional capital suffix, e.g. 2025067, 2024010B.
# Digit lookarounds instead of \b because "_" is a word character and
# filenames usually read "2025067_GranteeName_...".
REFERENCE_NUMBER_PATTERN = re.compile(r"(?:^|[^0-9])(20[2-3]\d{4}[A-Z]?)(?=[^0-9]|$)")

_NAME_NOISE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"grant\s*desc(ription)?",
        r"midpoint",
        r"check\s*-?\s*in",
        r"transcript",
        r"survey",
        r"closeout",
        r"close\s*out",
        r"impact\s*report",
        r"annual\s*report",
        r"annual",
        r"mid\s*year",
    )
]
_EXTENSION = re.compile(r"\.\w+$")
# Digit lookarounds so "_2025" counts as a year too.
_YEAR = re.compile(r"(?<!\d)20[2-3]\d(?!\d)")
_SEPARATORS = re.compile(r"[_\-]+")
_WHITESPACE = re.compile(r"\s+")

MIN_GRANTEE_NAME_LENGTH = 3


def extract_reference_number(filename: str) -> str | None:
    match = REFERENCE_NUMBER_PATTERN.search(filename)
    return match.group(1) if match else None


def detect_document_type(filename: str) -> DocumentType | None:
    for pattern, doc_type in _DOC_TYPE_PATTERNS:
        if pattern.search(filename):
            return doc_type
    return None


def extract_grantee_name(filename: str, reference_number: str | None) -> str | None:
    """Strip everything that is not the grantee name and return what is left.

    Removes the extension, the reference number, document-type keywords and
    years, then normalises separators.  Remnants shorter than three
    characters are treated as no name at all.
    """
    name = _EXTENSION.sub("", filename)
    if reference_number:
        name = name.replace(reference_number, "", 1)
    for pattern in _NAME_NOISE_PATTERNS:
        name = pattern.sub("", name)
    name = _YEAR.sub("", name)
    name = _WHITESPACE.sub(" ", _SEPARATORS.sub(" ", name)).strip()

    if len(name) < MIN_GRANTEE_NAME_LENGTH:
        return None
    return name


def parse_filename(filename: str) -> ParsedFilename:
    """Classify *filename*. Never raises."""
    reference_number = extract_reference_number(filename)
    return ParsedFilename(
        reference_number=reference_number,
        document_type=detect_document_type(filename),
        grantee_name=extract_grantee_name(filename, reference_number),
    )
