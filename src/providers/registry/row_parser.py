"""Turn raw registry rows into :class:`GrantRecord` objects.

Shared by the Sheets and CSV providers.  Spreadsheet headers vary in case,
spacing and wording, so each known header variant is mapped to a record
field; the first column that maps to a field wins.  Cell values are cleaned
on the way in: currency symbols, thousands separators and percent signs are
stripped from numbers, and ``-``, ``N/A`` and blanks become ``None``.
"""

from __future__ import annotations

import re
from typing import Any, Sequence, get_args

from src.models.grants import GrantRecord

HEADER_MAP: dict[str, str] = {
    "grantee_id": "grantee_id",
    "grantee id": "grantee_id",
    "reference number": "reference_number",
    "reference_number": "reference_number",
    "grantee name": "grantee_name",
    "grantee_name": "grantee_name",
    "grant title": "grant_title",
    "grant_title": "grant_title",
    "grantee country": "grantee_country",
    "grantee_country": "grantee_country",
    "state": "state",
    "program officer": "program_officer",
    "program_officer": "program_officer",
    "rfp": "rfp",
    "grant portfolio type": "grant_portfolio_type",
    "grant_portfolio_type": "grant_portfolio_type",
    "intervention area primary": "intervention_area_primary",
    "intervention_area_primary": "intervention_area_primary",
    "intervention area secondary": "intervention_area_secondary",
    "intervention_area_secondary": "intervention_area_secondary",
    "impact pathway": "impact_pathway",
    "impact_pathway": "impact_pathway",
    "labor market sector": "labor_market_sector",
    "labor_market_sector": "labor_market_sector",
    "project mechanism": "project_mechanism",
    "project_mechanism": "project_mechanism",
    "primary population focus": "primary_population_focus",
    "primary_population_focus": "primary_population_focus",
    "strategic alignment": "strategic_alignment",
    "strategic_alignment": "strategic_alignment",
    "grant amount": "grant_amount",
    "grant_amount": "grant_amount",
    "total investment including overhead": "total_investment_including_overhead",
    "total grant amount committed": "total_grant_amount_committed",
    "additional co-investment amounts": "additional_co_investment_amounts",
    "cost per person": "cost_per_person",
    "cost_per_person": "cost_per_person",
    "grant approval date": "grant_approval_date",
    "grant start date": "grant_start_date",
    "grant close date": "grant_close_date",
    "grant years length": "grant_years_length",
    "fiscal year": "fiscal_year",
    "fiscal_year": "fiscal_year",
    "quarter": "quarter",
    "fiscal year and quarter": "fiscal_year_and_quarter",
    "active": "active",
    "estimated total people served": "estimated_total_people_served",
    "original estimate total people served": "original_estimate_total_people_served",
    "pct earning below living wage": "pct_earning_below_living_wage",
    "estimated people impacted below a living wage": "estimated_people_impacted_below_living_wage",
    "pct earning above living wage due to intervention": (
        "pct_earning_above_living_wage_due_to_intervention"
    ),
    "estimated people earning above living wage due to intervention": (
        "estimated_people_earning_above_living_wage"
    ),
    "living wage threshold": "living_wage_threshold",
    "comparison income avg": "comparison_income_avg",
    "post-intervention income avg": "post_intervention_income_avg",
    "intervention income change avg": "intervention_income_change_avg",
    "pct change in annual income": "pct_change_in_annual_income",
    "undiscounted aggregate lifetime income": "undiscounted_aggregate_lifetime_income",
    "present value of aggregate lifetime income gain estimate": (
        "present_value_lifetime_income_gain"
    ),
    "roi lifetime income gain": "roi_lifetime_income_gain",
    "relative roi dil": "relative_roi_dil",
    "lifetime earnings increase per person": "lifetime_earnings_increase_per_person",
    "undiscounted lifetime earnings increase per person": (
        "undiscounted_lifetime_earnings_increase_per_person"
    ),
    "number double income for life equivalent": "number_dil_equivalent",
    "number dil people per dollar": "number_dil_people_per_dollar",
    "roi or dil project": "roi_or_dil_project",
    "type of outcome data": "type_of_outcome_data",
    "type of counterfactual data": "type_of_counterfactual_data",
    "evidence quality assessment": "evidence_quality_assessment",
    "execution risk": "execution_risk",
    "leadership gender": "leadership_gender",
    "leadership ethnicity": "leadership_ethnicity",
    "leadership ethnicity collapsed": "leadership_ethnicity_collapsed",
    "women impacted percent": "women_impacted_percent",
    "historically marginalized percent": "historically_marginalized_percent",
    "immigrants or refugees": "immigrants_or_refugees",
    "justice involved": "justice_involved",
    "lgbtq": "lgbtq",
}

_NUMBER_NOISE = re.compile(r"[$,%\s]")
_NULL_MARKERS = {"", "-", "N/A"}
_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

# Derived from the model so a new GrantRecord field is parsed correctly
# without touching this module.
_NUMERIC_FIELDS = {
    name
    for name, field in GrantRecord.model_fields.items()
    if float in get_args(field.annotation)
}
_NULLABLE_TEXT_FIELDS = {"grant_approval_date", "grant_start_date", "grant_close_date"}


def parse_number(value: Any) -> float | None:
    """Parse a spreadsheet cell as a number.

    Examples: ``"$1,500,000"`` -> 1500000.0, ``"12.5%"`` -> 12.5,
    ``"N/A"`` -> None.  Like a lenient float parser, trailing garbage after a
    leading number is ignored (``"3 years"`` -> 3.0).
    """
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value)
    if text.strip() in _NULL_MARKERS:
        return None
    match = _LEADING_NUMBER.match(_NUMBER_NOISE.sub("", text))
    if match is None:
        return None
    return float(match.group(0))


def parse_boolean(value: Any) -> bool:
    """``"1"``, ``"true"`` and ``"yes"`` (any case) are true; all else false."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    text = str(value).strip()
    return text == "1" or text.lower() in ("true", "yes")


def build_header_index(headers: Sequence[Any]) -> dict[str, int]:
    """Map record field names to column positions for a header row."""
    index: dict[str, int] = {}
    for position, header in enumerate(headers):
        field = HEADER_MAP.get(str(header).lower().strip())
        if field and field not in index:
            index[field] = position
    return index


def _cell(row: Sequence[Any], position: int | None) -> str:
    if position is None or position >= len(row) or row[position] is None:
        return ""
    value = row[position]
    # Whole floats from UNFORMATTED_VALUE rendering ("2024010.0") break ids.
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_row(row: Sequence[Any], header_index: dict[str, int]) -> GrantRecord:
    """Build one record from a data row."""
    values: dict[str, Any] = {}
    for field in GrantRecord.model_fields:
        raw = _cell(row, header_index.get(field))
        if field == "grantee_id":
            number = parse_number(raw)
            values[field] = int(number) if number is not None else 0
        elif field == "active":
            values[field] = parse_boolean(raw)
        elif field in _NUMERIC_FIELDS:
            values[field] = parse_number(raw)
        elif field in _NULLABLE_TEXT_FIELDS:
            values[field] = raw or None
        else:
            values[field] = raw
    return GrantRecord(**values)


def parse_grant_rows(rows: Sequence[Sequence[Any]]) -> list[GrantRecord]:
    """Parse a header row followed by data rows.

    Empty rows and rows without a reference number are skipped.
    """
    if not rows:
        return []

    header_index = build_header_index(rows[0])
    ref_position = header_index.get("reference_number")
    if ref_position is None:
        return []

    records: list[GrantRecord] = []
    for row in rows[1:]:
        if not row or not _cell(row, ref_position).strip():
            continue
        records.append(parse_row(row, header_index))
    return records
