"""Grant registry record model.

One :class:`GrantRecord` per row of the structured grant registry (the
portfolio spreadsheet). Records are read-only to the ingestion pipeline: they
are fetched once per run, used to resolve document identities, and copied
into chunk metadata by the enricher.

Numeric columns are ``float | None`` because the spreadsheet mixes blanks,
dashes and ``N/A`` with real values; text columns default to ``""``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GrantRecord(BaseModel):
    """A single grant as described by the registry."""

    model_config = ConfigDict(frozen=True)

    # --- Identity & classification ---
    grantee_id: int = 0
    reference_number: str = Field(description="Registry primary key, e.g. '2024010B'.")
    grantee_name: str = ""
    grant_title: str = ""
    grantee_country: str = ""
    state: str = ""
    program_officer: str = ""
    rfp: str = ""
    grant_portfolio_type: str = Field(
        default="", description="Laboratory, Scaling, Systems Change, or blank."
    )
    intervention_area_primary: str = ""
    intervention_area_secondary: str = ""
    impact_pathway: str = ""
    labor_market_sector: str = ""
    project_mechanism: str = ""
    primary_population_focus: str = ""
    strategic_alignment: str = ""

    # --- Financial ---
    grant_amount: float | None = None
    total_investment_including_overhead: float | None = None
    total_grant_amount_committed: float | None = None
    additional_co_investment_amounts: float | None = None
    cost_per_person: float | None = None

    # --- Timeline & status ---
    grant_approval_date: str | None = None
    grant_start_date: str | None = None
    grant_close_date: str | None = None
    grant_years_length: float | None = None
    fiscal_year: float | None = None
    quarter: str = ""
    fiscal_year_and_quarter: str = ""
    active: bool = False

    # --- Impact & ROI ---
    estimated_total_people_served: float | None = None
    original_estimate_total_people_served: float | None = None
    pct_earning_below_living_wage: float | None = None
    estimated_people_impacted_below_living_wage: float | None = None
    pct_earning_above_living_wage_due_to_intervention: float | None = None
    estimated_people_earning_above_living_wage: float | None = None
    living_wage_threshold: float | None = None
    comparison_income_avg: float | None = None
    post_intervention_income_avg: float | None = None
    intervention_income_change_avg: float | None = None
    pct_change_in_annual_income: float | None = None
    undiscounted_aggregate_lifetime_income: float | None = None
    present_value_lifetime_income_gain: float | None = None
    roi_lifetime_income_gain: float | None = None
    relative_roi_dil: float | None = None
    lifetime_earnings_increase_per_person: float | None = None
    undiscounted_lifetime_earnings_increase_per_person: float | None = None
    number_dil_equivalent: float | None = None
    number_dil_people_per_dollar: float | None = None
    roi_or_dil_project: str = ""
    type_of_outcome_data: str = ""
    type_of_counterfactual_data: str = ""
    evidence_quality_assessment: str = ""
    execution_risk: str = ""

    # --- Demographics ---
    leadership_gender: str = ""
    leadership_ethnicity: str = ""
    leadership_ethnicity_collapsed: str = ""
    women_impacted_percent: float | None = None
    historically_marginalized_percent: float | None = None
    immigrants_or_refugees: str = ""
    justice_involved: str = ""
    lgbtq: str = ""
