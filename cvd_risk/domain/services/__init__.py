"""Domain services: extraction, scoring, comparison, advisories and the flow tying them together."""

from cvd_risk.domain.services.accaha_flow import ACCAHAFlow
from cvd_risk.domain.services.classifiers import (
    determine_race,
    determine_smoking_category,
    determine_smoking_status,
)
from cvd_risk.domain.services.comparator import compare_risk, healthy_reference_risk
from cvd_risk.domain.services.extractor import InputExtractor
from cvd_risk.domain.services.risk_calculator import pooled_cohort_risk

__all__ = [
    "ACCAHAFlow",
    "InputExtractor",
    "compare_risk",
    "determine_race",
    "determine_smoking_category",
    "determine_smoking_status",
    "healthy_reference_risk",
    "pooled_cohort_risk",
]
