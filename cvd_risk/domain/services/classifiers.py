"""Coded-value classifiers for race and smoking status."""

from typing import Optional, Sequence

from cvd_risk.domain.clinical_records import Observation
from cvd_risk.domain.enums import Race, SmokingCategory
from cvd_risk.domain.terminology import (
    BLACK_OR_AFRICAN_AMERICAN_CODE,
    DEFAULT_SMOKING_CODE,
    NON_SMOKER_CATEGORIES,
    SMOKING_CATEGORY_CODES,
)


def determine_race(ethnicity: Sequence[Observation]) -> Race:
    """Classify race from ethnicity observations.

    The published equations only distinguish African American patients, so
    the result is BLACK when any coded value of any observation is the
    "Black or African American" answer code, and OTHER otherwise (including
    when there are no observations).
    """
    for observation in ethnicity:
        if BLACK_OR_AFRICAN_AMERICAN_CODE in observation.coded_values():
            return Race.BLACK
    return Race.OTHER


def determine_smoking_category(smoking_obs: Optional[Observation]) -> SmokingCategory:
    """Map a smoking status observation to its five-level category.

    An absent observation, or one without a coded value, is treated as
    "never smoked". Codes outside the known value set fall back to NEVER.
    """
    if smoking_obs is not None and smoking_obs.value_codeable_concept is not None:
        codes = set(smoking_obs.coded_values())
    else:
        codes = {DEFAULT_SMOKING_CODE}

    for category, category_codes in SMOKING_CATEGORY_CODES:
        if codes & category_codes:
            return category
    return SmokingCategory.NEVER


def determine_smoking_status(smoking_obs: Optional[Observation]) -> int:
    """Return 1 if the patient counts as a smoker for the equations, else 0."""
    category = determine_smoking_category(smoking_obs)
    return 0 if category in NON_SMOKER_CATEGORIES else 1
