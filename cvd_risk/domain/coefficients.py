"""Pooled Cohort Equations coefficient tables.

Coefficients, baseline survival and mean linear predictor for each
sex/race stratum, taken from:

Goff DC Jr, Lloyd-Jones DM, Bennett G, et al. 2013 ACC/AHA guideline on the
assessment of cardiovascular risk: a report of the American College of
Cardiology/American Heart Association Task Force on Practice Guidelines.
Circulation. 2014;129(suppl 2):S49-S73.

``_PUBLISHED_TABLE`` is the only place these numbers appear. Every stratum is
validated into a ``RiskCoefficients`` model with the same named fields, so a
term cannot be silently shifted into the wrong position.
"""

from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from cvd_risk.domain.enums import AdministrativeGender, Race
from cvd_risk.domain.ports import InvalidSexError


class RiskCoefficients(BaseModel):
    """Regression coefficients of one sex/race stratum.

    Interaction terms are products of the natural logs of their factors,
    e.g. ``ln_age_ln_hdl_cholesterol`` multiplies ln(age) * ln(HDL).
    """

    ln_age: float
    ln_age_squared: float
    ln_total_cholesterol: float
    ln_age_ln_total_cholesterol: float
    ln_hdl_cholesterol: float
    ln_age_ln_hdl_cholesterol: float
    ln_treated_sbp: float
    ln_age_ln_treated_sbp: float
    ln_untreated_sbp: float
    ln_age_ln_untreated_sbp: float
    smoker: float
    ln_age_smoker: float
    diabetes: float
    baseline_survival: float = Field(..., gt=0, lt=1)
    mean: float

    model_config = ConfigDict(frozen=True, extra="forbid")


_PUBLISHED_TABLE: dict[tuple[AdministrativeGender, Race], dict[str, float]] = {
    (AdministrativeGender.FEMALE, Race.OTHER): {
        "ln_age": -29.799,
        "ln_age_squared": 4.884,
        "ln_total_cholesterol": 13.540,
        "ln_age_ln_total_cholesterol": -3.114,
        "ln_hdl_cholesterol": -13.578,
        "ln_age_ln_hdl_cholesterol": 3.149,
        "ln_treated_sbp": 2.019,
        "ln_age_ln_treated_sbp": 0.0,
        "ln_untreated_sbp": 1.957,
        "ln_age_ln_untreated_sbp": 0.0,
        "smoker": 7.574,
        "ln_age_smoker": -1.665,
        "diabetes": 0.661,
        "baseline_survival": 0.9665,
        "mean": -29.18,
    },
    (AdministrativeGender.FEMALE, Race.BLACK): {
        "ln_age": 17.114,
        "ln_age_squared": 0.0,
        "ln_total_cholesterol": 0.940,
        "ln_age_ln_total_cholesterol": 0.0,
        "ln_hdl_cholesterol": -18.920,
        "ln_age_ln_hdl_cholesterol": 4.475,
        "ln_treated_sbp": 29.291,
        "ln_age_ln_treated_sbp": -6.432,
        "ln_untreated_sbp": 27.820,
        "ln_age_ln_untreated_sbp": -6.087,
        "smoker": 0.691,
        "ln_age_smoker": 0.0,
        "diabetes": 0.874,
        "baseline_survival": 0.9533,
        "mean": 86.61,
    },
    (AdministrativeGender.MALE, Race.OTHER): {
        "ln_age": 12.344,
        "ln_age_squared": 0.0,
        "ln_total_cholesterol": 11.853,
        "ln_age_ln_total_cholesterol": -2.664,
        "ln_hdl_cholesterol": -7.990,
        "ln_age_ln_hdl_cholesterol": 1.769,
        "ln_treated_sbp": 1.797,
        "ln_age_ln_treated_sbp": 0.0,
        "ln_untreated_sbp": 1.764,
        "ln_age_ln_untreated_sbp": 0.0,
        "smoker": 7.837,
        "ln_age_smoker": -1.795,
        "diabetes": 0.658,
        "baseline_survival": 0.9144,
        "mean": 61.18,
    },
    (AdministrativeGender.MALE, Race.BLACK): {
        "ln_age": 2.469,
        "ln_age_squared": 0.0,
        "ln_total_cholesterol": 0.302,
        "ln_age_ln_total_cholesterol": 0.0,
        "ln_hdl_cholesterol": -0.307,
        "ln_age_ln_hdl_cholesterol": 0.0,
        "ln_treated_sbp": 1.916,
        "ln_age_ln_treated_sbp": 0.0,
        "ln_untreated_sbp": 1.809,
        "ln_age_ln_untreated_sbp": 0.0,
        "smoker": 0.549,
        "ln_age_smoker": 0.0,
        "diabetes": 0.645,
        "baseline_survival": 0.8954,
        "mean": 19.54,
    },
}

POOLED_COHORT_COEFFICIENTS: Mapping[tuple[AdministrativeGender, Race], RiskCoefficients] = MappingProxyType({
    stratum: RiskCoefficients(**row) for stratum, row in _PUBLISHED_TABLE.items()
})


def get_coefficients(sex: AdministrativeGender, race: Race) -> RiskCoefficients:
    """Select the coefficient row for a sex/race stratum.

    Raises:
        InvalidSexError: If sex is not male or female
        ValueError: If race is not a Race value
    """
    race = Race(race)
    try:
        sex = AdministrativeGender(sex)
    except ValueError:
        raise InvalidSexError(sex) from None

    coefficients = POOLED_COHORT_COEFFICIENTS.get((sex, race))
    if coefficients is None:
        raise InvalidSexError(sex)
    return coefficients
