"""Pooled Cohort Equations risk calculator.

Evaluates the sex/race-specific Cox model of the 2013 ACC/AHA guideline:

    LP   = sum(coefficient * term)
    risk = 100 * (1 - S0 ** exp(LP - mean))

Arithmetic uses numpy so scalars and arrays (pandas Series) go through the
same code, and so non-positive inputs follow IEEE-754 semantics (log gives
-inf/NaN and the result propagates as non-finite) instead of raising.
"""

import logging
from typing import Optional, Union

import numpy as np
import pandas as pd

from cvd_risk.domain.coefficients import RiskCoefficients, get_coefficients
from cvd_risk.domain.enums import AdministrativeGender, Race

logger = logging.getLogger(__name__)

ArrayLike = Union[float, int, np.ndarray, pd.Series]


def linear_predictor(
    coefficients: RiskCoefficients,
    age: ArrayLike,
    total_cholesterol: ArrayLike,
    hdl_cholesterol: ArrayLike,
    systolic_bp: ArrayLike,
    smoker: ArrayLike,
    diabetes: ArrayLike,
    treated_hypertension: ArrayLike,
) -> np.ndarray:
    """Weighted sum of the log-transformed risk factors and their interactions.

    The SBP and ln(age)*ln(SBP) terms take the treated or untreated
    coefficient depending on ``treated_hypertension``. The smoker and
    diabetes coefficients are only added when their flag is 1.
    """
    c = coefficients
    with np.errstate(divide="ignore", invalid="ignore"):
        ln_age = np.log(np.asarray(age, dtype=float))
        ln_total_cholesterol = np.log(np.asarray(total_cholesterol, dtype=float))
        ln_hdl_cholesterol = np.log(np.asarray(hdl_cholesterol, dtype=float))
        ln_sbp = np.log(np.asarray(systolic_bp, dtype=float))

        smoker = np.asarray(smoker, dtype=float)
        treated = np.asarray(treated_hypertension, dtype=float) != 0
        has_diabetes = np.asarray(diabetes, dtype=float) == 1

        sbp_coefficient = np.where(treated, c.ln_treated_sbp, c.ln_untreated_sbp)
        age_sbp_coefficient = np.where(treated, c.ln_age_ln_treated_sbp, c.ln_age_ln_untreated_sbp)

        return (
            c.ln_age * ln_age
            + c.ln_age_squared * np.power(ln_age, 2)
            + c.ln_total_cholesterol * ln_total_cholesterol
            + c.ln_age_ln_total_cholesterol * ln_age * ln_total_cholesterol
            + c.ln_hdl_cholesterol * ln_hdl_cholesterol
            + c.ln_age_ln_hdl_cholesterol * ln_age * ln_hdl_cholesterol
            + sbp_coefficient * ln_sbp
            + age_sbp_coefficient * ln_age * ln_sbp
            + np.where(smoker == 1, c.smoker, 0.0)
            + c.ln_age_smoker * ln_age * smoker
            + np.where(has_diabetes, c.diabetes, 0.0)
        )


def risk_from_linear_predictor(coefficients: RiskCoefficients, lp: ArrayLike) -> np.ndarray:
    """Convert a linear predictor into a 10-year risk percentage."""
    with np.errstate(over="ignore", invalid="ignore"):
        return 100 * (1 - np.power(coefficients.baseline_survival, np.exp(np.asarray(lp) - coefficients.mean)))


def pooled_cohort_risk(
    sex: AdministrativeGender,
    race: Race,
    age: ArrayLike,
    total_cholesterol: ArrayLike,
    hdl_cholesterol: ArrayLike,
    systolic_bp: ArrayLike,
    smoker: ArrayLike = 0,
    diabetes: ArrayLike = 0,
    treated_hypertension: ArrayLike = 0,
    log: Optional[logging.Logger] = None,
) -> Union[float, np.ndarray]:
    """Calculate the ACC/AHA 10-year CVD risk in percent.

    Parameters:
        sex: MALE or FEMALE
        race: BLACK or OTHER
        age: Age in years
        total_cholesterol: Total cholesterol (mg/dL)
        hdl_cholesterol: HDL cholesterol (mg/dL)
        systolic_bp: Systolic blood pressure (mmHg)
        smoker: 1 if current smoker, else 0
        diabetes: 1 if diabetic, else 0
        treated_hypertension: 1 if on antihypertensive treatment, else 0
        log: Logger receiving the input trace (defaults to this module's logger)

    Returns:
        float for scalar inputs, numpy array for array inputs

    Raises:
        InvalidSexError: If sex is not male or female
    """
    log = log or logger
    log.debug(
        f"Calculating ACC/AHA risk for {getattr(sex, 'value', sex)} with values: age={age}, "
        f"totalCholesterol={total_cholesterol}, hdlCholesterol={hdl_cholesterol}, sbp={systolic_bp}, "
        f"smoker={smoker}, diabetes={diabetes}, treatedHypertension={treated_hypertension}, "
        f"race={getattr(race, 'value', race)}"
    )

    coefficients = get_coefficients(sex, race)
    lp = linear_predictor(
        coefficients,
        age,
        total_cholesterol,
        hdl_cholesterol,
        systolic_bp,
        smoker,
        diabetes,
        treated_hypertension,
    )
    risk = risk_from_linear_predictor(coefficients, lp)
    if np.ndim(risk) == 0:
        return float(risk)
    return risk
