"""Patient versus healthy-reference risk comparison."""

import logging
from typing import Optional

from cvd_risk.domain.enums import AdministrativeGender, Race
from cvd_risk.domain.risk_models import ClinicalObservationSet, RiskResult
from cvd_risk.domain.services.risk_calculator import pooled_cohort_risk

logger = logging.getLogger(__name__)

# Guideline-optimal risk factors of the healthy reference person
IDEAL_TOTAL_CHOLESTEROL = 170.0
IDEAL_HDL_CHOLESTEROL = 50.0
IDEAL_SYSTOLIC_BP = 110.0


def healthy_reference_risk(
    sex: AdministrativeGender,
    race: Race,
    age,
    log: Optional[logging.Logger] = None,
):
    """Risk of a non-smoking, non-diabetic, untreated person with ideal lipids and SBP."""
    return pooled_cohort_risk(
        sex,
        race,
        age,
        IDEAL_TOTAL_CHOLESTEROL,
        IDEAL_HDL_CHOLESTEROL,
        IDEAL_SYSTOLIC_BP,
        smoker=0,
        diabetes=0,
        treated_hypertension=0,
        log=log,
    )


def compare_risk(observations: ClinicalObservationSet, log: Optional[logging.Logger] = None) -> RiskResult:
    """Score the patient and the healthy reference of the same age, sex and race.

    Raises:
        InvalidSexError: If the observation set's sex is not male or female
    """
    patient_score = pooled_cohort_risk(
        observations.sex,
        observations.race,
        observations.age,
        observations.total_cholesterol,
        observations.hdl_cholesterol,
        observations.systolic_bp,
        smoker=observations.smoker,
        diabetes=int(observations.diabetes),
        treated_hypertension=int(observations.treated_hypertension),
        log=log,
    )
    healthy_score = healthy_reference_risk(observations.sex, observations.race, observations.age, log=log)
    return RiskResult(patient_score=patient_score, healthy_score=healthy_score)
