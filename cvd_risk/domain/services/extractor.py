"""Input extraction for the ACC/AHA flow.

Turns a ``PatientPrefetch`` of typed clinical records into the scalar
``ClinicalObservationSet`` the calculator needs, or a failure Result saying
why the chart is insufficient.
"""

import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

import numpy as np

from cvd_risk.domain.clinical_records import Observation, PatientPrefetch
from cvd_risk.domain.enums import SCORABLE_SEXES
from cvd_risk.domain.ports import (
    ImplausibleValueError,
    InvalidSexError,
    MissingDataError,
    Result,
)
from cvd_risk.domain.risk_models import ClinicalObservationSet
from cvd_risk.domain.services.classifiers import determine_race, determine_smoking_status
from cvd_risk.domain.terminology import SYSTOLIC_BP_CODE

logger = logging.getLogger(__name__)


def calculate_age(birth_date: date, as_of: Union[date, datetime]) -> int:
    """Age in completed years at ``as_of``."""
    as_of_date = as_of.date() if isinstance(as_of, datetime) else as_of
    years = as_of_date.year - birth_date.year
    if (as_of_date.month, as_of_date.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def first_quantity_value(observations: Sequence[Observation]) -> Optional[float]:
    """Numeric value of the first observation, or None if there is none."""
    if not observations:
        return None
    quantity = observations[0].value_quantity
    return quantity.value if quantity is not None else None


def get_systolic_bp(observations: Sequence[Observation]) -> Optional[float]:
    """First systolic value found across blood pressure observations.

    Looks at panel components coded as systolic first, then at the
    observation itself when it is a standalone systolic measurement.
    """
    for observation in observations:
        for component in observation.component:
            if SYSTOLIC_BP_CODE in component.code.codes() and component.value_quantity is not None:
                if component.value_quantity.value is not None:
                    return component.value_quantity.value
        if observation.has_code(SYSTOLIC_BP_CODE) and observation.value_quantity is not None:
            if observation.value_quantity.value is not None:
                return observation.value_quantity.value
    return None


def has_coded_value(observation: Optional[Observation]) -> bool:
    return observation is not None and bool(observation.coded_values())


def plausible_mask(*values):
    """True where every value is finite and strictly positive.

    Works element-wise, so it accepts scalars as well as arrays/Series.
    """
    mask = np.bool_(True)
    for value in values:
        array = np.asarray(value, dtype=float)
        mask = np.logical_and(mask, np.isfinite(array) & (array > 0))
    return mask


class InputExtractor:
    """Extracts and validates the Pooled Cohort Equation inputs.

    Parameters:
        validate_inputs: Reject non-positive or non-finite numeric values
            before they reach the logarithms. When False, such values pass
            through and the calculator propagates NaN/inf.
        log: Logger receiving diagnostics (defaults to this module's logger)
    """

    def __init__(self, validate_inputs: bool = True, log: Optional[logging.Logger] = None):
        self.validate_inputs = validate_inputs
        self.log = log or logger

    def extract(
        self,
        prefetch: PatientPrefetch,
        as_of: Optional[Union[date, datetime]] = None,
    ) -> Result[ClinicalObservationSet]:
        """Build a ClinicalObservationSet from the prefetched records.

        Parameters:
            prefetch: Patient and the observation/condition/medication sequences
            as_of: Instant the age is computed at (defaults to now)

        Returns:
            Result[ClinicalObservationSet]: failure carries MissingDataError,
            InvalidSexError or ImplausibleValueError
        """
        patient = prefetch.patient
        as_of = as_of or datetime.now()

        total_cholesterol = first_quantity_value(prefetch.total_cholesterol)
        hdl_cholesterol = first_quantity_value(prefetch.hdl_cholesterol)
        systolic_bp = get_systolic_bp(prefetch.systolic_bp)
        smoking_obs = prefetch.smoking_status[0] if prefetch.smoking_status else None
        ethnicity_obs = prefetch.ethnicity[0] if prefetch.ethnicity else None

        missing = []
        if patient.birth_date is None:
            missing.append("birth_date")
        if total_cholesterol is None:
            missing.append("total_cholesterol")
        if hdl_cholesterol is None:
            missing.append("hdl_cholesterol")
        if systolic_bp is None:
            missing.append("systolic_bp")
        if not has_coded_value(smoking_obs):
            missing.append("smoking_status")
        if not has_coded_value(ethnicity_obs):
            missing.append("ethnicity")

        if missing:
            error = MissingDataError(missing)
            self.log.warning(str(error), extra={"patient_id": patient.id, "missing": missing})
            return Result.failure_result(error)

        if patient.gender not in SCORABLE_SEXES:
            error = InvalidSexError(patient.gender)
            self.log.warning(str(error), extra={"patient_id": patient.id})
            return Result.failure_result(error)

        observations = ClinicalObservationSet(
            sex=patient.gender,
            race=determine_race(prefetch.ethnicity),
            age=calculate_age(patient.birth_date, as_of),
            total_cholesterol=total_cholesterol,
            hdl_cholesterol=hdl_cholesterol,
            systolic_bp=systolic_bp,
            smoker=determine_smoking_status(smoking_obs),
            diabetes=bool(prefetch.type1_diabetes) or bool(prefetch.type2_diabetes),
            treated_hypertension=bool(prefetch.hypertensive_treatment),
        )
        return self.validate(observations, patient_id=patient.id)

    def validate(
        self,
        observations: ClinicalObservationSet,
        patient_id: Optional[str] = None,
    ) -> Result[ClinicalObservationSet]:
        """Check that sex is scorable and, if enabled, that numeric inputs can be log-transformed."""
        if observations.sex not in SCORABLE_SEXES:
            error = InvalidSexError(observations.sex)
            self.log.warning(str(error), extra={"patient_id": patient_id})
            return Result.failure_result(error)

        if self.validate_inputs:
            values = {
                "age": observations.age,
                "total_cholesterol": observations.total_cholesterol,
                "hdl_cholesterol": observations.hdl_cholesterol,
                "systolic_bp": observations.systolic_bp,
            }
            implausible = {name: value for name, value in values.items() if not plausible_mask(value)}
            if implausible:
                error = ImplausibleValueError(implausible)
                self.log.warning(str(error), extra={"patient_id": patient_id})
                return Result.failure_result(error)

        return Result.success_result(observations)
