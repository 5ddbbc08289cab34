"""Risk engine value objects.

``ClinicalObservationSet`` is the validated snapshot the calculator consumes,
``RiskResult`` is the (patient, healthy reference) score pair, and ``Card``
is what the flow hands to an output sink.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from cvd_risk.domain.enums import AdministrativeGender, Race

SCORE_CARD_ID = "card-score"
STOP_SMOKING_CARD_ID = "card-stop-smoking"
REDUCE_BP_CARD_ID = "card-reduce-bp"


class ClinicalObservationSet(BaseModel):
    """Scalar inputs of the Pooled Cohort Equations for one patient.

    Parameters:
        sex: Patient sex; only MALE and FEMALE can be scored
        race: BLACK or OTHER
        age: Age in whole years
        total_cholesterol: Total cholesterol (mg/dL)
        hdl_cholesterol: HDL cholesterol (mg/dL)
        systolic_bp: Systolic blood pressure (mmHg)
        smoker: 1 for a current smoker, 0 otherwise
        diabetes: Any type 1 or type 2 diabetes diagnosis
        treated_hypertension: Any antihypertensive medication on record
    """

    sex: AdministrativeGender
    race: Race = Race.OTHER
    age: int
    total_cholesterol: float
    hdl_cholesterol: float
    systolic_bp: float
    smoker: int = Field(0, ge=0, le=1)
    diabetes: bool = False
    treated_hypertension: bool = False

    model_config = ConfigDict(frozen=True)


class RiskResult(BaseModel):
    """Patient 10-year risk and the risk of a healthy person of the same age, sex and race (percent)."""

    patient_score: float
    healthy_score: float

    model_config = ConfigDict(frozen=True)

    def as_tuple(self) -> tuple[float, float]:
        return self.patient_score, self.healthy_score


class Card(BaseModel):
    """An output item: a card identifier and its template parameters."""

    card_id: str
    parameters: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def effective_date(self) -> Optional[datetime]:
        return self.parameters.get("effectiveDate")
