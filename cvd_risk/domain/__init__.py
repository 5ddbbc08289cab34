"""Domain layer for the CVD Risk Engine.

This module contains the clinical record schemas, the Pooled Cohort
Equations and the ACC/AHA flow. Domain models depend on nothing beyond
Pydantic and numpy.
"""

from .clinical_records import (
    Patient,
    Observation,
    Condition,
    MedicationStatement,
    PatientPrefetch,
)
from .risk_models import ClinicalObservationSet, RiskResult, Card

__all__ = [
    "Patient",
    "Observation",
    "Condition",
    "MedicationStatement",
    "PatientPrefetch",
    "ClinicalObservationSet",
    "RiskResult",
    "Card",
]
