"""Shared fixtures: FHIR-shaped prefetch documents and a fixed clock."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from cvd_risk.domain.clinical_records import PatientPrefetch

LOINC = "http://loinc.org"
SNOMED = "http://snomed.info/sct"

# 2026-06-01: a patient born 1971-01-01 is 55
FIXED_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)

WHITE_CODE = "LA4457-3"
BLACK_CODE = "LA6162-7"
NEVER_SMOKED_CODE = "266919005"
CURRENT_SMOKER_CODE = "449868002"


def _lab(code: str, value: float, unit: str = "mg/dL") -> dict:
    return {
        "resourceType": "Observation",
        "status": "final",
        "code": {"coding": [{"system": LOINC, "code": code}]},
        "valueQuantity": {"value": value, "unit": unit},
    }


def _coded(code: str, answer: str, system: str = SNOMED) -> dict:
    return {
        "resourceType": "Observation",
        "status": "final",
        "code": {"coding": [{"system": LOINC, "code": code}]},
        "valueCodeableConcept": {"coding": [{"system": system, "code": answer}]},
    }


def _bp_panel(systolic: float, diastolic: float = 80) -> dict:
    return {
        "resourceType": "Observation",
        "status": "final",
        "code": {"coding": [{"system": LOINC, "code": "85354-9"}]},
        "component": [
            {"code": {"coding": [{"system": LOINC, "code": "8480-6"}]},
             "valueQuantity": {"value": systolic, "unit": "mm[Hg]"}},
            {"code": {"coding": [{"system": LOINC, "code": "8462-4"}]},
             "valueQuantity": {"value": diastolic, "unit": "mm[Hg]"}},
        ],
    }


def build_prefetch_dict(
    patient_id: str = "patient-1",
    gender: Optional[str] = "male",
    birth_date: Optional[str] = "1971-01-01",
    total_cholesterol: Optional[float] = 213,
    hdl_cholesterol: Optional[float] = 50,
    systolic_bp: Optional[float] = 120,
    smoking_code: Optional[str] = NEVER_SMOKED_CODE,
    ethnicity_code: Optional[str] = WHITE_CODE,
    type1_diabetes: bool = False,
    type2_diabetes: bool = False,
    treated_hypertension: bool = False,
) -> dict[str, Any]:
    """Raw prefetch document; a ``None`` value leaves that record out."""
    patient: dict[str, Any] = {"resourceType": "Patient", "id": patient_id}
    if gender is not None:
        patient["gender"] = gender
    if birth_date is not None:
        patient["birthDate"] = birth_date

    document: dict[str, Any] = {"patient": patient}
    if total_cholesterol is not None:
        document["totalCholesterol"] = [_lab("2093-3", total_cholesterol)]
    if hdl_cholesterol is not None:
        document["hdlCholesterol"] = [_lab("2085-9", hdl_cholesterol)]
    if systolic_bp is not None:
        document["systolicBP"] = [_bp_panel(systolic_bp)]
    if smoking_code is not None:
        document["smokingStatus"] = [_coded("72166-2", smoking_code)]
    if ethnicity_code is not None:
        document["ethnicity"] = [_coded("32624-9", ethnicity_code, system=LOINC)]
    if type1_diabetes:
        document["type1Diabetes"] = [{"resourceType": "Condition", "id": "t1dm"}]
    if type2_diabetes:
        document["type2Diabetes"] = [{"resourceType": "Condition", "id": "t2dm"}]
    if treated_hypertension:
        document["hypertensiveTreatment"] = [{"resourceType": "MedicationStatement", "id": "lisinopril"}]
    return document


@pytest.fixture
def prefetch_dict_factory():
    """Build a raw prefetch document (for file-based adapters)."""
    return build_prefetch_dict


@pytest.fixture
def prefetch_factory():
    """Build a validated PatientPrefetch; keyword arguments as in build_prefetch_dict."""
    def _build(**overrides) -> PatientPrefetch:
        return PatientPrefetch.model_validate(build_prefetch_dict(**overrides))
    return _build


@pytest.fixture
def fixed_clock():
    """Clock returning FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging's changes to the root logger."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
