"""Tests for the patient versus healthy-reference comparison."""

import pytest

from cvd_risk.domain.enums import AdministrativeGender, Race
from cvd_risk.domain.risk_models import ClinicalObservationSet
from cvd_risk.domain.services.comparator import compare_risk, healthy_reference_risk
from cvd_risk.domain.services.risk_calculator import pooled_cohort_risk


def observation_set(**overrides) -> ClinicalObservationSet:
    values = dict(sex="male", race="other", age=55, total_cholesterol=213, hdl_cholesterol=50, systolic_bp=120)
    values.update(overrides)
    return ClinicalObservationSet(**values)


class TestHealthyReference:
    """Healthy reference risk."""

    def test_uses_ideal_values(self):
        expected = pooled_cohort_risk(AdministrativeGender.MALE, Race.OTHER, 55, 170, 50, 110)
        assert healthy_reference_risk(AdministrativeGender.MALE, Race.OTHER, 55) == expected

    def test_independent_of_patient_values(self):
        """Only age, sex and race influence the healthy score."""
        baseline = compare_risk(observation_set())
        sicker = compare_risk(observation_set(
            total_cholesterol=320, hdl_cholesterol=28, systolic_bp=175,
            smoker=1, diabetes=True, treated_hypertension=True,
        ))
        assert sicker.healthy_score == baseline.healthy_score
        assert sicker.patient_score > baseline.patient_score


class TestCompareRisk:
    """Pair of scores."""

    def test_reference_patient(self):
        result = compare_risk(observation_set())
        assert result.patient_score == pytest.approx(5.3, abs=0.15)
        assert result.healthy_score < result.patient_score

    def test_as_tuple(self):
        result = compare_risk(observation_set(sex="female"))
        patient, healthy = result.as_tuple()
        assert patient == result.patient_score
        assert healthy == result.healthy_score
