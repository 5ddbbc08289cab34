"""Tests for InputExtractor and the extraction helpers."""

import logging
from datetime import date, datetime

import pytest

from cvd_risk.domain.clinical_records import Observation
from cvd_risk.domain.enums import AdministrativeGender, Race
from cvd_risk.domain.risk_models import ClinicalObservationSet
from cvd_risk.domain.services.extractor import (
    InputExtractor,
    calculate_age,
    get_systolic_bp,
    plausible_mask,
)

AS_OF = date(2026, 6, 1)


class TestCalculateAge:
    """Completed years."""

    def test_after_birthday(self):
        assert calculate_age(date(1971, 1, 1), AS_OF) == 55

    def test_before_birthday(self):
        assert calculate_age(date(1971, 12, 31), AS_OF) == 54

    def test_on_birthday(self):
        assert calculate_age(date(1971, 6, 1), AS_OF) == 55

    def test_datetime_as_of(self):
        assert calculate_age(date(1971, 1, 1), datetime(2026, 6, 1, 8, 30)) == 55


class TestGetSystolicBP:
    """Systolic value from panels or standalone observations."""

    def test_panel_component(self, prefetch_factory):
        prefetch = prefetch_factory(systolic_bp=132)
        assert get_systolic_bp(prefetch.systolic_bp) == 132

    def test_standalone_observation(self):
        observation = Observation.model_validate({
            "code": {"coding": [{"code": "8480-6"}]},
            "valueQuantity": {"value": 145},
        })
        assert get_systolic_bp([observation]) == 145

    def test_panel_without_systolic(self):
        observation = Observation.model_validate({
            "code": {"coding": [{"code": "85354-9"}]},
            "component": [{"code": {"coding": [{"code": "8462-4"}]}, "valueQuantity": {"value": 80}}],
        })
        assert get_systolic_bp([observation]) is None

    def test_empty(self):
        assert get_systolic_bp([]) is None


class TestPlausibleMask:
    """Element-wise finiteness and positivity."""

    def test_scalars(self):
        assert bool(plausible_mask(55, 213.0, 50, 120))
        assert not bool(plausible_mask(55, 0))
        assert not bool(plausible_mask(float("nan")))
        assert not bool(plausible_mask(float("inf")))

    def test_arrays(self):
        mask = plausible_mask([1, -1, 3], [1, 1, 0])
        assert mask.tolist() == [True, False, False]


class TestExtract:
    """Building a ClinicalObservationSet from a prefetch."""

    def test_complete_chart(self, prefetch_factory):
        result = InputExtractor().extract(prefetch_factory(), as_of=AS_OF)

        assert result.is_success()
        observations = result.value
        assert observations.sex == AdministrativeGender.MALE
        assert observations.race == Race.OTHER
        assert observations.age == 55
        assert observations.total_cholesterol == 213
        assert observations.hdl_cholesterol == 50
        assert observations.systolic_bp == 120
        assert observations.smoker == 0
        assert observations.diabetes is False
        assert observations.treated_hypertension is False

    def test_flags_from_conditions_and_medications(self, prefetch_factory):
        prefetch = prefetch_factory(
            ethnicity_code="LA6162-7",
            smoking_code="449868002",
            type2_diabetes=True,
            treated_hypertension=True,
        )
        observations = InputExtractor().extract(prefetch, as_of=AS_OF).value

        assert observations.race == Race.BLACK
        assert observations.smoker == 1
        assert observations.diabetes is True
        assert observations.treated_hypertension is True

    def test_type1_diabetes_counts(self, prefetch_factory):
        observations = InputExtractor().extract(prefetch_factory(type1_diabetes=True), as_of=AS_OF).value
        assert observations.diabetes is True

    def test_missing_hdl(self, prefetch_factory, caplog):
        """Missing HDL yields no result and a warning."""
        with caplog.at_level(logging.WARNING):
            result = InputExtractor().extract(prefetch_factory(hdl_cholesterol=None), as_of=AS_OF)

        assert result.is_failure()
        assert result.error_type == "MissingDataError"
        assert result.error_details["missing"] == ["hdl_cholesterol"]
        assert "Missing required data" in caplog.text

    @pytest.mark.parametrize("override,missing", [
        ({"birth_date": None}, "birth_date"),
        ({"total_cholesterol": None}, "total_cholesterol"),
        ({"systolic_bp": None}, "systolic_bp"),
        ({"smoking_code": None}, "smoking_status"),
        ({"ethnicity_code": None}, "ethnicity"),
    ])
    def test_each_required_value(self, prefetch_factory, override, missing):
        result = InputExtractor().extract(prefetch_factory(**override), as_of=AS_OF)
        assert result.error_type == "MissingDataError"
        assert missing in result.error_details["missing"]

    def test_all_missing_reported_together(self, prefetch_factory):
        prefetch = prefetch_factory(total_cholesterol=None, hdl_cholesterol=None, ethnicity_code=None)
        result = InputExtractor().extract(prefetch, as_of=AS_OF)
        assert result.error_details["missing"] == ["total_cholesterol", "hdl_cholesterol", "ethnicity"]

    def test_invalid_sex(self, prefetch_factory, caplog):
        with caplog.at_level(logging.WARNING):
            result = InputExtractor().extract(prefetch_factory(gender="other"), as_of=AS_OF)

        assert result.is_failure()
        assert result.error_type == "InvalidSexError"
        assert "Sex not specified or invalid: other" in caplog.text

    def test_absent_gender_is_invalid_sex(self, prefetch_factory):
        result = InputExtractor().extract(prefetch_factory(gender=None), as_of=AS_OF)
        assert result.error_type == "InvalidSexError"

    def test_missing_data_checked_before_sex(self, prefetch_factory):
        result = InputExtractor().extract(prefetch_factory(gender="other", hdl_cholesterol=None), as_of=AS_OF)
        assert result.error_type == "MissingDataError"

    def test_implausible_value_rejected(self, prefetch_factory):
        result = InputExtractor().extract(prefetch_factory(hdl_cholesterol=0), as_of=AS_OF)
        assert result.error_type == "ImplausibleValueError"
        assert result.error_details["values"] == {"hdl_cholesterol": 0}

    def test_implausible_value_passes_without_validation(self, prefetch_factory):
        result = InputExtractor(validate_inputs=False).extract(prefetch_factory(hdl_cholesterol=0), as_of=AS_OF)
        assert result.is_success()
        assert result.value.hdl_cholesterol == 0

    def test_injected_logger(self, prefetch_factory):
        log = logging.getLogger("test.injected.extractor")
        with pytest.MonkeyPatch.context() as mp:
            calls = []
            mp.setattr(log, "warning", lambda message, *args, **kwargs: calls.append(message))
            InputExtractor(log=log).extract(prefetch_factory(hdl_cholesterol=None), as_of=AS_OF)
        assert len(calls) == 1
        assert "hdl_cholesterol" in calls[0]


class TestValidate:
    """Direct validation of an observation set."""

    def test_valid(self):
        observations = ClinicalObservationSet(
            sex="female", age=60, total_cholesterol=200, hdl_cholesterol=60, systolic_bp=130
        )
        assert InputExtractor().validate(observations).is_success()

    def test_unknown_sex(self):
        observations = ClinicalObservationSet(
            sex="unknown", age=60, total_cholesterol=200, hdl_cholesterol=60, systolic_bp=130
        )
        assert InputExtractor().validate(observations).error_type == "InvalidSexError"

    def test_zero_age(self):
        observations = ClinicalObservationSet(
            sex="male", age=0, total_cholesterol=200, hdl_cholesterol=60, systolic_bp=130
        )
        result = InputExtractor().validate(observations)
        assert result.error_type == "ImplausibleValueError"
        assert "age" in result.error_details["values"]
