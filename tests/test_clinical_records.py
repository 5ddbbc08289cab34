"""Tests for clinical record schemas.

These tests verify that the record models accept FHIR-shaped JSON and
normalize it into the typed structures the risk engine reads.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from cvd_risk.domain.clinical_records import Observation, Patient, PatientPrefetch
from cvd_risk.domain.enums import AdministrativeGender


class TestPatient:
    """Test suite for Patient model."""

    @pytest.mark.parametrize("raw,expected", [
        ("male", AdministrativeGender.MALE),
        ("M", AdministrativeGender.MALE),
        (" Female ", AdministrativeGender.FEMALE),
        ("f", AdministrativeGender.FEMALE),
        ("other", AdministrativeGender.OTHER),
        ("unknown", AdministrativeGender.UNKNOWN),
        ("nonsense", AdministrativeGender.UNKNOWN),
    ])
    def test_gender_normalization(self, raw, expected):
        assert Patient(gender=raw).gender == expected

    def test_gender_optional(self):
        assert Patient().gender is None

    def test_full_birth_date(self):
        assert Patient.model_validate({"birthDate": "1971-03-14"}).birth_date == date(1971, 3, 14)

    def test_partial_birth_dates(self):
        """FHIR year and year-month dates expand to the first day."""
        assert Patient.model_validate({"birthDate": "1971"}).birth_date == date(1971, 1, 1)
        assert Patient.model_validate({"birthDate": "1971-06"}).birth_date == date(1971, 6, 1)

    def test_invalid_birth_date(self):
        with pytest.raises(ValidationError):
            Patient.model_validate({"birthDate": "not-a-date"})

    def test_immutable(self):
        patient = Patient(id="p1", gender="male")
        with pytest.raises(ValidationError):
            patient.id = "p2"


class TestObservation:
    """Test suite for Observation model."""

    def test_camel_case_fields(self):
        observation = Observation.model_validate({
            "resourceType": "Observation",
            "code": {"coding": [{"system": "http://loinc.org", "code": "2093-3"}]},
            "valueQuantity": {"value": 213, "unit": "mg/dL"},
            "effectiveDateTime": "2026-05-01T09:00:00Z",
        })
        assert observation.value_quantity.value == 213
        assert observation.has_code("2093-3")
        assert not observation.has_code("2085-9")
        assert observation.effective_date_time.year == 2026

    def test_coded_values(self):
        observation = Observation.model_validate({
            "valueCodeableConcept": {"coding": [{"code": "449868002"}, {"display": "no code"}]},
        })
        assert observation.coded_values() == ["449868002"]

    def test_coded_values_without_concept(self):
        assert Observation().coded_values() == []


class TestPatientPrefetch:
    """Test suite for PatientPrefetch container."""

    def test_lists(self, prefetch_dict_factory):
        prefetch = PatientPrefetch.model_validate(prefetch_dict_factory(type2_diabetes=True))
        assert len(prefetch.total_cholesterol) == 1
        assert len(prefetch.type2_diabetes) == 1
        assert prefetch.type1_diabetes == []

    def test_bundle_unwrapped(self, prefetch_dict_factory):
        document = prefetch_dict_factory()
        document["hdlCholesterol"] = {
            "resourceType": "Bundle",
            "type": "searchset",
            "entry": [
                {"resource": document["hdlCholesterol"][0]},
                {"fullUrl": "urn:uuid:no-resource"},
            ],
        }
        prefetch = PatientPrefetch.model_validate(document)
        assert len(prefetch.hdl_cholesterol) == 1
        assert prefetch.hdl_cholesterol[0].value_quantity.value == 50

    def test_empty_bundle(self, prefetch_dict_factory):
        document = prefetch_dict_factory()
        document["ethnicity"] = {"resourceType": "Bundle", "type": "searchset"}
        assert PatientPrefetch.model_validate(document).ethnicity == []

    def test_single_resource(self, prefetch_dict_factory):
        document = prefetch_dict_factory()
        document["totalCholesterol"] = document["totalCholesterol"][0]
        assert len(PatientPrefetch.model_validate(document).total_cholesterol) == 1

    def test_null_sequence(self, prefetch_dict_factory):
        document = prefetch_dict_factory()
        document["systolicBP"] = None
        assert PatientPrefetch.model_validate(document).systolic_bp == []

    def test_snake_case_names(self):
        prefetch = PatientPrefetch(patient=Patient(id="p1"), hdl_cholesterol=[Observation()])
        assert len(prefetch.hdl_cholesterol) == 1

    def test_patient_required(self):
        with pytest.raises(ValidationError):
            PatientPrefetch.model_validate({"totalCholesterol": []})
