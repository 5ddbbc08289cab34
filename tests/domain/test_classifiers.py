"""Tests for race and smoking status classification."""

import pytest

from cvd_risk.domain.clinical_records import Observation
from cvd_risk.domain.enums import Race, SmokingCategory
from cvd_risk.domain.services.classifiers import (
    determine_race,
    determine_smoking_category,
    determine_smoking_status,
)


def coded_observation(*codes: str) -> Observation:
    return Observation.model_validate({
        "resourceType": "Observation",
        "valueCodeableConcept": {"coding": [{"code": code} for code in codes]},
    })


class TestDetermineRace:
    """Race is BLACK only for the Black or African American answer code."""

    def test_black_code(self):
        assert determine_race([coded_observation("LA6162-7")]) == Race.BLACK

    def test_black_code_among_others(self):
        assert determine_race([coded_observation("LA4457-3"), coded_observation("2135-2", "LA6162-7")]) == Race.BLACK

    def test_other_code(self):
        assert determine_race([coded_observation("LA4457-3")]) == Race.OTHER

    def test_empty_sequence(self):
        assert determine_race([]) == Race.OTHER

    def test_observation_without_value(self):
        assert determine_race([Observation()]) == Race.OTHER


class TestDetermineSmokingCategory:
    """Five-level category table."""

    @pytest.mark.parametrize("code,category", [
        ("LA18978-9", SmokingCategory.NEVER),
        ("LA18980-5", SmokingCategory.NEVER),
        ("266919005", SmokingCategory.NEVER),
        ("LA15920-4", SmokingCategory.SOME_DAY),
        ("8517006", SmokingCategory.SOME_DAY),
        ("LA18977-1", SmokingCategory.FORMER),
        ("LA18982-1", SmokingCategory.FORMER),
        ("LA18979-7", SmokingCategory.CURRENT),
        ("LA18976-3", SmokingCategory.CURRENT),
        ("449868002", SmokingCategory.CURRENT),
        ("LA18981-3", SmokingCategory.HEAVY),
    ])
    def test_code_table(self, code, category):
        assert determine_smoking_category(coded_observation(code)) == category

    def test_unknown_code_is_never(self):
        assert determine_smoking_category(coded_observation("not-a-code")) == SmokingCategory.NEVER

    def test_missing_observation_is_never(self):
        assert determine_smoking_category(None) == SmokingCategory.NEVER

    def test_observation_without_coded_value_is_never(self):
        assert determine_smoking_category(Observation()) == SmokingCategory.NEVER

    def test_first_matching_row_wins(self):
        """A value carrying both a never and a current code is classified as never."""
        assert determine_smoking_category(coded_observation("449868002", "266919005")) == SmokingCategory.NEVER


class TestDetermineSmokingStatus:
    """Binary smoker indicator."""

    @pytest.mark.parametrize("code,expected", [
        ("266919005", 0),
        ("8517006", 0),
        ("LA18977-1", 1),
        ("449868002", 1),
        ("LA18981-3", 1),
        ("unknown", 0),
    ])
    def test_indicator(self, code, expected):
        assert determine_smoking_status(coded_observation(code)) == expected

    def test_none_is_non_smoker(self):
        assert determine_smoking_status(None) == 0
