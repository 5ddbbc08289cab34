"""Clinical Record Schema Definitions.

This module defines the typed clinical resources the ACC/AHA flow reads.
They mirror the subset of FHIR R4/R5 Patient, Observation, Condition and
MedicationStatement that the risk engine needs, and the ``PatientPrefetch``
container that groups them the way a CDS Hooks prefetch does.

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Models are immutable and validated before use
    - JSON field names (camelCase aliases) follow FHIR so raw resources can be
      validated directly; Python code uses the snake_case names
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cvd_risk.domain.enums import AdministrativeGender


_RECORD_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    str_strip_whitespace=True,
)


class Coding(BaseModel):
    """A single code from a terminology system (LOINC, SNOMED CT, ...)."""

    system: Optional[str] = Field(None, description="Terminology system URI")
    code: Optional[str] = Field(None, description="Code within the system")
    display: Optional[str] = Field(None, description="Human readable label")

    model_config = _RECORD_CONFIG


class CodeableConcept(BaseModel):
    """A concept expressed as one or more codings plus optional text."""

    coding: list[Coding] = Field(default_factory=list)
    text: Optional[str] = None

    model_config = _RECORD_CONFIG

    def codes(self) -> list[str]:
        """Return the non-empty codes of all codings, in order."""
        return [c.code for c in self.coding if c.code]


class Quantity(BaseModel):
    """A measured amount."""

    value: Optional[float] = Field(None, description="Numeric value")
    unit: Optional[str] = Field(None, description="Unit representation (e.g. mg/dL)")
    system: Optional[str] = None
    code: Optional[str] = None

    model_config = _RECORD_CONFIG


class ObservationComponent(BaseModel):
    """A component result of a panel observation (e.g. systolic in a BP panel)."""

    code: CodeableConcept
    value_quantity: Optional[Quantity] = Field(None, alias="valueQuantity")
    value_codeable_concept: Optional[CodeableConcept] = Field(None, alias="valueCodeableConcept")

    model_config = _RECORD_CONFIG


class Observation(BaseModel):
    """Clinical measurement or finding (FHIR Observation resource).

    Parameters:
        id: Resource identifier
        status: Observation status (final, amended, ...)
        code: What was observed (LOINC)
        effective_date_time: Clinically relevant time of the observation
        value_quantity: Numeric result (lab values)
        value_codeable_concept: Coded result (smoking status, ethnicity)
        component: Component results (blood pressure panels)
    """

    resource_type: str = Field("Observation", alias="resourceType")
    id: Optional[str] = None
    status: Optional[str] = None
    code: Optional[CodeableConcept] = None
    effective_date_time: Optional[datetime] = Field(None, alias="effectiveDateTime")
    value_quantity: Optional[Quantity] = Field(None, alias="valueQuantity")
    value_codeable_concept: Optional[CodeableConcept] = Field(None, alias="valueCodeableConcept")
    component: list[ObservationComponent] = Field(default_factory=list)

    model_config = _RECORD_CONFIG

    def coded_values(self) -> list[str]:
        """Codes carried by ``valueCodeableConcept``; empty when there is none."""
        if self.value_codeable_concept is None:
            return []
        return self.value_codeable_concept.codes()

    def has_code(self, code: str) -> bool:
        return self.code is not None and code in self.code.codes()


class Condition(BaseModel):
    """Diagnosis record (FHIR Condition resource). Only presence matters here."""

    resource_type: str = Field("Condition", alias="resourceType")
    id: Optional[str] = None
    code: Optional[CodeableConcept] = None
    clinical_status: Optional[CodeableConcept] = Field(None, alias="clinicalStatus")
    onset_date_time: Optional[datetime] = Field(None, alias="onsetDateTime")

    model_config = _RECORD_CONFIG


class MedicationStatement(BaseModel):
    """Medication use record (FHIR MedicationStatement resource)."""

    resource_type: str = Field("MedicationStatement", alias="resourceType")
    id: Optional[str] = None
    status: Optional[str] = None
    medication_codeable_concept: Optional[CodeableConcept] = Field(
        None, alias="medicationCodeableConcept"
    )

    model_config = _RECORD_CONFIG


class Patient(BaseModel):
    """Patient demographics needed by the risk engine (FHIR Patient resource).

    Parameters:
        id: Patient identifier
        gender: FHIR AdministrativeGender
        birth_date: Date of birth; FHIR partial dates (``YYYY``, ``YYYY-MM``)
            are expanded to the first day of the period
    """

    resource_type: str = Field("Patient", alias="resourceType")
    id: Optional[str] = None
    gender: Optional[AdministrativeGender] = Field(None, description="FHIR AdministrativeGender")
    birth_date: Optional[date] = Field(None, alias="birthDate")

    model_config = _RECORD_CONFIG

    @field_validator("gender", mode="before")
    @classmethod
    def validate_gender(cls, v) -> Optional[AdministrativeGender]:
        """Convert string values to FHIR AdministrativeGender enum.

        Accepts common variations and normalizes to FHIR-compliant values.
        Anything unrecognised becomes UNKNOWN, which the engine refuses to score.
        """
        if v is None:
            return v
        if isinstance(v, AdministrativeGender):
            return v

        v_str = str(v).strip().lower()
        mapping = {
            "m": AdministrativeGender.MALE,
            "male": AdministrativeGender.MALE,
            "f": AdministrativeGender.FEMALE,
            "female": AdministrativeGender.FEMALE,
            "o": AdministrativeGender.OTHER,
            "other": AdministrativeGender.OTHER,
            "u": AdministrativeGender.UNKNOWN,
            "unknown": AdministrativeGender.UNKNOWN,
        }
        return mapping.get(v_str, AdministrativeGender.UNKNOWN)

    @field_validator("birth_date", mode="before")
    @classmethod
    def expand_partial_birth_date(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if len(v) == 4 and v.isdigit():
                return f"{v}-01-01"
            if len(v) == 7 and v[4] == "-":
                return f"{v}-01"
        return v


_SEQUENCE_FIELDS = (
    "total_cholesterol",
    "hdl_cholesterol",
    "systolic_bp",
    "smoking_status",
    "type1_diabetes",
    "type2_diabetes",
    "hypertensive_treatment",
    "ethnicity",
)


class PatientPrefetch(BaseModel):
    """Everything the ACC/AHA flow reads for one patient.

    Each sequence may be supplied as a list of resources, a single resource,
    or a FHIR ``Bundle`` whose ``entry[].resource`` items are the records.
    Missing sequences are empty.
    """

    patient: Patient
    total_cholesterol: list[Observation] = Field(default_factory=list, alias="totalCholesterol")
    hdl_cholesterol: list[Observation] = Field(default_factory=list, alias="hdlCholesterol")
    systolic_bp: list[Observation] = Field(default_factory=list, alias="systolicBP")
    smoking_status: list[Observation] = Field(default_factory=list, alias="smokingStatus")
    type1_diabetes: list[Condition] = Field(default_factory=list, alias="type1Diabetes")
    type2_diabetes: list[Condition] = Field(default_factory=list, alias="type2Diabetes")
    hypertensive_treatment: list[MedicationStatement] = Field(
        default_factory=list, alias="hypertensiveTreatment"
    )
    ethnicity: list[Observation] = Field(default_factory=list, alias="ethnicity")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator(*_SEQUENCE_FIELDS, mode="before")
    @classmethod
    def unwrap_bundle(cls, v):
        """Flatten FHIR Bundles and single resources into plain lists."""
        if v is None:
            return []
        if isinstance(v, dict):
            if v.get("resourceType") == "Bundle":
                return [
                    entry["resource"]
                    for entry in v.get("entry") or []
                    if isinstance(entry, dict) and entry.get("resource") is not None
                ]
            return [v]
        return v
