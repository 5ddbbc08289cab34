"""Enumerations shared by the clinical record models and the risk engine."""

from enum import Enum, IntEnum


class AdministrativeGender(str, Enum):
    """FHIR AdministrativeGender value set."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNKNOWN = "unknown"


class Race(str, Enum):
    """Race stratum of the Pooled Cohort Equations.

    The published model only distinguishes African American patients from
    everyone else, so any patient without a matching ethnicity code is OTHER.
    """
    BLACK = "black"
    OTHER = "other"


class SmokingCategory(IntEnum):
    """Five-level smoking category derived from a coded smoking status."""
    NEVER = 0
    SOME_DAY = 1
    FORMER = 2
    CURRENT = 3
    HEAVY = 4


SCORABLE_SEXES = frozenset({AdministrativeGender.MALE, AdministrativeGender.FEMALE})
