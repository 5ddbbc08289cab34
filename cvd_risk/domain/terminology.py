"""Terminology codes recognised by the ACC/AHA flow.

LOINC and SNOMED CT literals are kept here as opaque identifiers so they can
be audited against the source value sets in one place.
"""

from cvd_risk.domain.enums import SmokingCategory

# LOINC: Systolic blood pressure (component of the 85354-9 BP panel)
SYSTOLIC_BP_CODE = "8480-6"

# LOINC answer: Black or African American
BLACK_OR_AFRICAN_AMERICAN_CODE = "LA6162-7"

# SNOMED CT: Never smoked tobacco. Used when no coded smoking status exists.
DEFAULT_SMOKING_CODE = "266919005"

# Rows are tested in order; the first row sharing a code with the
# observation decides the category.
SMOKING_CATEGORY_CODES: tuple[tuple[SmokingCategory, frozenset[str]], ...] = (
    (SmokingCategory.NEVER, frozenset({"LA18978-9", "LA18980-5", "266919005"})),
    (SmokingCategory.SOME_DAY, frozenset({"LA15920-4", "8517006"})),
    (SmokingCategory.FORMER, frozenset({"LA18977-1", "LA18982-1"})),
    (SmokingCategory.CURRENT, frozenset({"LA18979-7", "LA18976-3", "449868002"})),
    (SmokingCategory.HEAVY, frozenset({"LA18981-3"})),
)

NON_SMOKER_CATEGORIES = frozenset({SmokingCategory.NEVER, SmokingCategory.SOME_DAY})
