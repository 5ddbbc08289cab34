"""Lifestyle advisories triggered alongside the risk score.

Each rule only looks at its own input, so it can be evaluated whether or not
the score itself could be calculated.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from cvd_risk.domain.clinical_records import Observation
from cvd_risk.domain.ports import CardSinkPort
from cvd_risk.domain.risk_models import REDUCE_BP_CARD_ID, STOP_SMOKING_CARD_ID
from cvd_risk.domain.services.classifiers import determine_smoking_status
from cvd_risk.domain.services.extractor import get_systolic_bp

logger = logging.getLogger(__name__)

SBP_ADVISORY_THRESHOLD = 140.0


def should_stop_smoking(smoking_obs: Optional[Observation]) -> bool:
    return determine_smoking_status(smoking_obs) > 0


def should_reduce_blood_pressure(systolic_bp: float) -> bool:
    """SBP strictly above 140 mmHg."""
    return systolic_bp > SBP_ADVISORY_THRESHOLD


def recommend_stop_smoking_if_applicable(
    smoking_status: Sequence[Observation],
    sink: CardSinkPort,
    effective_date: datetime,
) -> bool:
    """Emit the stop-smoking card for a current smoker.

    Returns:
        bool: True if the card was emitted
    """
    smoking_obs = smoking_status[0] if smoking_status else None
    if not should_stop_smoking(smoking_obs):
        return False
    sink.emit(STOP_SMOKING_CARD_ID, {"effectiveDate": effective_date})
    return True


def recommend_reduce_bp_if_applicable(
    systolic_bp_observations: Sequence[Observation],
    sink: CardSinkPort,
    effective_date: datetime,
    log: Optional[logging.Logger] = None,
) -> bool:
    """Emit the reduce-blood-pressure card when SBP exceeds the threshold.

    The rule needs an SBP value; without one it is skipped.

    Returns:
        bool: True if the card was emitted
    """
    systolic_bp = get_systolic_bp(systolic_bp_observations)
    if systolic_bp is None:
        (log or logger).debug("No systolic blood pressure available, skipping blood pressure advisory")
        return False
    if not should_reduce_blood_pressure(systolic_bp):
        return False
    sink.emit(REDUCE_BP_CARD_ID, {"effectiveDate": effective_date})
    return True
