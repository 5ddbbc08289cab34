"""ACC/AHA risk flow.

Sequences extraction, scoring and the advisories for one patient and hands
the resulting cards to a ``CardSinkPort``:

    1. Extract the Pooled Cohort Equation inputs (InputExtractor)
    2. Score the patient and the healthy reference (compare_risk)
    3. Emit ``card-score`` with both scores
    4. Evaluate the stop-smoking and reduce-blood-pressure advisories

The equations are those of the 2013 ACC/AHA guideline on the assessment of
cardiovascular risk (Goff et al., Circulation. 2014;129(suppl 2):S49-S73).
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional, Union

from cvd_risk.domain.clinical_records import PatientPrefetch
from cvd_risk.domain.ports import CardSinkPort, Result
from cvd_risk.domain.risk_models import SCORE_CARD_ID, RiskResult
from cvd_risk.domain.services.comparator import compare_risk
from cvd_risk.domain.services.extractor import InputExtractor
from cvd_risk.domain.services.recommendations import (
    recommend_reduce_bp_if_applicable,
    recommend_stop_smoking_if_applicable,
)

logger = logging.getLogger(__name__)


def zoned_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


class ACCAHAFlow:
    """Runs the ACC/AHA risk calculation for one patient at a time.

    The flow keeps no per-patient state, so one instance can serve any number
    of patients, concurrently if needed.

    Parameters:
        extractor: Input extractor (defaults to one with validation enabled)
        clock: Returns the effective timestamp of emitted cards
        advisories_require_score: Only evaluate advisories when a score was
            produced. By default each advisory is evaluated on its own inputs.
        log: Logger receiving diagnostics (defaults to this module's logger)
    """

    def __init__(
        self,
        extractor: Optional[InputExtractor] = None,
        clock: Callable[[], datetime] = zoned_now,
        advisories_require_score: bool = False,
        log: Optional[logging.Logger] = None,
    ):
        self.log = log or logger
        self.extractor = extractor or InputExtractor(log=self.log)
        self.clock = clock
        self.advisories_require_score = advisories_require_score

    def calculate(
        self,
        prefetch: PatientPrefetch,
        as_of: Optional[Union[date, datetime]] = None,
    ) -> Result[RiskResult]:
        """Validate the prefetch and return the patient and healthy-reference scores.

        Returns:
            Result[RiskResult]: failure when the chart lacks required data or
            the patient's sex is neither male nor female
        """
        extraction = self.extractor.extract(prefetch, as_of=as_of or self.clock())
        if extraction.is_failure():
            return Result.failure_result(
                extraction.error,
                error_type=extraction.error_type,
                error_details=extraction.error_details,
            )

        risk = compare_risk(extraction.value, log=self.log)
        self.log.info(
            f"ACC/AHA risk for patient {prefetch.patient.id}: "
            f"patient={risk.patient_score:.2f}%, healthy={risk.healthy_score:.2f}%"
        )
        return Result.success_result(risk)

    def execute(self, prefetch: PatientPrefetch, sink: CardSinkPort) -> Result[RiskResult]:
        """Run the flow and emit the score card and any triggered advisories.

        Parameters:
            prefetch: Patient and the prefetched clinical records
            sink: Receives ``(card_id, parameters)`` pairs

        Returns:
            Result[RiskResult]: the same outcome ``calculate`` reports
        """
        effective_date = self.clock()
        result = self.calculate(prefetch, as_of=effective_date)

        if result.is_success():
            sink.emit(SCORE_CARD_ID, {
                "effectiveDate": effective_date,
                "patientScoreValue": result.value.patient_score,
                "healthyScoreValue": result.value.healthy_score,
            })
        elif self.advisories_require_score:
            return result

        recommend_stop_smoking_if_applicable(prefetch.smoking_status, sink, effective_date)
        recommend_reduce_bp_if_applicable(prefetch.systolic_bp, sink, effective_date, log=self.log)
        return result
