"""End-to-End Example: prefetch documents and a CSV cohort through the engine.

This example demonstrates the two ways data moves through the system:
1. JSON prefetch -> PatientPrefetch -> ACC/AHA flow -> cards (JSON Lines)
2. CSV cohort -> pandas chunks -> vectorized Pooled Cohort Equations

Run from the repository root after ``pip install -e .``:

    python examples/end_to_end_flow.py
"""

import json
import tempfile
from pathlib import Path

from cvd_risk.adapters.sinks import JSONLinesCardSink
from cvd_risk.infrastructure.logging_config import setup_logging
from cvd_risk.main import process_batch_source, process_prefetch_source

EXAMPLES_DIR = Path(__file__).parent


def run_prefetch_example(output_dir: Path):
    """Score the sample prefetch documents and write their cards."""
    source = EXAMPLES_DIR / "prefetch_sample.json"
    cards_path = output_dir / "cards.jsonl"

    print(f"\n[1] Prefetch flow: {source.name}")
    with JSONLinesCardSink(cards_path) as sink:
        outcomes = process_prefetch_source(str(source), sink=sink)

    for outcome in outcomes:
        if outcome.result.is_success():
            patient_score, healthy_score = outcome.result.value.as_tuple()
            print(f"  {outcome.patient_id}: {patient_score:.1f}% (healthy reference {healthy_score:.1f}%)")
        else:
            print(f"  {outcome.patient_id}: no score ({outcome.result.error_type}: {outcome.result.error})")

    print(f"  Cards written to {cards_path}:")
    for line in cards_path.read_text(encoding="utf-8").splitlines():
        card = json.loads(line)
        print(f"    {card['patient_id']}: {card['card_id']}")


def run_batch_example(output_dir: Path):
    """Score the sample CSV cohort."""
    source = EXAMPLES_DIR / "cohort_sample.csv"

    print(f"\n[2] Batch scoring: {source.name}")
    scored, failure_count = process_batch_source(str(source), chunk_size=2)
    print(scored[["patient_id", "sex", "race", "age", "patient_risk", "healthy_risk"]].round(2).to_string(index=False))
    print(f"  Unscored rows: {failure_count}")

    output_path = output_dir / "cohort_scored.csv"
    scored.to_csv(output_path, index=False)
    print(f"  Scored cohort written to {output_path}")


def main():
    setup_logging(log_level="WARNING")
    with tempfile.TemporaryDirectory() as tmp:
        output_dir = Path(tmp)
        run_prefetch_example(output_dir)
        run_batch_example(output_dir)


if __name__ == "__main__":
    main()
