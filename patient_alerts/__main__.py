"""Run the fetch, classify and submit pipeline once and report the outcome."""
import logging
import sys

from pydantic import ValidationError

from .classifier import AlertSet, classify
from .config import Settings
from .errors import AssessmentError, NoPatientsError
from .fetcher import fetch_all_patients
from .submitter import submit_results

logger = logging.getLogger("patient_alerts")


def run(settings: Settings) -> AlertSet:
    print("Fetching patients...")
    patients = fetch_all_patients(settings)
    print(f"Got {len(patients)} patients")
    if not patients:
        raise NoPatientsError("No patient records were fetched; nothing to submit")

    print("Scoring")
    alerts = classify(patients)
    print("Counts:", alerts.counts())

    if settings.dry_run:
        print("Dry run, not submitting. Payload:")
        print(alerts.to_payload())
        return alerts

    print("Submitting")
    resp = submit_results(alerts, settings)
    print("Server response:")
    print(resp)
    return alerts


def main() -> int:
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Invalid configuration (set KSENSE_API_KEY and friends):\n{e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        run(settings)
    except AssessmentError as e:
        logger.error("Assessment run failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
