"""
Tests for the run orchestration and process exit codes.

The fetcher and submitter are patched at the names __main__ imported.
"""
from unittest.mock import patch

import pytest

from patient_alerts.__main__ import main, run
from patient_alerts.config import Settings
from patient_alerts.errors import FetchExhaustedError, NoPatientsError, SubmissionExhaustedError

PATIENTS = [
    {"patient_id": "P1", "blood_pressure": "150/95", "temperature": "98", "age": "70"},
    {"patient_id": "P2", "blood_pressure": "bad", "temperature": "101.5", "age": "30"},
]


def test_run_fetches_classifies_and_submits(settings, capsys):
    with patch("patient_alerts.__main__.fetch_all_patients", return_value=PATIENTS), \
            patch("patient_alerts.__main__.submit_results", return_value={"success": True}) as mock_submit:
        alerts = run(settings)

    assert alerts.high_risk == ["P1"]
    mock_submit.assert_called_once_with(alerts, settings)
    out = capsys.readouterr().out
    assert "Got 2 patients" in out
    assert "'success': True" in out


def test_run_with_no_patients_raises(settings):
    with patch("patient_alerts.__main__.fetch_all_patients", return_value=[]), \
            patch("patient_alerts.__main__.submit_results") as mock_submit:
        with pytest.raises(NoPatientsError):
            run(settings)

    mock_submit.assert_not_called()


def test_dry_run_skips_submission(capsys):
    dry = Settings(api_key="k", dry_run=True, _env_file=None)
    with patch("patient_alerts.__main__.fetch_all_patients", return_value=PATIENTS), \
            patch("patient_alerts.__main__.submit_results") as mock_submit:
        run(dry)

    mock_submit.assert_not_called()
    assert "high_risk_patients" in capsys.readouterr().out


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("KSENSE_API_KEY", "test-key")
    return monkeypatch


def test_main_exit_zero_on_success(env):
    with patch("patient_alerts.__main__.fetch_all_patients", return_value=PATIENTS), \
            patch("patient_alerts.__main__.submit_results", return_value={}):
        assert main() == 0


@pytest.mark.parametrize(
    "fetch_kwargs",
    [
        {"return_value": []},
        {"side_effect": FetchExhaustedError("GET page 1 failed", status_code=429, attempt=5, page=1)},
    ],
)
def test_main_exit_one_on_fetch_failure(env, fetch_kwargs):
    with patch("patient_alerts.__main__.fetch_all_patients", **fetch_kwargs):
        assert main() == 1


def test_main_exit_one_on_submission_failure(env):
    error = SubmissionExhaustedError("Submission failed", status_code=503, attempt=3)
    with patch("patient_alerts.__main__.fetch_all_patients", return_value=PATIENTS), \
            patch("patient_alerts.__main__.submit_results", side_effect=error):
        assert main() == 1


def test_main_exit_two_without_api_key(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("KSENSE_API_KEY", raising=False)
    with patch("patient_alerts.__main__.fetch_all_patients") as mock_fetch:
        assert main() == 2

    mock_fetch.assert_not_called()
    assert "KSENSE_API_KEY" in capsys.readouterr().err
