import pytest

from javabox.core.errors import InternalFault
from javabox.core.models import OutcomeKind, ProcessResult
from javabox.services.classifier import classify


def pr(rc=0, output="", timed_out=False):
    return ProcessResult(rc=rc, output=output, timed_out=timed_out, duration_s=0.1)


@pytest.mark.parametrize(
    "kwargs, kind, text",
    [
        ({"size_rejected": True}, OutcomeKind.SIZE_REJECTED, ""),
        ({"syntax_diagnostics": "Main.java:1: error"}, OutcomeKind.SYNTAX_ERROR, "Main.java:1: error"),
        ({"compile_result": pr(-9, "half", True)}, OutcomeKind.COMPILE_TIMEOUT, ""),
        ({"compile_result": pr(1, "cannot find symbol")}, OutcomeKind.COMPILE_ERROR, "cannot find symbol"),
        ({"compile_result": pr(), "run_result": pr(-9, "1\n2\n", True)}, OutcomeKind.RUN_TIMEOUT, ""),
        ({"compile_result": pr(), "run_result": pr(1, "boom\n")}, OutcomeKind.RUN_ERROR, "boom\n"),
        ({"compile_result": pr(), "run_result": pr(0, "42\n")}, OutcomeKind.SUCCESS, "42\n"),
        ({"fault": OSError("disk full")}, OutcomeKind.INTERNAL_FAULT, "Internal error"),
    ],
)
def test_table(kwargs, kind, text):
    outcome = classify(**kwargs)
    assert outcome.kind == kind
    assert outcome.text == text


def test_fault_wins_over_everything():
    outcome = classify(fault=InternalFault("/tmp/x: EACCES"), size_rejected=True, run_result=pr())
    assert outcome.kind == OutcomeKind.INTERNAL_FAULT
    assert "/tmp/x" not in outcome.text


def test_timeout_checked_before_exit_code():
    assert classify(run_result=pr(rc=0, timed_out=True)).kind == OutcomeKind.RUN_TIMEOUT


def test_empty_diagnostics_get_exit_code_text():
    outcome = classify(compile_result=pr(rc=2))
    assert outcome.kind == OutcomeKind.COMPILE_ERROR
    assert outcome.text == "javac exited with code 2\n"


def test_missing_signals_is_internal_fault():
    assert classify().kind == OutcomeKind.INTERNAL_FAULT
    assert classify(compile_result=pr()).kind == OutcomeKind.INTERNAL_FAULT


def test_only_success_is_ok():
    assert classify(run_result=pr()).ok
    assert not classify(run_result=pr(rc=1)).ok


def test_silent_run_error_keeps_empty_output():
    outcome = classify(compile_result=pr(), run_result=pr(rc=1, output=""))
    assert outcome.kind == OutcomeKind.RUN_ERROR
    assert outcome.text == ""
