from __future__ import annotations
from typing import Optional

from ..core.errors import InternalFault
from ..core.models import ExecutionOutcome, OutcomeKind, ProcessResult


def _compile_diagnostics(res: ProcessResult) -> str:
    # diagnostics của compile error không bao giờ rỗng
    return res.output if res.output else f"javac exited with code {res.rc}\n"


def classify(
    *,
    size_rejected: bool = False,
    syntax_diagnostics: Optional[str] = None,
    compile_result: Optional[ProcessResult] = None,
    run_result: Optional[ProcessResult] = None,
    fault: Optional[BaseException] = None,
) -> ExecutionOutcome:
    """
    Map tín hiệu thô của pipeline sang đúng một ExecutionOutcome. Không side effect.

    Thứ tự ưu tiên: fault > size > syntax > compile (timeout, rc) > run (timeout, rc).
    Timeout luôn được xét trước exit code vì process bị kill cũng có rc != 0.
    """
    if fault is not None:
        return ExecutionOutcome(OutcomeKind.INTERNAL_FAULT, InternalFault.public_message)
    if size_rejected:
        return ExecutionOutcome(OutcomeKind.SIZE_REJECTED)
    if syntax_diagnostics is not None:
        return ExecutionOutcome(OutcomeKind.SYNTAX_ERROR, syntax_diagnostics)
    if compile_result is not None:
        if compile_result.timed_out:
            return ExecutionOutcome(OutcomeKind.COMPILE_TIMEOUT)
        if compile_result.rc != 0:
            return ExecutionOutcome(OutcomeKind.COMPILE_ERROR, _compile_diagnostics(compile_result))
    if run_result is not None:
        if run_result.timed_out:
            return ExecutionOutcome(OutcomeKind.RUN_TIMEOUT)
        if run_result.rc != 0:
            return ExecutionOutcome(OutcomeKind.RUN_ERROR, run_result.output)
        return ExecutionOutcome(OutcomeKind.SUCCESS, run_result.output)
    # compile xong mà không có run phase -> pipeline dừng giữa chừng
    return ExecutionOutcome(OutcomeKind.INTERNAL_FAULT, InternalFault.public_message)
