from __future__ import annotations
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator
from typing import Optional

from .core.models import ExecutionOutcome, OutcomeKind, Submission
from .core.utils import is_single_line
from .logging import setup_logging
from .services.execution_service import ExecutionService

setup_logging()

app = FastAPI(title="Java Sandbox API")

svc = ExecutionService()

# --------- Schemas ---------
class ExecuteReq(BaseModel):
    code: str
    input: Optional[str] = None  # một dòng, đưa vào stdin của chương trình

    @field_validator("input")
    @classmethod
    def _single_line(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_single_line(v):
            raise ValueError("input must be a single line")
        return v

class ExecuteRes(BaseModel):
    outcome: str
    output: str

# status + prefix theo từng loại outcome
_STATUS = {
    OutcomeKind.SUCCESS: (200, ""),
    OutcomeKind.SYNTAX_ERROR: (400, "Syntax Error:\n"),
    OutcomeKind.COMPILE_ERROR: (400, "Compilation Error:\n"),
    OutcomeKind.RUN_ERROR: (400, "Execution Error:\n"),
    OutcomeKind.COMPILE_TIMEOUT: (400, "Compilation timed out"),
    OutcomeKind.RUN_TIMEOUT: (400, "Execution timed out"),
    OutcomeKind.SIZE_REJECTED: (413, "Error: Code too large"),
    OutcomeKind.INTERNAL_FAULT: (500, "Error: "),
}

def to_response(outcome: ExecutionOutcome) -> JSONResponse:
    status, prefix = _STATUS[outcome.kind]
    if ExecutionService.is_timeout(outcome) or outcome.kind == OutcomeKind.SIZE_REJECTED:
        body = prefix  # message cố định, không kèm output
    else:
        body = prefix + outcome.text
    res = ExecuteRes(outcome=outcome.kind.value, output=body)
    return JSONResponse(status_code=status, content=res.model_dump())

# --------- Endpoints ---------

@app.get("/health")
def health():
    return {"ok": True}

@app.post("/execute", response_model=ExecuteRes)
def execute(req: ExecuteReq):
    if not req.code:
        raise HTTPException(status_code=400, detail="Error: No code provided")
    if not svc.size_ok(req.code):
        # chặn ở boundary, không tạo workspace
        return to_response(ExecutionOutcome(OutcomeKind.SIZE_REJECTED))
    outcome = svc.execute(Submission(code=req.code, stdin=req.input))
    return to_response(outcome)
