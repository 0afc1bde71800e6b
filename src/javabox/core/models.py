from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

class OutcomeKind(str, Enum):
    SIZE_REJECTED = "SIZE_REJECTED"
    SYNTAX_ERROR = "SYNTAX_ERROR"
    COMPILE_ERROR = "COMPILE_ERROR"
    COMPILE_TIMEOUT = "COMPILE_TIMEOUT"
    RUN_TIMEOUT = "RUN_TIMEOUT"
    RUN_ERROR = "RUN_ERROR"
    SUCCESS = "SUCCESS"
    INTERNAL_FAULT = "INTERNAL_FAULT"

@dataclass(frozen=True)
class Submission:
    code: str
    stdin: Optional[str] = None  # một dòng input, không đọc từ stdin của host

@dataclass
class Limits:
    cpu_seconds: int
    memory_bytes: int  # 0 = không áp RLIMIT_AS (JVM cần reserve vùng nhớ ảo lớn)
    nofile: int
    compile_timeout_seconds: int
    run_timeout_seconds: int

@dataclass
class Workspace:
    workspace_id: str
    path: Path        # thư mục tuyệt đối, chỉ một submission sở hữu

@dataclass
class ProcessResult:
    rc: int
    output: str       # stdout + stderr gộp
    timed_out: bool
    duration_s: float

@dataclass(frozen=True)
class ExecutionOutcome:
    kind: OutcomeKind
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS
