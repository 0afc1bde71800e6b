from __future__ import annotations
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

import structlog

from ..core.models import Limits, ProcessResult, Workspace
from .process import run_process
from .rlimits import make_preexec

log = structlog.get_logger(__name__)

# javac bắt buộc public class Main nằm trong Main.java
ENTRY_CLASS = "Main"
SOURCE_NAME = f"{ENTRY_CLASS}.java"

WrapCmd = Callable[[List[str]], List[str]]


class JavaRunner:
    def __init__(
        self,
        javac_cmd: List[str],
        java_cmd: List[str],
        javac_flags: Optional[List[str]] = None,
        java_flags: Optional[List[str]] = None,
        max_output_chars: int = 0,
    ):
        self.javac_cmd = list(javac_cmd)
        self.java_cmd = list(java_cmd)
        self.javac_flags = list(javac_flags or [])
        self.java_flags = list(java_flags or [])
        self.max_output_chars = max_output_chars

    # ---------- command builders ----------

    def compile_argv(self, source: Path) -> List[str]:
        # syntax check và compile phase dùng CHUNG lệnh này
        return [*self.javac_cmd, *self.javac_flags, str(source)]

    def run_argv(self, ws: Workspace) -> List[str]:
        return [*self.java_cmd, *self.java_flags, "-cp", str(ws.path), ENTRY_CLASS]

    @staticmethod
    def child_env(ws: Workspace) -> Dict[str, str]:
        env = {
            "PATH": os.environ.get("PATH", os.defpath),
            "HOME": str(ws.path),
            "LANG": "C.UTF-8",
        }
        if os.environ.get("JAVA_HOME"):
            env["JAVA_HOME"] = os.environ["JAVA_HOME"]
        return env

    def _exec(self, argv: List[str], ws: Workspace, timeout_s: int, limits: Limits,
              wrap_cmd: Optional[WrapCmd], stdin: Optional[str] = None) -> ProcessResult:
        if wrap_cmd:
            argv = wrap_cmd(argv)
        return run_process(
            argv,
            cwd=ws.path,
            timeout_s=timeout_s,
            stdin=stdin,
            env=self.child_env(ws),
            preexec=make_preexec(limits),
            max_output_chars=self.max_output_chars,
        )

    # ---------- phases ----------

    def check_syntax(self, ws: Workspace, source: Path, limits: Limits,
                     wrap_cmd: Optional[WrapCmd] = None) -> Optional[ProcessResult]:
        """
        Pre-check: chạy javac đúng như compile phase, bỏ các .class sinh ra.
        Trả None nếu sạch lỗi, ngược lại trả ProcessResult chứa diagnostics
        (hoặc timed_out=True nếu javac chạy quá compile timeout).
        """
        res = self._exec(self.compile_argv(source), ws, limits.compile_timeout_seconds, limits, wrap_cmd)
        for artifact in ws.path.glob("*.class"):
            artifact.unlink()
        if res.rc == 0 and not res.timed_out:
            return None
        return res

    def compile(self, ws: Workspace, source: Path, limits: Limits,
                wrap_cmd: Optional[WrapCmd] = None) -> ProcessResult:
        res = self._exec(self.compile_argv(source), ws, limits.compile_timeout_seconds, limits, wrap_cmd)
        log.info("compile_finished", rc=res.rc, timed_out=res.timed_out, duration_s=round(res.duration_s, 3))
        return res

    def run(self, ws: Workspace, limits: Limits, stdin: Optional[str] = None,
            wrap_cmd: Optional[WrapCmd] = None) -> ProcessResult:
        res = self._exec(self.run_argv(ws), ws, limits.run_timeout_seconds, limits, wrap_cmd, stdin=stdin)
        log.info("run_finished", rc=res.rc, timed_out=res.timed_out, duration_s=round(res.duration_s, 3))
        return res
