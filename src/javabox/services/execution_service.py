from __future__ import annotations
import subprocess
from typing import Any, Dict, Optional

import structlog

from ..core.errors import InternalFault
from ..core.models import ExecutionOutcome, Limits, OutcomeKind, Submission, Workspace
from ..isolation.isolation import IsolationPipeline, probe_capabilities
from ..runner.java_runner import JavaRunner
from ..settings import Settings, load_settings
from .classifier import classify
from .storage import WorkspaceStorage

log = structlog.get_logger(__name__)


class ExecutionService:
    """
    Pipeline: validate size -> workspace -> Main.java -> syntax check -> compile -> run -> classify.
    Mỗi lần execute() dùng workspace và process riêng nên gọi song song từ nhiều worker được.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()
        s = self.settings

        self.storage = WorkspaceStorage(s.workspaces_dir)
        self.java = JavaRunner(
            javac_cmd=s.javac_cmd,
            java_cmd=s.java_cmd,
            javac_flags=s.javac_flags,
            java_flags=s.java_flags,
            max_output_chars=s.max_output_chars,
        )
        # Isolation pipeline (ns, cgroups)
        self.iso = IsolationPipeline(strategy=s.iso_strategy, allow_network=s.allow_network)
        self.capabilities = probe_capabilities(
            allow_network=s.allow_network, strategy=s.iso_strategy,
            javac_cmd=s.javac_cmd, java_cmd=s.java_cmd,
        )
        # wrapper hỏng (vd. userns bị tắt) thì mọi submission là INTERNAL_FAULT,
        # không để lỗi của unshare/systemd-run lẫn vào diagnostics của javac
        self.iso_error = self.iso.self_test(self._limits())
        self.capabilities["isolation_ok"] = self.iso_error is None
        if self.iso_error:
            log.error("isolation_unusable", strategy=s.iso_strategy, detail=self.iso_error)
        log.info("execution_service_ready", **self.capabilities)

    def _limits(self) -> Limits:
        lim = self.settings.limits
        return Limits(
            cpu_seconds=int(lim.get("cpu_seconds", 20)),
            memory_bytes=int(lim.get("memory_bytes", 0)),
            nofile=int(lim.get("nofile", 256)),
            compile_timeout_seconds=self.settings.compile_timeout_s,
            run_timeout_seconds=self.settings.run_timeout_s,
        )

    def size_ok(self, code: str) -> bool:
        return len(code) <= self.settings.max_source_chars

    def execute(self, sub: Submission) -> ExecutionOutcome:
        if not self.size_ok(sub.code):
            log.info("submission_rejected", chars=len(sub.code), max_chars=self.settings.max_source_chars)
            return classify(size_rejected=True)

        ws: Optional[Workspace] = None
        meta: Dict[str, Any] = {}
        try:
            ws = self.storage.create_workspace()
            outcome = self._pipeline(ws, sub, meta)
        except (InternalFault, OSError, UnicodeError, subprocess.SubprocessError) as e:
            detail = e.detail if isinstance(e, InternalFault) else repr(e)
            log.error("internal_fault", detail=detail, workspace=str(ws.path) if ws else None, exc_info=True)
            outcome = classify(fault=e)
        finally:
            if ws is not None and not self.settings.keep_workspaces:
                self.storage.cleanup(ws)

        if ws is not None and self.settings.keep_workspaces:
            self._save_meta(ws, outcome, meta)
        log.info("submission_finished", outcome=outcome.kind.value,
                 workspace_id=ws.workspace_id if ws else None)
        return outcome

    def _pipeline(self, ws: Workspace, sub: Submission, meta: Dict[str, Any]) -> ExecutionOutcome:
        if self.iso_error:
            raise InternalFault(f"isolation '{self.settings.iso_strategy}' unusable: {self.iso_error}")
        limits = self._limits()
        meta["limits_applied"] = limits.__dict__
        wrap_cmd = self.iso.build(limits)

        source = self.storage.materialize(ws, sub.code)
        meta["planned_cmd"] = wrap_cmd(self.java.run_argv(ws))

        if self.settings.syntax_check:
            check = self.java.check_syntax(ws, source, limits, wrap_cmd=wrap_cmd)
            log.info("syntax_checked", workspace_id=ws.workspace_id, clean=check is None)
            if check is not None:
                meta["syntax_check"] = {"rc": check.rc, "timed_out": check.timed_out}
                if check.timed_out:
                    return classify(compile_result=check)
                return classify(syntax_diagnostics=check.output or f"javac exited with code {check.rc}\n")

        compiled = self.java.compile(ws, source, limits, wrap_cmd=wrap_cmd)
        meta["compile"] = {"rc": compiled.rc, "timed_out": compiled.timed_out, "duration_s": compiled.duration_s}
        if compiled.timed_out or compiled.rc != 0:
            return classify(compile_result=compiled)

        ran = self.java.run(ws, limits, stdin=sub.stdin, wrap_cmd=wrap_cmd)
        meta["run"] = {"rc": ran.rc, "timed_out": ran.timed_out, "duration_s": ran.duration_s}
        return classify(compile_result=compiled, run_result=ran)

    def _save_meta(self, ws: Workspace, outcome: ExecutionOutcome, meta: Dict[str, Any]) -> None:
        meta = {
            "workspace_id": ws.workspace_id,
            "outcome": outcome.kind.value,
            **meta,
            "strategy": self.settings.iso_strategy,
            "capabilities": self.capabilities,
        }
        try:
            self.storage.save_meta(ws, meta)
        except InternalFault as e:
            # outcome đã có, meta chỉ để debug
            log.warning("meta_not_saved", detail=e.detail)

    @staticmethod
    def is_timeout(outcome: ExecutionOutcome) -> bool:
        return outcome.kind in (OutcomeKind.COMPILE_TIMEOUT, OutcomeKind.RUN_TIMEOUT)
