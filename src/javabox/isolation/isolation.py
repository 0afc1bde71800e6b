from __future__ import annotations
from pathlib import Path
from typing import Callable, List, Optional, Sequence
import os, shutil, tempfile

from ..core.models import Limits
from ..runner.process import run_process
from .namespaces import wrap_with_ns
from .cgroups import wrap_with_cgroups

SELF_TEST_TIMEOUT_S = 10


class IsolationPipeline:
    """Ghép các lớp wrap command theo strategy, ví dụ "ns", "cgroups", "ns+cgroups"."""

    def __init__(self, strategy: str, allow_network: bool):
        self.strategy = (strategy or "none").lower()
        self.allow_network = allow_network

    def build(self, limits: Limits) -> Callable[[List[str]], List[str]]:
        def composer(cmd: List[str]) -> List[str]:
            out = cmd
            if "ns" in self.strategy.split("+"):
                out = wrap_with_ns(out, self.allow_network)
            if "cgroups" in self.strategy.split("+"):
                out = wrap_with_cgroups(out, limits)
            return out

        return composer

    def self_test(self, limits: Limits) -> Optional[str]:
        """
        Chạy thử `true` qua wrapper. Trả None nếu wrapper dùng được, ngược lại
        trả lỗi của host (unshare bị chặn, systemd-run thiếu quyền...) để log.
        """
        if self.strategy == "none":
            return None
        argv = self.build(limits)([shutil.which("true") or "/bin/true"])
        try:
            res = run_process(argv, cwd=Path(tempfile.gettempdir()), timeout_s=SELF_TEST_TIMEOUT_S)
        except OSError as e:
            return repr(e)
        if res.timed_out:
            return f"timed out after {SELF_TEST_TIMEOUT_S}s"
        if res.rc != 0:
            return res.output.strip() or f"exit code {res.rc}"
        return None


def _available(cmd: Sequence[str]) -> bool:
    return bool(cmd) and bool(shutil.which(cmd[0]))


def probe_capabilities(allow_network: bool, strategy: str,
                       javac_cmd: Sequence[str] = ("javac",), java_cmd: Sequence[str] = ("java",)) -> dict:
    """Trả về thông tin môi trường để debug isolation."""
    return {
        "strategy": strategy,
        "allow_network": allow_network,
        "euid": os.geteuid() if hasattr(os, "geteuid") else None,
        "has_unshare": bool(shutil.which("unshare")),
        "has_systemd_run": bool(shutil.which("systemd-run")),
        "has_javac": _available(javac_cmd),
        "has_java": _available(java_cmd),
    }
