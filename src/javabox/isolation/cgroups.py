from __future__ import annotations
from typing import List
import shutil

from ..core.models import Limits


def wrap_with_cgroups(cmd: List[str], limits: Limits) -> List[str]:
    """
    Ưu tiên systemd-run --scope để áp MemoryMax/CPUQuota.
    Nếu không có systemd-run (container tối giản, WSL...), trả về cmd gốc (fallback).
    """
    sdrun = shutil.which("systemd-run")
    if not sdrun:
        return cmd

    props = ["-p", "CPUQuota=100%"]
    if limits.memory_bytes > 0:
        props += ["-p", f"MemoryMax={limits.memory_bytes}"]
    return [sdrun, "--scope", "--quiet"] + props + ["--"] + cmd
