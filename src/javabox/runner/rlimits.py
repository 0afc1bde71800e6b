from __future__ import annotations
import os
import resource
from typing import Callable

from ..core.models import Limits


def apply_rlimits(cpu_seconds: int, memory_bytes: int, nofile: int) -> None:
    """
    Áp giới hạn ở cấp tiến trình: CPU time, bộ nhớ ảo, số file descriptor.
    Giá trị <= 0 nghĩa là bỏ qua limit đó. Nếu OS không cho set thì giữ mặc định.
    """
    if cpu_seconds > 0:
        try:
            resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds))
        except (ValueError, OSError):
            pass
    if memory_bytes > 0:
        try:
            resource.setrlimit(resource.RLIMIT_AS, (memory_bytes, memory_bytes))
        except (ValueError, OSError):
            pass
    if nofile > 0:
        try:
            resource.setrlimit(resource.RLIMIT_NOFILE, (nofile, nofile))
        except (ValueError, OSError):
            pass


def make_preexec(limits: Limits) -> Callable[[], None]:
    """preexec chạy trong child trước execve: rlimits + session riêng để kill cả group."""
    def _fn():
        apply_rlimits(limits.cpu_seconds, limits.memory_bytes, limits.nofile)
        os.setsid()

    return _fn
