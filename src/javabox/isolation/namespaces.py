from __future__ import annotations
from typing import List
import shutil


def wrap_with_ns(cmd: List[str], allow_network: bool) -> List[str]:
    """
    Best-effort: tách user+mount+pid namespace, KHÔNG chroot (JDK nằm trên host).
    - Có --user nên tạo net namespace không cần root; net ns mới chỉ có loopback down.
    - cwd được Popen giữ nguyên, không cần `cd` trong shell.
    """
    unshare = shutil.which("unshare")
    if not unshare:
        return cmd  # fallback

    flags = ["--user", "--map-root-user", "--mount", "--pid", "--fork", "--kill-child"]
    if not allow_network:
        flags += ["--net"]
    return [unshare] + flags + ["--"] + cmd
