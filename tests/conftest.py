import os
import sys
import time
from pathlib import Path

import pytest

from javabox.services.execution_service import ExecutionService
from javabox.settings import Settings

FIXTURES = Path(__file__).parent / "fixtures"


def pid_alive(pid: int) -> bool:
    # zombie chưa được init reap thì coi như đã chết
    stat = Path(f"/proc/{pid}/stat")
    if stat.parent.parent.exists():
        try:
            state = stat.read_text().rsplit(")", 1)[1].split()[0]
        except FileNotFoundError:
            return False
        return state not in ("Z", "X")
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


def wait_dead(pid: int, timeout_s: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if not pid_alive(pid):
            return True
        time.sleep(0.05)
    return not pid_alive(pid)


@pytest.fixture
def ws_root(tmp_path):
    return tmp_path / "workspaces"


@pytest.fixture
def fake_settings(ws_root):
    return Settings(
        workspaces_dir=ws_root,
        javac_cmd=[sys.executable, str(FIXTURES / "fake_javac.py")],
        java_cmd=[sys.executable, str(FIXTURES / "fake_java.py")],
        javac_flags=[],
        java_flags=[],
        compile_timeout_s=5,
        run_timeout_s=2,
        limits={},
    )


@pytest.fixture
def service(fake_settings):
    return ExecutionService(fake_settings)


def java_src(*markers):
    """Main.java whose body carries `//@` markers for the fake toolchain."""
    body = "\n".join(f"        //@{m}" for m in markers)
    return "public class Main {\n    public static void main(String[] args) {\n" + body + "\n    }\n}\n"
