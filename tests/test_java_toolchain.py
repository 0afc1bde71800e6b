import shutil

import pytest

from javabox.core.models import OutcomeKind, Submission
from javabox.services.execution_service import ExecutionService
from javabox.settings import Settings

pytestmark = pytest.mark.skipif(
    shutil.which("javac") is None or shutil.which("java") is None,
    reason="JDK not installed",
)

HELLO = """
public class Main {
    public static void main(String[] args) {
        System.out.println("Hello, World!");
    }
}
"""

ECHO = """
import java.util.Scanner;

public class Main {
    public static void main(String[] args) {
        Scanner in = new Scanner(System.in);
        System.out.println("got: " + in.nextLine());
    }
}
"""

MISSING_SEMICOLON = """
public class Main {
    public static void main(String[] args) {
        System.out.println("x")
    }
}
"""

UNKNOWN_SYMBOL = """
public class Main {
    public static void main(String[] args) {
        System.out.println(undefinedVariable);
    }
}
"""

THROWS = """
public class Main {
    public static void main(String[] args) {
        System.out.println("before");
        throw new IllegalStateException("boom");
    }
}
"""

SPINS = """
public class Main {
    public static void main(String[] args) {
        while (true) { }
    }
}
"""

NESTED = """
public class Main {
    static class Inner { int v() { return 42; } }
    public static void main(String[] args) {
        System.out.println(new Inner().v());
    }
}
"""


@pytest.fixture
def jdk(ws_root):
    return ExecutionService(Settings(workspaces_dir=ws_root, run_timeout_s=3, compile_timeout_s=30, limits={}))


def test_hello_world(jdk):
    outcome = jdk.execute(Submission(code=HELLO))
    assert outcome.kind == OutcomeKind.SUCCESS
    assert outcome.text == "Hello, World!\n"


def test_scanner_reads_submitted_input(jdk):
    outcome = jdk.execute(Submission(code=ECHO, stdin="hello"))
    assert outcome.kind == OutcomeKind.SUCCESS
    assert "got: hello" in outcome.text


def test_nested_class_artifacts(jdk):
    outcome = jdk.execute(Submission(code=NESTED))
    assert outcome.kind == OutcomeKind.SUCCESS
    assert outcome.text == "42\n"


def test_syntax_error(jdk):
    outcome = jdk.execute(Submission(code=MISSING_SEMICOLON))
    assert outcome.kind == OutcomeKind.SYNTAX_ERROR
    assert "';' expected" in outcome.text


def test_unknown_symbol_is_compile_error_without_precheck(ws_root):
    svc = ExecutionService(Settings(workspaces_dir=ws_root, syntax_check=False, compile_timeout_s=30, limits={}))
    outcome = svc.execute(Submission(code=UNKNOWN_SYMBOL))
    assert outcome.kind == OutcomeKind.COMPILE_ERROR
    assert "cannot find symbol" in outcome.text


def test_uncaught_exception_is_run_error(jdk):
    outcome = jdk.execute(Submission(code=THROWS))
    assert outcome.kind == OutcomeKind.RUN_ERROR
    assert outcome.text.startswith("before\n")
    assert "IllegalStateException: boom" in outcome.text


def test_infinite_loop_times_out(jdk):
    outcome = jdk.execute(Submission(code=SPINS))
    assert outcome.kind == OutcomeKind.RUN_TIMEOUT
