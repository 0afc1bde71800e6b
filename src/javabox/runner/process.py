from __future__ import annotations
import os
import signal
import subprocess
import threading
import time
from pathlib import Path
from typing import IO, Callable, Dict, List, Optional

import structlog

from ..core.models import ProcessResult
from ..core.utils import truncate_output

log = structlog.get_logger(__name__)

# thời gian chờ drain nốt pipe sau khi đã SIGKILL cả group
DRAIN_GRACE_S = 2.0
CHUNK = 64 * 1024


def _kill_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except PermissionError:
        proc.kill()


def _pump_output(stream: IO[bytes], chunks: List[bytes]) -> None:
    fd = stream.fileno()
    try:
        while True:
            chunk = os.read(fd, CHUNK)
            if not chunk:
                break
            chunks.append(chunk)
    except OSError:
        pass


def _feed_input(stream: IO[bytes], data: bytes) -> None:
    try:
        if data:
            stream.write(data)
    except BrokenPipeError:
        # child thoát/không đọc hết input: không phải lỗi của pipeline
        pass
    finally:
        try:
            stream.close()
        except BrokenPipeError:
            pass


def run_process(
    argv: List[str],
    cwd: Path,
    timeout_s: float,
    stdin: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    preexec: Optional[Callable[[], None]] = None,
    max_output_chars: int = 0,
) -> ProcessResult:
    """
    Chạy một child process, gộp stdout+stderr vào một pipe và đọc đến EOF.

    Một thread đọc output, một thread ghi stdin, nên child ghi đầy pipe trước
    khi đọc xong input cũng không bị deadlock. Hết timeout (tính cả thời gian
    chờ EOF) thì kill cả process group; phần output đã đọc được luôn giữ lại.
    """
    # encode trước khi spawn: input không encode được thì không tạo process nào
    data = stdin.encode("utf-8") if stdin is not None else None

    start = time.monotonic()
    proc = subprocess.Popen(
        argv,
        stdin=subprocess.PIPE if data is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        cwd=str(cwd),
        env=env,
        preexec_fn=preexec,
        start_new_session=preexec is None,
    )

    chunks: List[bytes] = []
    reader = threading.Thread(target=_pump_output, args=(proc.stdout, chunks), daemon=True)
    reader.start()
    writer = None
    if data is not None:
        writer = threading.Thread(target=_feed_input, args=(proc.stdin, data), daemon=True)
        writer.start()

    timed_out = False
    try:
        try:
            proc.wait(timeout=timeout_s)
            # process con/cháu trong group có thể vẫn giữ pipe
            reader.join(max(0.0, timeout_s - (time.monotonic() - start)))
            timed_out = reader.is_alive()
        except subprocess.TimeoutExpired:
            timed_out = True

        if timed_out:
            log.warning("process_timeout", pid=proc.pid, argv0=argv[0], timeout_s=timeout_s)
            _kill_group(proc)
            reader.join(DRAIN_GRACE_S)
            if reader.is_alive():
                # process cháu đã thoát khỏi group vẫn giữ pipe -> trả phần đã đọc
                log.warning("process_drain_incomplete", pid=proc.pid)
    finally:
        # không để lại process nào trong group, kể cả khi lỗi lúc đang đọc output
        _kill_group(proc)
        if proc.poll() is None:
            proc.wait()
        if writer is not None:
            writer.join(DRAIN_GRACE_S)
        if not reader.is_alive():
            proc.stdout.close()

    text = b"".join(list(chunks)).decode("utf-8", errors="replace")
    return ProcessResult(
        rc=proc.returncode,
        output=truncate_output(text, max_output_chars),
        timed_out=timed_out,
        duration_s=time.monotonic() - start,
    )
