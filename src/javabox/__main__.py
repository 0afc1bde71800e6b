from __future__ import annotations

import uvicorn

from .settings import load_settings


def main() -> None:
    """Chạy API: `python -m javabox` hoặc `javabox-serve` (host/port qua SBX_HOST, SBX_PORT)."""
    s = load_settings()
    uvicorn.run("javabox.api:app", host=s.host, port=s.port, log_config=None)


if __name__ == "__main__":
    main()
