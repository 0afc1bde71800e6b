from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ---- server ----
    host: str = "127.0.0.1"
    port: int = 8000

    # ---- workspace ----
    workspaces_dir: Optional[Path] = None  # None -> thư mục temp của hệ thống
    keep_workspaces: bool = False

    # ---- pipeline ----
    syntax_check: bool = True
    max_source_chars: int = 10_000
    max_output_chars: int = 50_000
    compile_timeout_s: int = 10
    run_timeout_s: int = 10

    # ---- isolation ----
    iso_strategy: str = "none"
    allow_network: bool = False

    # ---- toolchain ----
    javac_cmd: List[str] = ["javac"]
    java_cmd: List[str] = ["java"]
    javac_flags: List[str] = ["-encoding", "UTF-8", "-J-Xmx256m"]
    java_flags: List[str] = ["-Xmx128m", "-Xss8m"]

    # ---- config files ----
    limits_file: Path = Path("conf/limits.yaml")

    # ---- runtime merged limits (read from YAML) ----
    limits: Dict[str, Any] = {}

    # env prefix SBX_*
    model_config = SettingsConfigDict(env_prefix="SBX_", extra="ignore")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    return data if isinstance(data, dict) else {}


def load_settings() -> Settings:
    # 0) base từ env SBX_*
    s = Settings()

    # 1) conf/sandbox.yaml (hoặc SANDBOX_CONF)
    data = _read_yaml(Path(os.environ.get("SANDBOX_CONF", "conf/sandbox.yaml")))

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        defaults = {}
    server = data.get("server") or {}
    if not isinstance(server, dict):
        server = {}
    java = data.get("java") or {}
    if not isinstance(java, dict):
        java = {}

    ws_dir = data.get("workspaces_dir", s.workspaces_dir)

    # 2) merge, env vẫn được ưu tiên cho các key đã set qua SBX_*
    update: Dict[str, Any] = {
        "host": str(server.get("host", s.host)),
        "port": int(server.get("port", s.port)),
        "workspaces_dir": Path(str(ws_dir)) if ws_dir else None,
        "keep_workspaces": bool(defaults.get("keep_workspaces", s.keep_workspaces)),
        "syntax_check": bool(defaults.get("syntax_check", s.syntax_check)),
        "max_source_chars": int(defaults.get("max_source_chars", s.max_source_chars)),
        "max_output_chars": int(defaults.get("max_output_chars", s.max_output_chars)),
        "compile_timeout_s": int(defaults.get("compile_timeout_s", s.compile_timeout_s)),
        "run_timeout_s": int(defaults.get("run_timeout_s", s.run_timeout_s)),
        "iso_strategy": str(defaults.get("iso_strategy", s.iso_strategy)),
        "allow_network": bool(defaults.get("allow_network", s.allow_network)),
        "javac_cmd": _as_argv(java.get("javac", s.javac_cmd)),
        "java_cmd": _as_argv(java.get("java", s.java_cmd)),
        "javac_flags": _as_argv(java.get("javac_flags", s.javac_flags)),
        "java_flags": _as_argv(java.get("java_flags", s.java_flags)),
    }
    update = {k: v for k, v in update.items() if k.upper() not in _env_keys()}
    s = s.model_copy(update=update)

    # 3) conf/limits.yaml (tùy chọn)
    limits: Dict[str, Any] = {}
    try:
        limits = _read_yaml(s.limits_file)
    except (OSError, yaml.YAMLError):
        # limits lỗi thì giữ mặc định rỗng
        limits = {}

    return s.model_copy(update={"limits": limits})


def _as_argv(value: Any) -> List[str]:
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


def _env_keys() -> set:
    return {k.upper()[len("SBX_"):] for k in os.environ if k.upper().startswith("SBX_")}
