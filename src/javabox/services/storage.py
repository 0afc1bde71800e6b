from __future__ import annotations
from pathlib import Path
from typing import Optional
import json
import shutil
import tempfile

import structlog

from ..core.errors import InternalFault
from ..core.models import Workspace
from ..runner.java_runner import SOURCE_NAME

log = structlog.get_logger(__name__)


class WorkspaceStorage:
    """
    Mỗi submission một thư mục riêng, tên ngẫu nhiên (mkdtemp, mode 0700):
      <root>/javacode-XXXXXXXX/
        ├─ Main.java       (code user gửi)
        ├─ Main.class      (sau compile phase)
        └─ meta.json       (chỉ khi keep_workspaces)
    """

    PREFIX = "javacode-"

    def __init__(self, root: Optional[Path] = None):
        self.root = (root if root.is_absolute() else root.resolve()) if root else None

    def create_workspace(self) -> Workspace:
        try:
            if self.root is not None:
                self.root.mkdir(parents=True, exist_ok=True)
            path = Path(tempfile.mkdtemp(prefix=self.PREFIX, dir=self.root)).resolve()
        except OSError as e:
            raise InternalFault(f"create_workspace: {e}") from e
        ws = Workspace(workspace_id=path.name[len(self.PREFIX):], path=path)
        log.debug("workspace_created", workspace=str(path))
        return ws

    def materialize(self, ws: Workspace, code: str) -> Path:
        """Ghi nguyên văn code vào Main.java. Kích thước đã được kiểm tra ở phía gọi."""
        source = ws.path / SOURCE_NAME
        try:
            source.write_text(code, encoding="utf-8")
        except (OSError, UnicodeEncodeError) as e:
            raise InternalFault(f"materialize: {e}") from e
        return source

    def save_meta(self, ws: Workspace, meta: dict) -> None:
        try:
            (ws.path / "meta.json").write_text(
                json.dumps(meta, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise InternalFault(f"save_meta: {e}") from e

    def cleanup(self, ws: Workspace) -> None:
        # best-effort: tên không bao giờ dùng lại nên sót thư mục cũng không phá isolation
        shutil.rmtree(ws.path, ignore_errors=True)
        if ws.path.exists():
            log.warning("workspace_cleanup_failed", workspace=str(ws.path))
