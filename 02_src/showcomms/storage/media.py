"""Local file store for uploaded message attachments."""

import asyncio
import re
import time
import uuid
from pathlib import Path

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_segment(value: str, fallback: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", Path(str(value or "")).name).strip("._")
    return cleaned or fallback


class MediaStore:
    """Stores attachment bytes under a root directory, one folder per user."""

    def __init__(self, root: str | Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    async def save(self, user_id: str, file_name: str, data: bytes) -> str:
        """Write a file and return its path relative to the root."""
        folder = _safe_segment(user_id, "anonymous")
        stamp = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
        name = f"{stamp}-{_safe_segment(file_name, 'upload.bin')}"
        target = self._root / folder / name
        await asyncio.to_thread(self._write, target, data)
        return f"{folder}/{name}"

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def resolve(self, relative_path: str) -> Path | None:
        """Absolute path of a stored file, None when missing or outside the root."""
        root = self._root.resolve()
        candidate = (root / relative_path).resolve()
        if root not in candidate.parents or not candidate.is_file():
            return None
        return candidate
