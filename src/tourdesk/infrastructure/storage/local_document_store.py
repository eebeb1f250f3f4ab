"""Passport copies and other documents stored in a local directory."""

from __future__ import annotations

import re
import uuid
from pathlib import Path

from tourdesk.application.ports import DocumentStore
from tourdesk.domain.exceptions import UploadFailed

ALLOWED_SUFFIXES = {".pdf", ".jpg", ".jpeg", ".png"}
MAX_BYTES = 5 * 1024 * 1024

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class LocalDocumentStore(DocumentStore):

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    def upload(self, filename: str, content: bytes) -> str:
        suffix = Path(filename).suffix.lower()
        if suffix not in ALLOWED_SUFFIXES:
            raise UploadFailed(
                f"{filename}: only {', '.join(sorted(ALLOWED_SUFFIXES))} files are accepted"
            )
        if not content:
            raise UploadFailed(f"{filename} is empty")
        if len(content) > MAX_BYTES:
            raise UploadFailed(f"{filename} is larger than {MAX_BYTES // (1024 * 1024)} MB")

        stem = _UNSAFE.sub("_", Path(filename).stem)[:60] or "document"
        target = self._directory / f"{uuid.uuid4().hex[:12]}_{stem}{suffix}"
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            raise UploadFailed(f"Could not store {filename}: {exc}") from exc
        return str(target)
