"""
Upload storage for files attached to campaign and KYC submissions.
"""

from __future__ import annotations

import os
import random
from dataclasses import dataclass, field
from typing import Protocol

from greenfund.errors import StoreError
from greenfund.records import now_millis

UPLOADS_URL_PREFIX = "/uploads"


@dataclass(frozen=True)
class IncomingFile:
    """A file received with a multipart request."""

    filename: str | None
    content: bytes


def unique_upload_name(original_filename: str | None) -> str:
    """Build a collision resistant name keeping the original extension."""
    _, ext = os.path.splitext(original_filename or "")
    return f"{now_millis()}-{random.randint(0, 10**9)}{ext}"


class UploadStorage(Protocol):
    """Defines the operations the handlers need from upload storage."""

    def save(self, original_filename: str | None, content: bytes) -> str:
        ...

    def url_for(self, stored_name: str) -> str:
        ...


@dataclass
class LocalUploadStorage:
    """Writes uploads into a directory served under ``/uploads``."""

    directory: str

    def save(self, original_filename: str | None, content: bytes) -> str:
        stored_name = unique_upload_name(original_filename)
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(os.path.join(self.directory, stored_name), "wb") as f:
                f.write(content)
        except OSError as exc:
            raise StoreError(f"Failed to store upload {stored_name}") from exc
        return stored_name

    def url_for(self, stored_name: str) -> str:
        return f"{UPLOADS_URL_PREFIX}/{stored_name}"


@dataclass
class InMemoryUploadStorage:
    """Test double for upload storage."""

    stored_files: dict[str, bytes] = field(default_factory=dict)

    def save(self, original_filename: str | None, content: bytes) -> str:
        stored_name = unique_upload_name(original_filename)
        self.stored_files[stored_name] = content
        return stored_name

    def url_for(self, stored_name: str) -> str:
        return f"{UPLOADS_URL_PREFIX}/{stored_name}"
