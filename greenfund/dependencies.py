"""
Dependency wiring for the FastAPI app.

Clients are built once per application from its settings and kept on
``app.state`` so tests can run isolated apps side by side.
"""

from __future__ import annotations

from fastapi import Request

from greenfund.config import Settings
from greenfund.store import FileJsonStore, InMemoryJsonStore, JsonStore
from greenfund.uploads import InMemoryUploadStorage, LocalUploadStorage, UploadStorage


def build_json_store(settings: Settings) -> JsonStore:
    if settings.use_in_memory_backends:
        return InMemoryJsonStore()
    return FileJsonStore(settings.data_dir)


def build_upload_storage(settings: Settings) -> UploadStorage:
    if settings.use_in_memory_backends:
        return InMemoryUploadStorage()
    return LocalUploadStorage(settings.uploads_dir)


def get_json_store(request: Request) -> JsonStore:
    return request.app.state.json_store


def get_upload_storage(request: Request) -> UploadStorage:
    return request.app.state.upload_storage
