from __future__ import annotations

from typing import Protocol


class ImageUploader(Protocol):
    """Stores an image buffer and returns its public URL. Failures raise ``UploadError``."""

    async def upload(self, content: bytes, *, content_type: str, filename: str = "") -> str:
        ...
