"""
Profile image storage client.

Uploads image buffers to Cloudinary through its signed REST upload API and
returns the resulting HTTPS URL.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Dict, Optional

import httpx

from ..domain.errors import UploadError

logger = logging.getLogger(__name__)

PROFILE_IMAGE_FOLDER = "profile-images"
PROFILE_IMAGE_TRANSFORMATION = "c_limit,h_800,q_auto:good,w_800"


class CloudinaryImageUploader:
    """HTTP client for the Cloudinary image upload endpoint."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        *,
        folder: str = PROFILE_IMAGE_FOLDER,
        base_url: str = "https://api.cloudinary.com/v1_1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cloud_name = cloud_name or ""
        self.api_key = api_key or ""
        self.api_secret = api_secret or ""
        self.folder = folder
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport
        self.enabled = bool(self.cloud_name and self.api_key and self.api_secret)

    async def upload(self, content: bytes, *, content_type: str, filename: str = "") -> str:
        """
        Upload an image and return its secure URL.

        Raises:
            UploadError: If uploads are not configured or Cloudinary rejects the file
        """
        if not self.enabled:
            logger.warning("Image upload requested but Cloudinary credentials are not configured.")
            raise UploadError()

        params = {
            "folder": self.folder,
            "timestamp": str(int(time.time())),
            "transformation": PROFILE_IMAGE_TRANSFORMATION,
        }
        data = {**params, "api_key": self.api_key, "signature": self.sign(params)}
        files = {"file": (filename or "upload", content, content_type)}
        url = f"{self.base_url}/{self.cloud_name}/image/upload"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, data=data, files=files)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Cloudinary upload failed: HTTP %s - %s", exc.response.status_code, exc.response.text)
            raise UploadError() from exc
        except (httpx.RequestError, ValueError) as exc:
            logger.error("Cloudinary upload failed: %s", exc)
            raise UploadError() from exc

        secure_url = result.get("secure_url") if isinstance(result, dict) else None
        if not secure_url:
            logger.error("Cloudinary upload returned no secure_url.")
            raise UploadError()
        return secure_url

    def sign(self, params: Dict[str, str]) -> str:
        """Cloudinary request signature: SHA-1 of the sorted params followed by the secret."""
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()
