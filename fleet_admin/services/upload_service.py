# fleet_admin/services/upload_service.py
"""
Upload adapter. Validates and stores image attachments before the record
referencing them is written.

Files are saved as:  {UPLOAD_ROOT}/{subfolder}/{prefix}-{timestamp_ms}-{random}{ext}
and referenced as:   {UPLOAD_URL_PREFIX}/{subfolder}/{filename}
The resource type → (subfolder, prefix) mapping is passed in at construction.
"""

import os
import random
import time
from typing import Optional

from fastapi import UploadFile

from fleet_admin.config import settings
from fleet_admin.errors import UploadRejected
from fleet_admin.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TARGET = {"subfolder": "", "prefix": "file"}


class UploadAdapter:
    def __init__(self, root: str, url_prefix: str, targets: dict, max_files: int = 5,
                 max_file_size: int = 5 * 1024 * 1024,
                 allowed_types: tuple = ("image/jpeg", "image/png", "image/jpg")):
        self.root = root
        self.url_prefix = url_prefix.rstrip("/")
        self.targets = targets
        self.max_files = max_files
        self.max_file_size = max_file_size
        self.allowed_types = tuple(allowed_types)

    def target(self, resource: str) -> dict:
        return self.targets.get(resource, DEFAULT_TARGET)

    def make_filename(self, resource: str, original_name: str) -> str:
        ext = os.path.splitext(original_name or "")[1].lower()
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}"
        return f"{self.target(resource)['prefix']}-{suffix}{ext}"

    async def stage(self, resource: str, files: list[UploadFile]) -> list[str]:
        """
        Validate every attachment, then write them all.
        Returns the stored paths in upload order. Nothing is written if any file is rejected.
        """
        files = [f for f in files or [] if f is not None and f.filename]
        if not files:
            return []
        if len(files) > self.max_files:
            raise UploadRejected(f"Too many files. At most {self.max_files} pictures are allowed per request")

        accepted = []
        for upload in files:
            if upload.content_type not in self.allowed_types:
                raise UploadRejected("Only JPEG, PNG, and JPG images are allowed", details=upload.filename)
            # one byte past the limit is enough to tell an oversized file
            content = await upload.read(self.max_file_size + 1)
            if len(content) > self.max_file_size:
                raise UploadRejected(
                    f"File too large. Maximum size is {self.max_file_size // (1024 * 1024)}MB",
                    details=upload.filename,
                )
            accepted.append((upload.filename, content))

        subfolder = self.target(resource)["subfolder"]
        directory = os.path.join(self.root, subfolder)
        os.makedirs(directory, exist_ok=True)

        paths = []
        for original_name, content in accepted:
            filename = self.make_filename(resource, original_name)
            with open(os.path.join(directory, filename), "wb") as f:
                f.write(content)
            paths.append("/".join(p for p in (self.url_prefix, subfolder, filename) if p))
            logger.info(f"[UPLOAD] Saved {filename} ({len(content)} bytes) for {resource}")
        return paths

    def resolve(self, stored_path: str) -> Optional[str]:
        """Map a stored path back to a file under the uploads root. None if it points elsewhere."""
        if not stored_path or not stored_path.startswith(self.url_prefix + "/"):
            return None
        relative = stored_path[len(self.url_prefix) + 1:]
        root = os.path.abspath(self.root)
        candidate = os.path.abspath(os.path.join(root, relative))
        if os.path.commonpath([root, candidate]) != root:
            return None
        return candidate

    def discard(self, stored_paths: list[str]) -> int:
        """Best-effort removal. Failures are logged, never raised. Returns the number removed."""
        removed = 0
        for stored_path in stored_paths or []:
            path = self.resolve(stored_path)
            if path is None:
                logger.warning(f"[UPLOAD] Not an upload path, skipped: {stored_path}")
                continue
            try:
                os.remove(path)
                removed += 1
                logger.info(f"[UPLOAD] Removed {stored_path}")
            except OSError as e:
                logger.warning(f"[UPLOAD] Could not remove {stored_path}: {e}")
        return removed


def get_upload_adapter() -> UploadAdapter:
    """FastAPI dependency: adapter configured from settings."""
    return UploadAdapter(
        root=settings.UPLOAD_ROOT,
        url_prefix=settings.UPLOAD_URL_PREFIX,
        targets=settings.UPLOAD_TARGETS,
        max_files=settings.UPLOAD_MAX_FILES,
        max_file_size=settings.UPLOAD_MAX_FILE_SIZE,
        allowed_types=tuple(settings.UPLOAD_ALLOWED_TYPES),
    )
