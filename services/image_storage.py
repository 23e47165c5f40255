"""Image storage bucket used by the product, banner, category and store forms."""

from __future__ import annotations

import re
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional
from uuid import uuid4

from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener
from werkzeug.datastructures import FileStorage

from common.services.logging import log_event
from common.utils.validators import UPLOAD_FOLDERS

register_heif_opener()

ONLY_IMAGES = "Faqat rasm fayllari qabul qilinadi"
TOO_LARGE = "Rasm hajmi 5MB dan katta bo'lmasligi kerak"
UPLOAD_FAILED = "Rasm yuklashda xatolik yuz berdi"

USER_FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class ImageStorage:
    """Writes uploaded images into the bucket directory and returns public URLs."""

    def __init__(
        self,
        storage_dir: Path,
        public_root: Path,
        public_url: Callable[[str], str],
        max_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self._storage_dir = storage_dir
        self._public_root = public_root
        self._public_url = public_url
        self._max_bytes = max_bytes
        self._storage_dir.mkdir(parents=True, exist_ok=True)

    def upload(self, uploaded: Optional[FileStorage], folder: str, user_id: Optional[str] = None) -> str:
        """Store an image under ``folder`` (and the user's sub-folder) and return its URL."""

        if folder not in UPLOAD_FOLDERS:
            raise ValueError(f"unknown upload folder: {folder}")
        self._validate_upload(uploaded)

        binary = uploaded.read()
        if len(binary) > self._max_bytes:
            raise ValueError(TOO_LARGE)
        if not binary:
            raise ValueError(UPLOAD_FAILED)

        target_dir = self._storage_dir / folder
        if user_id:
            if not USER_FOLDER_PATTERN.fullmatch(user_id):
                raise ValueError(UPLOAD_FAILED)
            target_dir = target_dir / user_id
        target_path = target_dir / self._safe_filename(uploaded.filename or "image")
        if not target_path.resolve().is_relative_to(self._storage_dir.resolve()):
            raise ValueError(UPLOAD_FAILED)
        self._save_image(binary, target_path)

        relative_path = target_path.relative_to(self._public_root).as_posix()
        url = self._public_url(relative_path)
        log_event("info", "image.uploaded", folder=folder, path=relative_path, size=len(binary))
        return url

    def _validate_upload(self, uploaded: Optional[FileStorage]) -> None:
        if uploaded is None or not (uploaded.filename or "").strip():
            raise ValueError(UPLOAD_FAILED)
        if not (uploaded.mimetype or "").startswith("image/"):
            raise ValueError(ONLY_IMAGES)

    def _safe_filename(self, original: str) -> str:
        stem = "".join(ch for ch in Path(original).stem.lower() if ch.isalnum() or ch in "-_")[:16]
        unique = uuid4().hex[:12]
        return f"{stem or 'image'}_{unique}.jpg"

    def _save_image(self, binary: bytes, target_path: Path) -> None:
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            with Image.open(BytesIO(binary)) as image:
                rgb = image.convert("RGB")
                rgb.save(target_path, format="JPEG", quality=90)
        except (UnidentifiedImageError, OSError) as exc:
            log_event("error", "image.upload_failed", path=str(target_path), error=str(exc))
            raise ValueError(UPLOAD_FAILED) from exc
