"""
Image storage - decodes base64 image payloads onto the upload directory.
"""
import base64
import binascii
import hashlib
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"^data:image/(\w+);base64,")
SAFE_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class ImageStore:
    """
    Stores base64 images as files under ``<upload_dir>/<waybill>/<category>/``.

    File names are derived from the decoded content, so storing the same image
    again returns the same reference without writing a new file. Failures
    never raise: a failed image yields ``None`` so the caller records the
    reference as absent and carries on.
    """

    def __init__(self, upload_dir: str):
        self.upload_dir = Path(upload_dir)

    @staticmethod
    def _split_payload(data: str):
        extension = "jpg"
        match = DATA_URI_PATTERN.match(data)
        if match:
            extension = match.group(1).lower()
            if extension == "jpeg":
                extension = "jpg"
        if "," in data:
            data = data.split(",", 1)[1]
        return data.strip(), extension

    def _target_dir(self, waybill_no: str, category: str) -> Optional[Path]:
        """Directory for a waybill's images, or None when it would leave the upload root."""
        if not SAFE_SEGMENT_PATTERN.match(waybill_no or "") or not SAFE_SEGMENT_PATTERN.match(category):
            return None
        root = self.upload_dir.resolve()
        type_dir = (root / waybill_no / category).resolve()
        if root not in type_dir.parents:
            return None
        return type_dir

    def save(self, data: Optional[str], waybill_no: str, category: str, index: int = 0) -> Optional[str]:
        if not data or not isinstance(data, str) or not data.strip():
            return None
        type_dir = self._target_dir(waybill_no, category)
        if type_dir is None:
            logger.warning("Refusing to store %s image for unsafe waybill %r", category, waybill_no)
            return None
        try:
            encoded, extension = self._split_payload(data)
            content = base64.b64decode(encoded, validate=True)
            if not content:
                return None

            digest = hashlib.sha256(content).hexdigest()[:16]
            filename = f"{digest}_{index}.{extension}"
            target = type_dir / filename
            if not target.exists():
                type_dir.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
                logger.info("Saved image %s/%s/%s", waybill_no, category, filename)

            return str(Path("uploads") / waybill_no / category / filename)
        except (binascii.Error, ValueError, OSError) as e:
            logger.error("Error saving %s image %d for %s: %s", category, index, waybill_no, e)
            return None

    def save_many(self, items: Iterable[Optional[str]], waybill_no: str, category: str) -> List[str]:
        paths = []
        for index, data in enumerate(items or []):
            path = self.save(data, waybill_no, category, index)
            if path:
                paths.append(path)
        return paths
