"""Image assets owned by the catalogue.

Uploaded images are written to a local directory under a generated name and
referenced from the product row by that name. External ``http(s)`` URLs are
only ever referenced, never touched on disk.
"""

import mimetypes
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

import structlog

from shared.config import DEFAULT_IMAGE_TYPES, Settings
from shared.errors import InternalFailure, InvalidInput, PayloadTooLarge, UnsupportedMediaType, summarize

logger = structlog.get_logger(__name__)

# First suffix is the one generated when the client filename does not match.
_SUFFIXES = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/jpg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/gif": (".gif",),
    "image/webp": (".webp",),
}


@dataclass(frozen=True)
class ImageUpload:
    """A binary image received from a caller."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """Suffix for the declared content type; the client's suffix is kept only when it agrees."""
        suffixes = _SUFFIXES.get(self.content_type)
        if suffixes is None:
            return mimetypes.guess_extension(self.content_type or "") or ""
        suffix = Path(self.filename or "").suffix.lower()
        return suffix if suffix in suffixes else suffixes[0]


class ImageStore:
    def __init__(
        self,
        directory: str | Path,
        max_bytes: int = 5 * 1024 * 1024,
        allowed_types: tuple[str, ...] = DEFAULT_IMAGE_TYPES,
    ):
        self.directory = Path(directory)
        self.max_bytes = max_bytes
        self.allowed_types = tuple(allowed_types)
        self.directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageStore":
        return cls(settings.upload_dir, settings.max_upload_bytes, settings.allowed_image_types)

    @staticmethod
    def is_local(ref: str | None) -> bool:
        """True when ``ref`` names an asset this store owns."""
        if not ref:
            return False
        return urlsplit(ref).scheme.lower() not in ("http", "https")

    def validate(self, upload: ImageUpload) -> None:
        """Reject an upload before anything is written anywhere."""
        if upload.content_type not in self.allowed_types:
            raise UnsupportedMediaType(
                f"Unsupported file type {upload.content_type!r}. Use JPG, PNG, GIF or WebP.",
                details={"allowed_types": list(self.allowed_types)},
            )
        if upload.size > self.max_bytes:
            raise PayloadTooLarge(
                f"File too large. Maximum {self.max_bytes // (1024 * 1024)}MB.",
                details={"max_bytes": self.max_bytes},
            )
        if upload.size == 0:
            raise InvalidInput("Uploaded image is empty", details={"image": "File is empty"})

    def path_for(self, name: str) -> Path:
        """Resolve an asset name inside the store; refuses anything else."""
        if not name or Path(name).name != name or name.startswith("."):
            raise InvalidInput(f"Invalid asset name {name!r}")
        return self.directory / name

    def _generate_name(self, upload: ImageUpload) -> str:
        return f"product-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{upload.extension}"

    def save(self, upload: ImageUpload) -> str:
        """Validate and write ``upload``; returns the generated asset name."""
        self.validate(upload)
        while True:
            name = self._generate_name(upload)
            try:
                with open(self.path_for(name), "xb") as fh:
                    fh.write(upload.data)
            except FileExistsError:
                continue
            except OSError as exc:
                logger.error("Could not write image asset", asset=name, error=summarize(exc))
                raise InternalFailure("The image could not be stored") from exc
            break

        logger.info("Image asset stored", asset=name, size=upload.size, content_type=upload.content_type)
        return name

    def delete(self, ref: str | None) -> bool:
        """Best-effort removal of a locally-owned asset.

        Failures are logged and reported through the return value only.
        """
        if not self.is_local(ref):
            return False
        try:
            self.path_for(ref).unlink()
        except FileNotFoundError:
            logger.warning("Image asset already gone", asset=ref)
            return False
        except (OSError, InvalidInput) as exc:
            logger.warning("Could not delete image asset", asset=ref, error=str(exc))
            return False

        logger.info("Image asset deleted", asset=ref)
        return True
