import os
import re
import shutil
import tempfile
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

from fastapi import UploadFile

from ..config import settings
from ..exceptions import (
    IntakeFailed,
    file_too_large,
    invalid_file_type,
    invalid_identifier,
    missing_file,
    missing_identifier,
)
from ..models.metadata import StoredFile
from ..utils.logging import logger

CHUNK_SIZE = 1024 * 1024
MAX_PLACEMENT_ATTEMPTS = 16
# NAME_MAX on common filesystems, in bytes
MAX_FILENAME_BYTES = 255

_IDENTIFIER_DISALLOWED = re.compile(r"[^A-Za-z0-9]")


def sanitize_identifier(raw: str) -> str:
    """Strip everything but ASCII letters and digits from an applicant identifier."""
    return _IDENTIFIER_DISALLOWED.sub("", raw)


def split_original_name(original_filename: str) -> tuple[str, str]:
    """Return (base name, extension) of a client-supplied filename, dropping any directories."""
    name = original_filename.replace("\\", "/").rsplit("/", 1)[-1]
    base, ext = os.path.splitext(name)
    return base, ext


def stored_filename(base: str, token: int, ext: str) -> str:
    """Build `<base>_<token><ext>`, shortening the base so the name fits in MAX_FILENAME_BYTES."""
    suffix = f"_{token}{ext}"
    if len(suffix.encode("utf-8")) >= MAX_FILENAME_BYTES:
        suffix = f"_{token}"
    budget = MAX_FILENAME_BYTES - len(suffix.encode("utf-8"))
    base = base.encode("utf-8")[:budget].decode("utf-8", "ignore")
    return f"{base}{suffix}"


class UniquenessTokenSource:
    """Millisecond timestamps made strictly increasing within the process."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_token(self) -> int:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            self._last = max(now_ms, self._last + 1)
            return self._last


class IntakeService:
    """Validates an uploaded file and places it in the blob store under its applicant directory."""

    def __init__(
        self,
        storage_root: Optional[Path] = None,
        temp_root: Optional[Path] = None,
        allowed_mime_types: Optional[Iterable[str]] = None,
        max_file_size_mb: Optional[int] = None,
        public_root_marker: Optional[str] = None,
        token_source: Optional[UniquenessTokenSource] = None,
    ) -> None:
        self.storage_root = Path(storage_root or settings.storage_root_path)
        self.temp_root = Path(temp_root or settings.temp_root_path)
        self.allowed_mime_types = {
            mime.lower() for mime in (allowed_mime_types or settings.ALLOWED_MIME_TYPES)
        }
        self.max_file_size_mb = max_file_size_mb or settings.MAX_FILE_SIZE_MB
        self.max_file_size_bytes = self.max_file_size_mb * 1024 * 1024
        self.public_root_marker = (public_root_marker or settings.PUBLIC_ROOT_MARKER).strip("/")
        self.tokens = token_source or UniquenessTokenSource()

        self.storage_root.mkdir(parents=True, exist_ok=True)
        self.temp_root.mkdir(parents=True, exist_ok=True)
        logger.log_step("intake_service_initialized", {
            "storage_root": str(self.storage_root),
            "temp_root": str(self.temp_root),
            "allowed_mime_types": sorted(self.allowed_mime_types),
            "max_file_size_mb": self.max_file_size_mb
        })

    async def intake(self, upload: Optional[UploadFile], passport_number: Optional[str]) -> StoredFile:
        """Store one uploaded file for an applicant and return its address.

        Validation failures raise IntakeValidationError before anything is written under
        the blob root. Filesystem failures raise IntakeFailed. The holding-area copy is
        always removed, including when the request is cancelled mid-read.
        """
        filename = upload.filename if upload is not None else None

        if upload is not None and (upload.content_type or "").lower() not in self.allowed_mime_types:
            logger.log_rejection("InvalidFileType", passport_number or "", filename)
            raise invalid_file_type()

        if upload is None or not filename:
            logger.log_rejection("MissingFile", passport_number or "", filename)
            raise missing_file()

        if not passport_number:
            logger.log_rejection("MissingIdentifier", "", filename)
            raise missing_identifier()

        identifier = sanitize_identifier(passport_number)
        if not identifier:
            logger.log_rejection("InvalidIdentifier", passport_number, filename)
            raise invalid_identifier()

        held_path: Optional[Path] = None
        try:
            try:
                held_path, size_bytes = await self._hold(upload)
            except OSError as exc:
                raise self._failure(exc, identifier, filename) from exc

            if size_bytes > self.max_file_size_bytes:
                logger.log_rejection("FileTooLarge", identifier, filename)
                raise file_too_large(self.max_file_size_mb)

            target_dir = self.storage_root / identifier
            base, ext = split_original_name(filename)
            try:
                target_dir.mkdir(parents=True, exist_ok=True)
                stored_path = self._place(held_path, target_dir, base, ext)
            except OSError as exc:
                raise self._failure(exc, identifier, filename) from exc
        finally:
            if held_path is not None:
                self._discard(held_path)

        stored = StoredFile(
            passport_number=identifier,
            stored_filename=stored_path.name,
            original_filename=filename,
            content_type=upload.content_type,
            size_bytes=size_bytes,
            storage_path=str(stored_path),
            file_path=f"/{self.public_root_marker}/{identifier}/{stored_path.name}",
            stored_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.log_step("file_stored", stored.model_dump(exclude={"storage_path"}))
        return stored

    @staticmethod
    def _failure(exc: OSError, identifier: str, filename: str) -> IntakeFailed:
        logger.log_error("intake_failed", {
            "passport_number": identifier,
            "filename": filename,
            "error": str(exc)
        })
        return IntakeFailed(f"Could not store file: {exc}")

    async def _hold(self, upload: UploadFile) -> tuple[Path, int]:
        """Copy the upload into the holding area, stopping once it passes the size ceiling."""
        handle = tempfile.NamedTemporaryFile(dir=self.temp_root, prefix="upload-", delete=False)
        held_path = Path(handle.name)
        size_bytes = 0
        try:
            with handle:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size_bytes += len(chunk)
                    if size_bytes > self.max_file_size_bytes:
                        break
                    handle.write(chunk)
        except BaseException:
            held_path.unlink(missing_ok=True)
            raise
        return held_path, size_bytes

    @staticmethod
    def _discard(held_path: Path) -> None:
        """Remove a holding-area file, logging instead of raising when that fails."""
        try:
            held_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.log_error("holding_file_cleanup_failed", {
                "holding_file": held_path.name,
                "error": str(exc)
            })

    def _place(self, held_path: Path, target_dir: Path, base: str, ext: str) -> Path:
        """Move the held file to `<base>_<token><ext>` without ever replacing an existing file."""
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            target = target_dir / stored_filename(base, self.tokens.next_token(), ext)
            try:
                # link + unlink is an atomic, non-clobbering rename
                os.link(held_path, target)
            except FileExistsError:
                continue
            except OSError:
                # different filesystem or no hard-link support
                if target.exists():
                    continue
                shutil.move(str(held_path), str(target))
                return target
            self._discard(held_path)
            return target
        raise OSError(f"no free filename in {target_dir.name} after {MAX_PLACEMENT_ATTEMPTS} attempts")
