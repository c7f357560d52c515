"""Filesystem-backed storage for uploaded memories. The directory is the only source of truth."""
import logging
import os
import stat as stat_mode
from datetime import datetime
from pathlib import Path

from gallery.core.errors import (
    GalleryError,
    InvalidFilenameError,
    MemoryNotFoundError,
    NoFileError,
    StorageIOError,
    TooLargeError,
    UnsupportedTypeError,
)
from gallery.models.memory import DeleteResult, Memory, UploadResult
from gallery.services.naming import classify, display_title, generate_storage_name

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
ALLOWED_VIDEO_TYPES = {"video/mp4", "video/avi", "video/mov", "video/wmv", "video/flv", "video/webm"}
ALLOWED_MIME_TYPES = ALLOWED_IMAGE_TYPES | ALLOWED_VIDEO_TYPES

CHUNK_SIZE = 1024 * 1024
MAX_NAME_ATTEMPTS = 5


def _creation_time(st: os.stat_result) -> float:
    # st_birthtime is missing on most Linux builds; uploads are never rewritten, so mtime matches
    return getattr(st, "st_birthtime", None) or st.st_mtime


def format_date(moment: datetime) -> str:
    """Vietnamese day-first calendar date, e.g. 5/3/2026."""
    return f"{moment.day}/{moment.month}/{moment.year}"


class MemoryStorage:
    """
    Upload, list, resolve and delete media files inside a single flat directory.
    Holds no state besides its configuration; every call goes back to the disk.
    """

    def __init__(self, root: Path, max_upload_bytes: int):
        self.root = Path(root)
        self.max_upload_bytes = max_upload_bytes

    def ensure_root(self) -> Path:
        """Create the storage directory if it does not exist yet."""
        if not self.root.is_dir():
            try:
                self.root.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageIOError(f"Không thể tạo thư mục upload: {e}") from e
            logger.info("✅ Created upload directory: %s", self.root.resolve())
        return self.root

    # --- Upload ---

    async def accept(self, stream, content_type: str | None, original_name: str | None,
                     declared_size: int | None = None) -> UploadResult:
        """
        Validate an incoming upload and stream it into the storage directory.

        Args:
            stream: Object with an async ``read(size)`` method (e.g. fastapi.UploadFile), or None.
            content_type: MIME type declared by the client.
            original_name: Filename sent by the client.
            declared_size: Size reported by the transport, if known.

        Raises:
            NoFileError, UnsupportedTypeError, TooLargeError, StorageIOError
        """
        if stream is None or not original_name:
            logger.warning("❌ Upload without a file")
            raise NoFileError()

        if content_type not in ALLOWED_MIME_TYPES:
            logger.warning("❌ Rejected %s - type: %s", original_name, content_type)
            raise UnsupportedTypeError()

        if declared_size is not None and declared_size > self.max_upload_bytes:
            logger.warning("❌ Rejected %s - declared size %d bytes", original_name, declared_size)
            raise TooLargeError()

        logger.info("✅ Accepted %s - type: %s", original_name, content_type)
        self.ensure_root()
        target, handle = self._create_unique(original_name)

        size = 0
        try:
            with handle:
                while chunk := await stream.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_upload_bytes:
                        raise TooLargeError()
                    handle.write(chunk)
        except OSError as e:
            self._discard(target)
            logger.error("❌ Failed writing %s: %s", target.name, e)
            raise StorageIOError(f"Không thể lưu file: {e}") from e
        except BaseException as e:
            # Includes TooLargeError and cancellation from a client disconnect
            self._discard(target)
            if isinstance(e, GalleryError):
                logger.warning("❌ Upload %s aborted: %s", original_name, e.message)
            raise

        logger.info("✅ File uploaded: %s - Size: %.2fMB", target.name, size / 1024 / 1024)
        return UploadResult(
            filename=target.name,
            message="Tải lên thành công!",
            size=size,
        )

    def _create_unique(self, original_name: str):
        """Open a freshly generated storage name with exclusive create, retrying on collision."""
        for _ in range(MAX_NAME_ATTEMPTS):
            target = self.root / generate_storage_name(original_name)
            try:
                handle = open(target, "xb")
            except FileExistsError:
                logger.warning("Storage name collision on %s, regenerating", target.name)
                continue
            except OSError as e:
                raise StorageIOError(f"Không thể lưu file: {e}") from e
            logger.debug("📁 Generated storage name: %s", target.name)
            return target, handle
        raise StorageIOError("Không thể tạo tên file duy nhất")

    def _discard(self, target: Path):
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            logger.error("❌ Could not remove partial upload %s: %s", target.name, e)

    # --- Listing ---

    def list_memories(self) -> list[Memory]:
        """
        Return every stored file with derived metadata, newest first.
        A missing directory is an empty gallery; unreadable entries are skipped.
        """
        if not self.root.is_dir():
            logger.info("📁 Storage directory does not exist yet, returning empty list")
            return []

        try:
            with os.scandir(self.root) as it:
                entries = list(it)
        except OSError as e:
            logger.error("❌ Cannot read storage directory %s: %s", self.root, e)
            raise StorageIOError("Không thể đọc danh sách kỷ niệm") from e

        memories = []
        for entry in entries:
            try:
                st = entry.stat()
            except OSError as e:
                logger.error("❌ Error reading file %s: %s", entry.name, e)
                continue

            # Only regular files are media items
            if not stat_mode.S_ISREG(st.st_mode):
                continue

            created = datetime.fromtimestamp(_creation_time(st))
            memories.append(Memory(
                filename=entry.name,
                type=classify(entry.name),
                title=display_title(entry.name),
                date=format_date(created),
                size=st.st_size,
                created=created,
            ))

        memories.sort(key=lambda m: m.created, reverse=True)
        logger.info("✅ Returning %d memories", len(memories))
        return memories

    # --- Lookup & deletion ---

    def _confined(self, filename: str) -> Path:
        """
        Treat filename as an opaque key: it must name an entry directly inside the storage directory.
        """
        if (not filename or filename in (".", "..")
                or "/" in filename or "\\" in filename or "\x00" in filename):
            logger.warning("❌ Rejected filename %r", filename)
            raise InvalidFilenameError()
        return self.root / filename

    def resolve(self, filename: str) -> Path:
        """Path of a stored regular file, for download."""
        target = self._confined(filename)
        if not target.is_file():
            raise MemoryNotFoundError()
        return target

    def delete(self, filename: str) -> DeleteResult:
        target = self._confined(filename)
        logger.info("🗑️ Deleting file: %s", filename)

        if not os.path.lexists(target) or target.is_dir():
            logger.info("❌ File does not exist: %s", filename)
            raise MemoryNotFoundError()

        try:
            target.unlink()
        except FileNotFoundError:
            # Lost a race with a concurrent delete
            raise MemoryNotFoundError() from None
        except OSError as e:
            logger.error("❌ Error deleting %s: %s", filename, e)
            raise StorageIOError("Không thể xóa file") from e

        logger.info("✅ File deleted: %s", filename)
        return DeleteResult(message="Đã xóa file thành công")
