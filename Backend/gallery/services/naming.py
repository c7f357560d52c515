import os
import re
import random
import time

TITLE_PREFIX = "Kỷ niệm"

# Displayable extensions. Wider than the upload allow-list so older files still show up.
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "bmp", "svg"}
VIDEO_EXTENSIONS = {"mp4", "avi", "mov", "wmv", "flv", "webm", "mkv"}

_WHITESPACE = re.compile(r"\s+")


def sanitize_name(original_name: str) -> str:
    """
    Reduce a client supplied filename to a single path segment with no whitespace.
    """
    # Browsers on Windows may send "C:\\fakepath\\photo.jpg"
    base = original_name.replace("\x00", "").replace("\\", "/").rsplit("/", 1)[-1]
    base = _WHITESPACE.sub("_", base)
    if base in ("", ".", ".."):
        return "unnamed"
    return base


def generate_storage_name(original_name: str, now_ms: int | None = None, nonce: int | None = None) -> str:
    """
    Build the storage name "<epoch-ms>-<random>-<sanitized original>".

    The timestamp keeps names roughly chronological, the random part separates
    uploads landing in the same millisecond.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    if nonce is None:
        nonce = random.randint(0, 10**9)
    return f"{now_ms}-{nonce}-{sanitize_name(original_name)}"


def recover_title(storage_name: str) -> str:
    """
    Inverse of generate_storage_name: drop the two nonce segments, then everything from the first dot.
    """
    parts = storage_name.split("-")
    if len(parts) < 3:
        return ""
    return "-".join(parts[2:]).split(".", 1)[0]


def display_title(storage_name: str) -> str:
    return f"{TITLE_PREFIX} {recover_title(storage_name)}"


def classify(filename: str) -> str:
    """
    Map a filename to "image", "video" or "unknown" by its lowercased extension.
    """
    ext = os.path.splitext(filename)[1].lower().lstrip(".")
    if ext in IMAGE_EXTENSIONS:
        return "image"
    if ext in VIDEO_EXTENSIONS:
        return "video"
    return "unknown"
