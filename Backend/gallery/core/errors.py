"""Domain errors raised by the storage service and rendered by the API layer."""


class GalleryError(Exception):
    """Base class. Carries the HTTP status and the message shown to the user."""

    status_code = 500
    message = "Lỗi máy chủ"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NoFileError(GalleryError):
    status_code = 400
    message = "Không có file được chọn"


class UnsupportedTypeError(GalleryError):
    status_code = 400
    message = "Chỉ chấp nhận file ảnh và video!"


class TooLargeError(GalleryError):
    status_code = 400
    message = "File quá lớn. Kích thước tối đa là 20MB."


class InvalidFilenameError(GalleryError):
    status_code = 400
    message = "Tên file không hợp lệ"


class MemoryNotFoundError(GalleryError):
    status_code = 404
    message = "File không tồn tại"


class StorageIOError(GalleryError):
    """Directory unreadable, or a write/delete failed."""

    status_code = 500
    message = "Lỗi hệ thống file"
