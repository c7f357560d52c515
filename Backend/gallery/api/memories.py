import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse, RedirectResponse

from gallery.api.deps import get_storage
from gallery.models.memory import DeleteResult, ErrorResponse, Memory, UploadResult
from gallery.services.storage import MemoryStorage

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/api/memories", response_model=list[Memory])
def list_memories(storage: MemoryStorage = Depends(get_storage)):
    """
    List every stored memory, newest first.
    Runs on the threadpool since it walks the filesystem synchronously.
    """
    logger.info("📚 Listing memories...")
    return storage.list_memories()


@router.post("/upload", response_model=UploadResult, responses=ERROR_RESPONSES)
async def upload_memory(
        memory: UploadFile | None = File(default=None, description="Image or video to store"),
        storage: MemoryStorage = Depends(get_storage),
):
    """
    Store a single image or video sent in the multipart field "memory".
    """
    if memory is None:
        return await storage.accept(None, None, None)

    try:
        return await storage.accept(
            memory,
            memory.content_type,
            memory.filename,
            declared_size=memory.size,
        )
    finally:
        await memory.close()


@router.delete("/delete/{filename}", response_model=DeleteResult, responses=ERROR_RESPONSES)
def delete_memory(filename: str, storage: MemoryStorage = Depends(get_storage)):
    """
    Delete one stored memory by its storage filename.
    """
    return storage.delete(filename)


@router.get("/anhkiniem/{filename}", responses=ERROR_RESPONSES)
def download_memory(filename: str, storage: MemoryStorage = Depends(get_storage)):
    """
    Stream the raw bytes of a stored memory.
    """
    return FileResponse(path=storage.resolve(filename))


# --- Compatibility aliases ---

@router.get("/api/files", include_in_schema=False)
def legacy_list_files():
    logger.info("🔄 Redirect /api/files -> /api/memories")
    return RedirectResponse("/api/memories", status_code=307)


@router.delete("/api/delete/{filename}", include_in_schema=False)
def legacy_delete(filename: str):
    logger.info("🔄 Redirect /api/delete -> /delete")
    # 307 keeps the DELETE verb on the follow-up request
    return RedirectResponse(f"/delete/{filename}", status_code=307)
