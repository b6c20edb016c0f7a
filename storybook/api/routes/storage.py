"""Public book image files."""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from ..dependencies import Storage

router = APIRouter()


@router.get(
    "/{book_id}/{filename}",
    summary="Get a stored book image",
    responses={
        200: {"content": {"image/png": {}, "image/jpeg": {}, "image/webp": {}}},
        404: {"description": "Image not found"},
    },
)
async def get_book_image(book_id: str, filename: str, storage: Storage):
    """Serve a page illustration or drawing cover. No authentication."""
    path = storage.path_for(book_id, filename)
    if path is None or not path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )
    return FileResponse(path)
