"""Book categories."""

from fastapi import APIRouter

from ..dependencies import Books
from ..models.responses import CategoryResponse

router = APIRouter()


@router.get("", response_model=list[CategoryResponse], summary="List categories")
async def list_categories(repo: Books):
    return await repo.list_categories()
