from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..components.download_sorter import DownloadSorter
from ..components.duplicate_finder import find_duplicates
from ..services.history_store import HistoryStore

router = APIRouter()


def get_sorter(request: Request) -> DownloadSorter:
    return request.app.state.sorter


def get_history(request: Request) -> HistoryStore:
    return request.app.state.history


@router.get("/status")
def status(sorter: DownloadSorter = Depends(get_sorter)):
    return sorter.get_status()


@router.get("/files")
def list_files(category: str = "all", sorter: DownloadSorter = Depends(get_sorter)):
    return {"files": [f.to_dict() for f in sorter.list_files(category)]}


@router.get("/duplicates")
def duplicates(sorter: DownloadSorter = Depends(get_sorter)):
    try:
        groups = find_duplicates(sorter.sorted_path)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Cannot scan {sorter.sorted_path}: {e}")
    return {"duplicates": [group.to_dict() for group in groups]}


@router.delete("/files/{category}/{filename}")
def delete_file(category: str, filename: str, sorter: DownloadSorter = Depends(get_sorter)):
    try:
        deleted = sorter.delete_file(category, filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="File not found")
    return {"success": True, "message": "File deleted"}


@router.get("/history")
def history(limit: int = Query(100, ge=0), store: HistoryStore = Depends(get_history)):
    return {"history": [entry.to_dict() for entry in store.recent(limit)]}


@router.delete("/history")
def clear_history(store: HistoryStore = Depends(get_history)):
    store.clear()
    return {"success": True, "message": "History cleared"}


@router.get("/categories")
def categories(sorter: DownloadSorter = Depends(get_sorter)):
    return {"categories": sorter.category_names}
