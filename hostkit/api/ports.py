import sys
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request

from ..components.port_scanner import PortScanner, filter_range, find_conflicts
from ..models.config import PortsConfig
from ..services.preference_store import PreferenceStore

router = APIRouter()


def get_scanner(request: Request) -> PortScanner:
    return request.app.state.scanner


def get_preferences(request: Request) -> PreferenceStore:
    return request.app.state.preferences


def get_config(request: Request) -> PortsConfig:
    return request.app.state.config


def _load_preferences(store: PreferenceStore) -> Dict[str, Any]:
    try:
        return store.load()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/ports")
def ports(scanner: PortScanner = Depends(get_scanner)):
    return {"ports": [entry.to_dict() for entry in scanner.scan()]}


@router.get("/ports/cached")
def cached_ports(scanner: PortScanner = Depends(get_scanner)):
    return {"ports": [entry.to_dict() for entry in scanner.cached()]}


@router.get("/scan")
def scan_range(
    start: int = Query(1, ge=1, le=65535),
    end: int = Query(65535, ge=1, le=65535),
    scanner: PortScanner = Depends(get_scanner),
):
    entries = filter_range(scanner.scan(), start, end)
    return {"ports": [entry.to_dict() for entry in entries]}


@router.get("/preferences")
def get_all_preferences(store: PreferenceStore = Depends(get_preferences)):
    return {"preferences": _load_preferences(store)}


@router.post("/preferences")
def replace_preferences(
    preferences: Dict[str, Any] = Body(...),
    store: PreferenceStore = Depends(get_preferences),
):
    try:
        store.save(preferences)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "message": "Preferences saved"}


@router.post("/preferences/{port}")
def add_preference(
    port: int,
    preference: Dict[str, Any] = Body(...),
    store: PreferenceStore = Depends(get_preferences),
):
    store.set(port, preference)
    return {"success": True, "message": "Preference added"}


@router.delete("/preferences/{port}")
def delete_preference(port: int, store: PreferenceStore = Depends(get_preferences)):
    store.delete(port)
    return {"success": True, "message": "Preference deleted"}


@router.get("/conflicts")
def conflicts(
    scanner: PortScanner = Depends(get_scanner),
    store: PreferenceStore = Depends(get_preferences),
):
    found = find_conflicts(scanner.scan(), _load_preferences(store))
    return {"conflicts": [conflict.to_dict() for conflict in found]}


@router.post("/kill/{pid}")
def kill(pid: int, scanner: PortScanner = Depends(get_scanner)):
    return scanner.kill_process(pid).to_dict()


@router.get("/scan-ranges")
def scan_ranges(config: PortsConfig = Depends(get_config)):
    return {
        "ranges": [
            {"name": r.name, "start": r.start, "end": r.end} for r in config.scan_ranges
        ]
    }


@router.get("/status")
def status(
    scanner: PortScanner = Depends(get_scanner),
    config: PortsConfig = Depends(get_config),
):
    return {
        "running": True,
        "total_ports": len(scanner.cached()),
        "platform": sys.platform,
        "refresh_interval": config.refresh_interval,
        "last_scan": scanner.state.last_scan_iso,
    }
