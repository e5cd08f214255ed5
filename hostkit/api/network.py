from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from ..components.network_scanner import NetworkScanner
from ..models.config import NetworkConfig
from ..services.device_store import DeviceStore

router = APIRouter()


class DeviceNameRequest(BaseModel):
    name: str = ""


def get_store(request: Request) -> DeviceStore:
    return request.app.state.device_store


def get_scanner(request: Request) -> NetworkScanner:
    return request.app.state.scanner


def get_config(request: Request) -> NetworkConfig:
    return request.app.state.config


@router.get("/devices")
def list_devices(
    store: DeviceStore = Depends(get_store),
    scanner: NetworkScanner = Depends(get_scanner),
):
    return {
        "devices": [device.to_dict() for device in store.all()],
        "last_scan": scanner.state.last_scan_iso,
        "scanning": scanner.state.scanning,
    }


# declared before /devices/{mac} so "online" is not taken as a MAC address
@router.get("/devices/online")
def online_devices(
    timeout: int = Query(5, ge=0),
    store: DeviceStore = Depends(get_store),
    scanner: NetworkScanner = Depends(get_scanner),
):
    devices = store.online(timeout)
    return {
        "devices": [device.to_dict() for device in devices],
        "count": len(devices),
        "last_scan": scanner.state.last_scan_iso,
    }


@router.get("/devices/{mac}")
def get_device(mac: str, store: DeviceStore = Depends(get_store)):
    device = store.get(mac)
    if device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    return {"device": device.to_dict()}


@router.post("/devices/{mac}/name")
def name_device(mac: str, payload: DeviceNameRequest, store: DeviceStore = Depends(get_store)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")

    if not store.set_name(mac, name):
        raise HTTPException(status_code=404, detail="Device not found")
    return {"success": True, "message": "Device name updated"}


@router.post("/scan")
def start_scan(background_tasks: BackgroundTasks, scanner: NetworkScanner = Depends(get_scanner)):
    if scanner.state.scanning:
        raise HTTPException(status_code=409, detail="Scan already in progress")

    background_tasks.add_task(scanner.scan)
    return {"success": True, "message": "Scan started"}


@router.get("/stats")
def stats(
    store: DeviceStore = Depends(get_store),
    scanner: NetworkScanner = Depends(get_scanner),
    config: NetworkConfig = Depends(get_config),
):
    return {
        **store.stats(config.online_timeout_minutes),
        "last_scan": scanner.state.last_scan_iso,
        "scanning": scanner.state.scanning,
    }


@router.get("/alerts")
def alerts(limit: int = Query(20, ge=0), store: DeviceStore = Depends(get_store)):
    recent = store.alerts(limit)
    return {"alerts": [alert.to_dict() for alert in recent], "count": len(recent)}


@router.post("/alerts/clear")
def clear_alerts(store: DeviceStore = Depends(get_store)):
    store.clear_new_flags()
    return {"success": True, "message": "New device flags cleared"}


@router.get("/config")
def network_config(config: NetworkConfig = Depends(get_config)):
    return {
        "scan_interval": config.scan_interval,
        "enable_alerts": config.enable_alerts,
        "alert_sound": config.alert_sound,
        "auto_scan": config.auto_scan,
        "online_timeout_minutes": config.online_timeout_minutes,
    }
