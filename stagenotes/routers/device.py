"""Device router — inspect or forget the anonymous device identity."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from stagenotes.routers.deps import get_device_id
from stagenotes.utils.device_id import CookieStorage, DeviceIdentity

router = APIRouter(prefix="/api/device", tags=["device"])


@router.get("")
async def current_device(device_id: str = Depends(get_device_id)):
    return {"device_id": device_id}


@router.post("/reset")
async def reset_device(request: Request):
    """Forget this browser's device id; a new one is issued on the next request."""
    storage = CookieStorage(request.cookies)
    DeviceIdentity(storage).reset()
    return storage.apply(JSONResponse({"ok": True}))
