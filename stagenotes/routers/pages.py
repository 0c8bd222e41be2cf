"""
Pages router — the thin HTML shell around the JSON / WebSocket API.

Endpoints:
    GET  /          → home page (create a board / join by code)
    POST /new       → create a board from the form, go to the presenter view
    GET  /join      → normalise a typed code and go to the board
    GET  /b/{code}  → board page (``?presenter=1`` adds lock / export / delete)
"""

import logging

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from stagenotes.config import BASE_DIR, settings
from stagenotes.errors import BoardError
from stagenotes.services.board_store import BoardStore
from stagenotes.routers.deps import get_store
from stagenotes.utils.board_code import normalize_board_code
from stagenotes.utils.device_id import CookieStorage, DeviceIdentity
from stagenotes.utils.qr import join_qr_svg

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _error_page(request: Request, error: BoardError) -> HTMLResponse:
    """Fallback page shown instead of a board when anything goes wrong."""
    return templates.TemplateResponse(
        request,
        "error.html",
        {"app_name": settings.APP_NAME, "detail": error.detail},
        status_code=error.status_code,
    )


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, error: str = ""):
    return templates.TemplateResponse(
        request, "home.html", {"app_name": settings.APP_NAME, "error": error}
    )


@router.post("/new")
async def new_board(
    request: Request,
    title: str = Form(""),
    store: BoardStore = Depends(get_store),
):
    try:
        board = await store.create_board(title)
    except BoardError as e:
        return _error_page(request, e)
    return RedirectResponse(url=f"/b/{board.code}?presenter=1", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/join")
async def join(code: str = ""):
    code = normalize_board_code(code)
    if not code:
        return RedirectResponse(url="/?error=Code+is+required", status_code=status.HTTP_303_SEE_OTHER)
    return RedirectResponse(url=f"/b/{code}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/b/{code}", response_class=HTMLResponse)
async def board_page(
    code: str,
    request: Request,
    presenter: bool = False,
    store: BoardStore = Depends(get_store),
):
    try:
        board = await store.get_board_by_code(code)
    except BoardError as e:
        return _error_page(request, e)

    # Issue the device cookie here so the WebSocket handshake carries it
    storage = CookieStorage(request.cookies)
    DeviceIdentity(storage).get()

    join_url = str(request.url_for("board_page", code=board.code))
    response = templates.TemplateResponse(
        request,
        "board.html",
        {
            "app_name": settings.APP_NAME,
            "board": board,
            "is_presenter": presenter,
            "join_url": join_url,
            "join_qr": join_qr_svg(join_url),
        },
    )
    return storage.apply(response)
