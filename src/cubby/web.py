"""FastAPI binding — routes, the claim dependency and error mapping.

Handlers stay thin: they extract arguments, call the :class:`Cubby`
facade and serialize.  Every ``CubbyError`` is turned into a status
plus ``{"error": message}`` by one exception handler.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from cubby._cubby import Cubby
from cubby.auth.tokens import Claim
from cubby.config import Settings
from cubby.exceptions import ContentError, CubbyError, error_body, error_status
from cubby.fs.types import FileEntry

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    username: str
    password: str


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: str = Field(alias="oldPassword")
    new_password: str = Field(alias="newPassword")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_cubby(request: Request) -> Cubby:
    return request.app.state.cubby


CubbyDep = Annotated[Cubby, Depends(get_cubby)]


def require_claim(request: Request, cubby: CubbyDep) -> Claim:
    """Verified identity from the Authorization header or cookie."""
    return cubby.authenticate(request.headers.get("authorization"), request.cookies)


ClaimDep = Annotated[Claim, Depends(require_claim)]


def _entries(entries: list[FileEntry]) -> list[dict]:
    return [e.to_dict() for e in entries]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

router = APIRouter()


@router.post("/auth")
async def login(body: Credentials, cubby: CubbyDep) -> Response:
    auth = await cubby.authorize(body.username, body.password)
    response = JSONResponse({"token": auth.token})
    response.headers.append("set-cookie", auth.cookie)
    return response


@router.post("/users")
async def register(body: Credentials, cubby: CubbyDep) -> Response:
    await cubby.register(body.username, body.password)
    return Response(status_code=200)


@router.patch("/user")
async def reset_password(body: PasswordChange, claim: ClaimDep, cubby: CubbyDep) -> Response:
    await cubby.reset_password(claim, body.old_password, body.new_password)
    return Response(status_code=200)


@router.get("/file/{path:path}")
async def get_file(path: str, _: ClaimDep, cubby: CubbyDep) -> Response:
    data = await cubby.read_file(path)
    return Response(content=data, media_type="application/octet-stream")


@router.delete("/file/{path:path}")
async def delete_file(path: str, _: ClaimDep, cubby: CubbyDep) -> Response:
    await cubby.delete_file(path)
    return Response(status_code=200)


@router.patch("/file/{path:path}")
async def rename_file(path: str, to: str, _: ClaimDep, cubby: CubbyDep) -> Response:
    await cubby.rename_file(path, to)
    return Response(status_code=200)


@router.post("/file")
async def upload_file(
    _: ClaimDep,
    cubby: CubbyDep,
    path: Annotated[str, Form()],
    file: Annotated[UploadFile, File()],
) -> Response:
    if not file.filename:
        raise ContentError("Upload has no file name")
    data = await file.read()
    await cubby.upload_file(path, file.filename, data)
    return Response(status_code=200)


@router.get("/files")
@router.get("/files/{path:path}")
async def get_folder(_: ClaimDep, cubby: CubbyDep, path: str = "") -> list[dict]:
    return _entries(await cubby.list_folder(path))


@router.post("/files/{path:path}")
async def create_folder(path: str, _: ClaimDep, cubby: CubbyDep) -> Response:
    await cubby.create_folder(path)
    return Response(status_code=200)


@router.get("/search")
async def search(name: str, _: ClaimDep, cubby: CubbyDep) -> list[dict]:
    return _entries(await cubby.search(name))


@router.post("/share")
async def add_share(
    path: str,
    _: ClaimDep,
    cubby: CubbyDep,
    password: str | None = None,
) -> dict:
    return {"url": await cubby.add_share(path, password)}


@router.delete("/share")
async def delete_share(path: str, _: ClaimDep, cubby: CubbyDep) -> Response:
    await cubby.delete_share(path)
    return Response(status_code=200)


@router.get("/share")
async def get_share(
    url: str,
    cubby: CubbyDep,
    file_path: str = "",
    password: str | None = None,
    download: bool = False,
) -> Response:
    result = await cubby.resolve_share(url, file_path, password, download=download)
    if isinstance(result, bytes):
        return Response(content=result, media_type="application/octet-stream")
    if isinstance(result, list):
        return JSONResponse(_entries(result))
    return JSONResponse(result.to_dict())


@router.get("/shares")
async def get_shares(_: ClaimDep, cubby: CubbyDep) -> list[dict]:
    return [s.to_dict() for s in await cubby.list_shares()]


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


async def _cubby_error(request: Request, exc: CubbyError) -> JSONResponse:
    status = error_status(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(error_body(exc), status_code=status)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await _cubby_error(request, ContentError(str(exc)))


def create_app(settings: Settings | None = None, *, cubby: Cubby | None = None) -> FastAPI:
    """Build the app around *cubby*, or a new one from *settings*."""
    if cubby is None:
        if settings is None:
            raise ValueError("Provide settings or cubby")
        cubby = Cubby(settings)
    service = cubby

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await service.open()
        try:
            yield
        finally:
            await service.close()

    app = FastAPI(title="Cubby", lifespan=lifespan)
    app.state.cubby = service
    app.include_router(router, prefix=API_PREFIX)
    app.add_exception_handler(CubbyError, _cubby_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
    return app
