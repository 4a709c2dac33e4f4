from typing import Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.types import Message, Receive

from ..schemas.backup import UploadOutcome
from ..services.errors import IntakeError, MalformedUpload, MissingFile
from ..services.intake import IntakePipeline
from ..services.sizeguard import check_size

router = APIRouter(tags=["upload"])

FILE_FIELD = "file"


def get_pipeline(request: Request) -> IntakePipeline:
    return request.app.state.pipeline


def client_address(request: Request) -> str:
    # Attribution only; never used for access decisions.
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


def limit_body(receive: Receive, max_bytes: int) -> Receive:
    """Wrap an ASGI `receive` so the body stream stops once it passes `max_bytes`.

    Covers chunked requests and bodies whose Content-Length is missing or wrong;
    PayloadTooLarge is raised from inside the form parser's read loop.
    """
    received = 0

    async def limited() -> Message:
        nonlocal received
        message = await receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            check_size(received, max_bytes)
        return message

    return limited


def _content_length(request: Request) -> Optional[int]:
    try:
        return int(request.headers["content-length"])
    except (KeyError, ValueError):
        return None


def _respond(outcome: UploadOutcome) -> JSONResponse:
    return JSONResponse(outcome.body(), status_code=outcome.status)


@router.post("/upload")
async def upload_backup(request: Request, pipeline: IntakePipeline = Depends(get_pipeline)):
    client = client_address(request)

    try:
        # Declared size first, then the bytes actually streamed in.
        pipeline.check_declared(_content_length(request))
        bounded = Request(request.scope, receive=limit_body(request.receive, pipeline.max_bytes))
        try:
            form = await bounded.form()
        except (HTTPException, MultiPartException) as e:
            raise MalformedUpload(f"invalid multipart form: {getattr(e, 'detail', None) or e}") from e
    except IntakeError as e:
        return _respond(pipeline.failure(client, e))

    try:
        upload = form.get(FILE_FIELD)
        if not isinstance(upload, UploadFile):
            raise MissingFile(f"error retrieving file: no '{FILE_FIELD}' field in form")
        payload = await upload.read(pipeline.max_bytes + 1)
    except IntakeError as e:
        return _respond(pipeline.failure(client, e))
    finally:
        await form.close()

    outcome = await run_in_threadpool(pipeline.submit, payload, client)
    return _respond(outcome)
