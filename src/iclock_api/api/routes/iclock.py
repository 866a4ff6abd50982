"""Device-facing endpoints of the iClock push protocol.

Every response is plain text. Protocol anomalies never surface as errors:
a device cannot act on one and would just retry, so they degrade to ``OK``.
"""

import logging
from typing import Optional
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from ...broker import CommandBroker
from ...ingest import RecordIngestor
from ...protocol import OK_SENTINEL
from ..dependencies import get_broker, get_ingestor

router = APIRouter()
fallback_router = APIRouter()
logger = logging.getLogger(__name__)


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


async def _read_fields(request: Request) -> dict[str, str]:
    """Decode form fields, falling back to a raw ``a=b&c=d`` body."""
    raw = await request.body()
    form = await request.form()
    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    if not fields and raw:
        fields = dict(parse_qsl(raw.decode("utf-8", errors="replace"), keep_blank_values=True))
    return fields


@router.get(
    "/iclock/cdata.aspx",
    response_class=PlainTextResponse,
    summary="Device handshake",
    description="Initial device handshake / options query; always answered with OK",
)
async def device_handshake(request: Request) -> PlainTextResponse:
    logger.info(f"Device metadata query: {dict(request.query_params)}")
    return PlainTextResponse(OK_SENTINEL)


@router.post(
    "/iclock/cdata.aspx",
    response_class=PlainTextResponse,
    summary="Device table upload",
    description="Receive ATTLOG (attendance) or OPERLOG (user) tables pushed by a device",
)
async def device_upload(
    request: Request,
    sn: Optional[str] = Query(None, alias="SN"),
    table: Optional[str] = Query(None),
    ingestor: RecordIngestor = Depends(get_ingestor),
) -> PlainTextResponse:
    """
    Persist a table upload.

    Args:
        request: Raw request carrying the text table
        sn: Device serial number
        table: Uploaded table name
        ingestor: Record ingestor instance

    Returns:
        Table-specific acknowledgment text
    """
    body = (await request.body()).decode("utf-8", errors="replace")
    return PlainTextResponse(ingestor.handle_upload(sn, table, body))


@router.get(
    "/iclock/getrequest.aspx",
    response_class=PlainTextResponse,
    summary="Device poll",
    description="Return pending commands as C:<id>:<command> lines and mark them sent",
)
async def device_poll(
    request: Request,
    sn: Optional[str] = Query(None, alias="SN"),
    broker: CommandBroker = Depends(get_broker),
) -> PlainTextResponse:
    logger.debug(f"Device polling for commands: SN={sn} IP={_client_ip(request)}")
    return PlainTextResponse(broker.poll(sn))


@router.get(
    "/iclock/devicecmd",
    response_class=PlainTextResponse,
    summary="Batch command ack",
    description="Acknowledge one or more commands given as C:<id>:<result> lines in 'info'",
)
async def device_ack_batch(
    sn: Optional[str] = Query(None, alias="SN"),
    info: Optional[str] = Query(None),
    broker: CommandBroker = Depends(get_broker),
) -> PlainTextResponse:
    logger.info(f"Command ack from device {sn}: {info}")
    return PlainTextResponse(broker.ack_batch(sn, info))


@router.post(
    "/iclock/devicecmd.aspx",
    response_class=PlainTextResponse,
    summary="Structured command ack",
    description="Acknowledge a single command given as ID, Return and CMD form fields",
)
async def device_ack_structured(
    request: Request,
    broker: CommandBroker = Depends(get_broker),
) -> PlainTextResponse:
    """
    Acknowledge a command reported through form fields.

    ``SN`` is taken from the query string first, then from the body.
    """
    fields = await _read_fields(request)
    sn = request.query_params.get("SN") or fields.get("SN")
    return PlainTextResponse(
        broker.ack_structured(sn, fields.get("ID"), fields.get("Return"), fields.get("CMD"))
    )


@fallback_router.api_route(
    "/{path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_class=PlainTextResponse,
    include_in_schema=False,
)
async def unknown_request(request: Request, path: str) -> PlainTextResponse:
    """Log any request no other route handled and answer OK so devices move on."""
    body = (await request.body()).decode("utf-8", errors="replace")
    logger.warning(
        f"Unknown request: {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "url": str(request.url),
            "client_ip": _client_ip(request),
            "headers": dict(request.headers),
            "body": body if body.strip() else None,
        },
    )
    return PlainTextResponse(OK_SENTINEL)
