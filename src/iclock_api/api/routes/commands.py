"""Operator endpoints for queueing and inspecting device commands."""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ...broker import CommandBroker, InvalidCommandRequest
from ...queue import DeviceCommand
from ..dependencies import get_broker
from ..schemas import (
    CommandListResponse,
    CommandSchema,
    ErrorResponse,
    QueueCommandRequest,
    QueueCommandResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)

# Asks the device to push its user table right away
CHECK_COMMAND = "CHECK"
# Asks the device to upload its attendance log
QUERY_ATTLOG_COMMAND = "DATA QUERY ATTLOG"

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
QUEUE_REQUEST_SCHEMA = QueueCommandRequest.model_json_schema(by_alias=True)


def _queued_response(command: DeviceCommand) -> QueueCommandResponse:
    return QueueCommandResponse(success=True, queued=CommandSchema(**command.to_dict()))


async def _read_queue_request(request: Request) -> QueueCommandRequest:
    """Decode a JSON or form-encoded queue request; an empty body yields no fields."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        data = {key: value for key, value in form.items() if isinstance(value, str)}
    else:
        raw = await request.body()
        if not raw.strip():
            return QueueCommandRequest()
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise RequestValidationError(
                [
                    {
                        "type": "json_invalid",
                        "loc": ("body",),
                        "msg": "JSON decode error",
                        "input": raw.decode("utf-8", errors="replace"),
                    }
                ]
            ) from e

    try:
        return QueueCommandRequest.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


def _require_sn(sn: Optional[str]) -> str:
    if sn is None or not sn.strip():
        raise InvalidCommandRequest("SN is required")
    return sn


@router.post(
    "/queue-command",
    response_model=QueueCommandResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Queue a command",
    description="Queue a raw command for a device; it is delivered on the device's next poll",
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": QUEUE_REQUEST_SCHEMA},
                "application/x-www-form-urlencoded": {"schema": QUEUE_REQUEST_SCHEMA},
            },
        },
    },
)
async def queue_command(
    request: Request,
    broker: CommandBroker = Depends(get_broker),
) -> QueueCommandResponse:
    """
    Queue a command for a device.

    Args:
        request: JSON or form body carrying SN and command
        broker: Command broker instance

    Returns:
        The queued command including its id

    Raises:
        InvalidCommandRequest: If SN or command is missing
    """
    payload = await _read_queue_request(request)
    command = broker.enqueue(payload.sn, payload.command)
    return _queued_response(command)


@router.get(
    "/request-users",
    response_model=QueueCommandResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Request a user sync",
    description="Queue CHECK so the device pushes its user table",
)
async def request_users(
    sn: Optional[str] = Query(None, alias="SN"),
    broker: CommandBroker = Depends(get_broker),
) -> QueueCommandResponse:
    return _queued_response(broker.enqueue(_require_sn(sn), CHECK_COMMAND))


@router.get(
    "/request-attendance",
    response_model=QueueCommandResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Request an attendance upload",
    description="Queue DATA QUERY ATTLOG so the device uploads its attendance log",
)
async def request_attendance(
    sn: Optional[str] = Query(None, alias="SN"),
    broker: CommandBroker = Depends(get_broker),
) -> QueueCommandResponse:
    return _queued_response(broker.enqueue(_require_sn(sn), QUERY_ATTLOG_COMMAND))


@router.get(
    "/commands/{sn}",
    response_model=CommandListResponse,
    summary="Inspect a device queue",
    description="Return the commands currently queued for a device, for debugging",
)
async def list_commands(
    sn: str,
    broker: CommandBroker = Depends(get_broker),
) -> CommandListResponse:
    return CommandListResponse(
        sn=sn,
        commands=[CommandSchema(**c.to_dict()) for c in broker.inspect(sn)],
    )
