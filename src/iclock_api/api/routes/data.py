"""Viewer for records uploaded by devices."""

from fastapi import APIRouter, Depends

from ...database.repository import COLLECTION_ATTENDANCE, COLLECTION_USERS, RecordRepository
from ..dependencies import get_repository
from ..schemas import DataResponse

router = APIRouter()


@router.get(
    "/data",
    response_model=DataResponse,
    summary="View uploaded records",
    description="Return every user and attendance log received from devices",
)
def view_data(repository: RecordRepository = Depends(get_repository)) -> DataResponse:
    return DataResponse(
        users=repository.load(COLLECTION_USERS),
        attendance=repository.load(COLLECTION_ATTENDANCE),
    )
