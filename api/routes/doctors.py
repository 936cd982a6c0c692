"""Provider directory routes."""

from fastapi import APIRouter, Depends

from api.dependencies import get_directory
from api.models.appointment import Doctor
from services.directory import ProviderDirectory

router = APIRouter(prefix="/v1/doctors", tags=["doctors"])


@router.get("", response_model=list[Doctor])
def list_doctors(directory: ProviderDirectory = Depends(get_directory)):
    """Doctors a patient may select (unavailable doctors are flagged)."""
    return directory.list_doctors()
