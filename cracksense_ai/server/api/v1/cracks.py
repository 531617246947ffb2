"""
Crack Record Endpoints.

CRUD over the user's crack log. Each record carries one to three photos.
"""

from fastapi import APIRouter, HTTPException, status

from cracksense_ai.core.database.entities.cracks import CrackRecord
from cracksense_ai.core.database.repositories.cracks import CrackRecordRepository
from cracksense_ai.core.models.io import (
    CrackListResponse,
    CrackRecordCreate,
    CrackRecordRead,
    CrackRecordUpdate,
    CrackResponse,
)
from cracksense_ai.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter()

MAX_IMAGES = 3


async def _get_owned_crack(repository: CrackRecordRepository, crack_id: str, user_id: str) -> CrackRecord:
    crack = await repository.get_by_id(crack_id)
    if crack is None or crack.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Crack not found")
    return crack


@router.get(
    "",
    response_model=CrackListResponse,
    summary="List Cracks",
    description="Retrieve the caller's crack records, newest first.",
)
async def list_cracks(user_id: CurrentUserDep, session: SessionDep) -> CrackListResponse:
    cracks = await CrackRecordRepository(session).list_for_user(user_id)
    return CrackListResponse(cracks=[CrackRecordRead.model_validate(c) for c in cracks])


@router.post(
    "",
    response_model=CrackResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Crack",
    description="Log a crack with one to three photos.",
    responses={400: {"description": "No images or more than three"}},
)
async def create_crack(request: CrackRecordCreate, user_id: CurrentUserDep, session: SessionDep) -> CrackResponse:
    if not request.image_urls:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="At least one image is required")
    if len(request.image_urls) > MAX_IMAGES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Maximum 3 images allowed")

    crack = await CrackRecordRepository(session).create(
        CrackRecord(
            user_id=user_id,
            description=request.description,
            image_urls=request.image_urls,
            ai_notes=request.ai_notes,
            expert_notes=request.expert_notes,
            risk_level=request.risk_level.value,
        )
    )
    return CrackResponse(crack=CrackRecordRead.model_validate(crack))


@router.get(
    "/{crack_id}",
    response_model=CrackResponse,
    summary="Get Crack",
    responses={404: {"description": "Crack not found"}},
)
async def get_crack(crack_id: str, user_id: CurrentUserDep, session: SessionDep) -> CrackResponse:
    crack = await _get_owned_crack(CrackRecordRepository(session), crack_id, user_id)
    return CrackResponse(crack=CrackRecordRead.model_validate(crack))


@router.put(
    "/{crack_id}",
    response_model=CrackResponse,
    summary="Update Crack",
    description="Update the given fields of a crack record.",
    responses={400: {"description": "More than three images"}, 404: {"description": "Crack not found"}},
)
async def update_crack(
    crack_id: str, request: CrackRecordUpdate, user_id: CurrentUserDep, session: SessionDep
) -> CrackResponse:
    if request.image_urls is not None and len(request.image_urls) > MAX_IMAGES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Maximum 3 images allowed")

    repository = CrackRecordRepository(session)
    crack = await _get_owned_crack(repository, crack_id, user_id)
    changes = request.model_dump(exclude_unset=True)
    if "risk_level" in changes and changes["risk_level"] is not None:
        changes["risk_level"] = request.risk_level.value
    for field, value in changes.items():
        setattr(crack, field, value)
    crack = await repository.update(crack)
    return CrackResponse(crack=CrackRecordRead.model_validate(crack))


@router.delete(
    "/{crack_id}",
    summary="Delete Crack",
    responses={404: {"description": "Crack not found"}},
)
async def delete_crack(crack_id: str, user_id: CurrentUserDep, session: SessionDep):
    repository = CrackRecordRepository(session)
    crack = await _get_owned_crack(repository, crack_id, user_id)
    await repository.delete(crack.id)
    return {"message": "Crack deleted successfully"}
