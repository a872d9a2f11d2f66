"""System routes: health check and model listing."""

from fastapi import APIRouter

from image_chat.api.models import HealthResponse, ModelCard, ModelList
from image_chat.core.config import settings
from image_chat.core.utils import unix_timestamp

router = APIRouter()


@router.get("/health", tags=["System"], response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/v1/models", tags=["System"], response_model=ModelList)
async def list_models() -> ModelList:
    """List the base models accepted in the ``model`` field.

    Any of these may be suffixed with ``:<W>x<H>`` to choose the output size.
    """
    created = unix_timestamp()
    return ModelList(
        data=[ModelCard(id=model_id, created=created) for model_id in settings.generation.model_ids]
    )
