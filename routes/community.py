"""
Community gallery routes for the Metaphor backend
"""
import logging

from fastapi import APIRouter, Depends, Response, status

from models.community import CommunityDocument, SaveCommunityRequest, SaveCommunityResponse
from routes.dependencies import get_community_store
from services.community_store import CommunityStore
from services.exceptions import MetaphorError, StoreError

router = APIRouter(tags=["Community"])
logger = logging.getLogger(__name__)


@router.options("/save-community")
async def save_community_preflight():
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/save-community", response_model=SaveCommunityResponse)
async def save_community_metaphor(
    request: SaveCommunityRequest,
    store: CommunityStore = Depends(get_community_store),
):
    """
    Append a generated metaphor to the shared community document.
    """
    logger.info(f"Saving metaphor: \"{request.title_en}\" by {request.author}")
    try:
        entry = await store.append_entry(request)
    except StoreError as e:
        logger.error(f"Error saving community metaphor: {e.message}")
        # Keep the concrete type so conflicts stay distinguishable
        raise type(e)(f"Failed to save metaphor: {e.message}", upstream_status=e.upstream_status) from e
    except MetaphorError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error saving community metaphor: {str(e)}", exc_info=True)
        raise StoreError(f"Failed to save metaphor: {e}") from e

    return SaveCommunityResponse(id=entry.id)


@router.get("/community")
async def get_community_metaphors(store: CommunityStore = Depends(get_community_store)):
    """Current community document, newest entries first."""
    try:
        document: CommunityDocument = await store.get_document()
    except MetaphorError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error reading community metaphors: {str(e)}", exc_info=True)
        raise StoreError(f"Failed to load community metaphors: {e}") from e
    return document.model_dump(by_alias=True)
