"""
Generation routes for the Metaphor backend
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from config.settings import Settings, get_settings
from models.generation import GenerateResponse, GenerationRequest
from routes.dependencies import get_generation_service, get_rate_limiter
from services.exceptions import MetaphorError, NoCredential, RateLimited
from services.generation_service import GenerationService
from services.rate_limiter import RateLimiter, get_caller_id

router = APIRouter(tags=["Generation"])
logger = logging.getLogger(__name__)


@router.options("/generate")
async def generate_preflight():
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/generate", response_model=GenerateResponse, response_model_exclude_none=True)
async def generate_metaphor(
    request: GenerationRequest,
    http_request: Request,
    settings: Settings = Depends(get_settings),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    generation_service: GenerationService = Depends(get_generation_service),
):
    """
    Generate an SVG visual metaphor for a concept.

    Callers that send their own apiKey pay for the upstream call themselves
    and are not rate limited.
    """
    api_key = request.api_key or settings.openrouter_api_key
    if not api_key:
        logger.error("OPENROUTER_API_KEY not configured and no caller key supplied")
        raise NoCredential()

    if not request.api_key:
        caller_id = get_caller_id(http_request)
        if not rate_limiter.allow(caller_id):
            raise RateLimited()

    try:
        result = await generation_service.generate(request, api_key)
    except MetaphorError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during generation: {str(e)}", exc_info=True)
        raise MetaphorError()

    response = GenerateResponse.from_result(result)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response.model_dump(by_alias=True, exclude_none=True),
    )
