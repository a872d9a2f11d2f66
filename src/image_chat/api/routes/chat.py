"""Chat completion route.

Endpoint:
    POST /v1/chat/completions
        - Request: ChatCompletionRequest (model, messages, stream)
        - Credential: ``Authorization: Bearer <backend api key>``
        - Response: chat.completion JSON, or an SSE stream of
          chat.completion.chunk records ending with ``data: [DONE]``
        - Rate Limited: Yes (API_RATE_LIMIT)
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from image_chat.api.dependencies import CompletionUseCaseDep, CredentialDep, get_request_context
from image_chat.api.mappers import api_to_domain_messages
from image_chat.api.middleware import completion_rate_limit, limiter
from image_chat.api.models import ChatCompletionRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat/completions", tags=["Chat"], response_model=None)
@limiter.limit(completion_rate_limit)
async def chat_completions(
    request: Request,
    body: ChatCompletionRequest,
    use_case: CompletionUseCaseDep,
    credential: CredentialDep,
) -> Response:
    """Generate images from the last chat message.

    With ``stream=true`` the response starts immediately with an announcement
    chunk; generation failures are then reported inside the stream rather
    than as an HTTP error.
    """
    ctx = get_request_context(request)
    messages = api_to_domain_messages(body.messages)

    if body.stream:
        channel = await use_case.create_completion_stream(
            messages,
            credential,
            model=body.model,
            request_id=ctx.request_id,
        )
        return StreamingResponse(
            channel,
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    result = await use_case.create_completion(
        messages,
        credential,
        model=body.model,
        request_id=ctx.request_id,
    )
    return JSONResponse(content=result)
