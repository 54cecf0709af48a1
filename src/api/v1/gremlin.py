"""Gremlin bridge endpoint: run a traversal or fetch schema labels."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_gremlin_service
from src.api.v1.schemas.gremlin import GremlinRequest, GremlinResponse
from src.services.gremlin_service import GremlinService

router = APIRouter(tags=["gremlin"])


@router.post("/gremlin", response_model=GremlinResponse)
async def run_gremlin(
    request: GremlinRequest,
    service: GremlinService = Depends(get_gremlin_service),
) -> GremlinResponse:
    """Execute ``query`` against the described connection.

    Without a query, returns ``{vertexLabels, edgeLabels}``. Failures are
    reported in the envelope, not as HTTP errors.
    """
    envelope = await service.execute(request.type, request.details(), request.query)
    return GremlinResponse(**envelope)
