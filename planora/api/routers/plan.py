import asyncio
import json
import logging
import re
from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException
from fastapi.responses import Response, StreamingResponse
from starlette.concurrency import iterate_in_threadpool

from planora.core.errors import ProviderError
from planora.core.orchestrator import ItineraryOrchestrator
from planora.core.validation import validate_preferences
from planora.models.domain import Itinerary
from planora.services.calendar import generate_ics
from planora.services.pdf import generate_pdf

logger = logging.getLogger("planora.api")

router = APIRouter(tags=["Planning"])

orchestrator = ItineraryOrchestrator()


def _filename(itinerary: Itinerary, extension: str) -> str:
    words = re.findall(r"[A-Za-z0-9]+", itinerary.destination)
    return f"Trip_to_{'_'.join(words) or 'trip'}.{extension}"


@router.post("/itinerary")
def create_itinerary(payload: Any = Body(None)):
    """
    Validates the trip request and returns an itinerary.
    Provider failures fall back to the rule-based plan, so only
    validation errors (400) and unexpected faults (500) surface here.
    """
    itinerary = orchestrator.plan(payload)
    return {"itinerary": itinerary.model_dump(by_alias=True)}


@router.post("/itinerary/stream")
async def stream_itinerary(payload: Any = Body(None)):
    """
    Streams status updates and the final itinerary as NDJSON.
    """
    preferences = validate_preferences(payload)
    logger.info(
        f"Received streaming request for {preferences.destination}, budget: {preferences.budget.value}"
    )

    async def event_generator():
        try:
            # Provider calls block, keep them off the event loop
            async for item in iterate_in_threadpool(orchestrator.plan_stream(preferences)):
                if isinstance(item, str):
                    yield json.dumps({"type": "status", "message": item}) + "\n"
                else:
                    yield json.dumps(
                        {"type": "result", "data": item.model_dump(by_alias=True)}
                    ) + "\n"
                # Small delay to allow client to process events
                await asyncio.sleep(0.05)
        except Exception:
            logger.exception("Streaming itinerary failed.")
            yield json.dumps(
                {"type": "error", "message": "An unexpected error occurred while planning."}
            ) + "\n"

    return StreamingResponse(event_generator(), media_type="application/x-ndjson")


@router.get("/models")
def list_models():
    client = orchestrator.ai_client
    if client.client is None:
        raise HTTPException(status_code=503, detail="Google API Key not configured on server.")
    try:
        models = client.list_models()
    except ProviderError as e:
        logger.error(f"Model listing failed: {e}")
        raise HTTPException(status_code=502, detail="Could not list AI models.")
    return {"models": models, "candidates": client.model_candidates()}


@router.post("/pdf")
def export_pdf(itinerary: Itinerary):
    pdf_bytes = generate_pdf(itinerary)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={_filename(itinerary, 'pdf')}"},
    )


@router.post("/calendar")
def export_calendar(itinerary: Itinerary, start_date: Optional[str] = None):
    try:
        ics_bytes = generate_ics(itinerary, start_date)
    except Exception as e:
        logger.exception("Failed to generate calendar file.")
        raise HTTPException(status_code=500, detail=str(e))
    return Response(
        content=ics_bytes,
        media_type="text/calendar",
        headers={"Content-Disposition": f"attachment; filename={_filename(itinerary, 'ics')}"},
    )
