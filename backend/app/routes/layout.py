# app/routes/layout.py
import asyncio
import logging

from fastapi import APIRouter, HTTPException
from starlette.concurrency import run_in_threadpool

from app.config import Config
from app.models.requests import GenerateTileMapRequest
from app.models.responses import GenerationResponse
from app.services.authoring import AuthoringError, request_room_graph
from app.services.generator import generate_tilemap
from app.services.renderer import render_preview_base64
from tileplan.errors import InvalidRoomGraph

logger = logging.getLogger(__name__)

router = APIRouter()


def _log_abandoned_failure(job: asyncio.Future) -> None:
    """Reads the outcome of a generation the route stopped waiting for."""
    if job.cancelled():
        return
    exc = job.exception()
    if exc is not None:
        logger.error("Generation failed after its request timed out: %r", exc)


# We only define the success model here. Errors are handled by exceptions.
@router.post("/generate-tilemap", response_model=GenerationResponse, response_model_exclude_none=True)
async def generate_tilemap_route(req: GenerateTileMapRequest):
    job = None
    try:
        if req.mode == "freeform" and req.freeform:
            room_graph = await request_room_graph(req.freeform.text)
        elif req.mode == "structured" and req.structured:
            room_graph = req.structured.room_graph
        else:
            raise HTTPException(status_code=400, detail="Invalid request payload. Mode must be 'freeform' or 'structured' with a matching body.")

        seed = req.seed if req.seed is not None else Config.DEFAULT_SEED
        # generation is CPU-bound and cannot be interrupted; on timeout the worker
        # finishes in the background and its result is discarded
        job = asyncio.ensure_future(run_in_threadpool(
            generate_tilemap, room_graph, seed, req.style or Config.DEFAULT_STYLE,
            req.hint, Config.generation_settings(),
        ))
        outcome = await asyncio.wait_for(asyncio.shield(job), timeout=Config.GENERATION_TIMEOUT_S)

        image = None
        if req.preview:
            image = await run_in_threadpool(render_preview_base64, outcome["tilemap"])

        return GenerationResponse(
            **outcome,
            image_base64=image,
            status="ok" if not outcome["warnings"] else "partial",
            message=f"{len(outcome['tilemap'].rooms)} room(s) generated",
        )

    except HTTPException:
        raise
    except InvalidRoomGraph as e:
        raise HTTPException(status_code=400, detail={"error": "Invalid room graph", "problems": e.errors})
    except AuthoringError as e:
        raise HTTPException(status_code=502, detail=f"Authoring service error: {e}")
    except asyncio.TimeoutError:
        if job is not None:
            job.add_done_callback(_log_abandoned_failure)
        logger.warning("Generation exceeded %.1fs budget", Config.GENERATION_TIMEOUT_S)
        raise HTTPException(status_code=504, detail="Generation timed out")
    except Exception as e:
        logger.exception("Unexpected generation failure")
        raise HTTPException(status_code=500, detail=f"An internal server error occurred: {str(e)}")
