"""FastAPI webhook receiver for Realworks listing events and WhatsApp callbacks.

Routes:
- GET /: Meta webhook verification handshake
- POST /: inbound WhatsApp webhook (logged and acknowledged)
- POST /realworks: listing event carrying an ``objectUrl``
- GET /health: liveness probe
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from listing_alerts import __version__
from listing_alerts.logging import get_logger
from listing_alerts.normalization.exceptions import MalformedInputError
from listing_alerts.pipeline.runner import ListingPipeline
from listing_alerts.profiles.exceptions import ProfileSourceError
from listing_alerts.realworks.exceptions import ListingFetchError

logger = get_logger(__name__, component="api")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: Optional[str] = None


class ListingEventResponse(BaseModel):
    """Outcome of a processed Realworks listing event."""
    status: str
    event_id: Optional[str] = None
    listing_id: Optional[str] = None
    profiles_evaluated: int = 0
    matched: int = 0
    notified: int = 0
    failed: int = 0


async def _read_json(request: Request):
    """Decoded request body, or None when the body is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


def create_app(pipeline: ListingPipeline, verify_token: Optional[str] = None) -> FastAPI:
    """Build the webhook receiver around a configured pipeline.

    Args:
        pipeline: Pipeline used to process listing events
        verify_token: Token expected in Meta's ``hub.verify_token`` handshake;
            verification always fails when unset
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Webhook receiver starting",
            extra={"event": "api.starting", "verification_enabled": bool(verify_token)},
        )
        yield
        logger.info("Webhook receiver shutting down", extra={"event": "api.stopping"})

    app = FastAPI(
        title="Listing Alerts",
        version=__version__,
        description="Matches new Realworks listings to buyer search profiles and notifies them via WhatsApp",
        lifespan=lifespan,
    )

    @app.exception_handler(MalformedInputError)
    async def malformed_input_handler(request: Request, exc: MalformedInputError):
        """Listing document was not an object."""
        logger.error(f"Malformed listing: {exc}", extra={"event": "api.realworks.malformed"})
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(error="malformed_listing", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(ListingFetchError)
    async def fetch_error_handler(request: Request, exc: ListingFetchError):
        """Listing could not be fetched from Realworks."""
        logger.error(f"Listing fetch failed: {exc}", extra={"event": "api.realworks.fetch_failed"})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="listing_fetch_error", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(ProfileSourceError)
    async def profile_source_error_handler(request: Request, exc: ProfileSourceError):
        """Search profiles could not be loaded."""
        logger.error(f"Profile source failed: {exc}", extra={"event": "api.realworks.profiles_failed"})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="profile_source_error", detail=str(exc)).model_dump(),
        )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok", version=__version__)

    @app.get("/")
    async def verify_webhook(request: Request) -> Response:
        """Answer Meta's webhook verification handshake.

        Echoes ``hub.challenge`` when ``hub.mode`` is ``subscribe`` and
        ``hub.verify_token`` matches the configured token.
        """
        params = request.query_params
        mode = params.get("hub.mode")
        token = params.get("hub.verify_token")
        challenge = params.get("hub.challenge", "")

        if verify_token and mode == "subscribe" and token == verify_token:
            logger.info("Webhook verified", extra={"event": "api.webhook.verified"})
            return PlainTextResponse(challenge, status_code=status.HTTP_200_OK)

        logger.warning(
            "Webhook verification rejected",
            extra={"event": "api.webhook.verification_failed", "mode": mode},
        )
        return Response(status_code=status.HTTP_403_FORBIDDEN)

    @app.post("/")
    async def whatsapp_webhook(request: Request) -> Response:
        """Log inbound WhatsApp callbacks (delivery statuses, replies)."""
        body = await _read_json(request)
        logger.info(
            "WhatsApp webhook received",
            extra={"event": "api.whatsapp.received", "body": body},
        )
        return Response(status_code=status.HTTP_200_OK)

    @app.post("/realworks", response_model=ListingEventResponse)
    async def realworks_webhook(request: Request) -> ListingEventResponse:
        """Process a Realworks listing event.

        Events without an ``objectUrl`` are acknowledged and ignored.
        """
        body = await _read_json(request)
        object_url = body.get("objectUrl") if isinstance(body, dict) else None

        if not object_url:
            logger.warning(
                "Realworks webhook without objectUrl ignored",
                extra={"event": "api.realworks.ignored", "body": body},
            )
            return ListingEventResponse(status="ignored")

        # Fetching and delivery are blocking I/O
        result = await run_in_threadpool(pipeline.process_object_url, object_url)

        return ListingEventResponse(
            status="processed",
            event_id=result.event_id,
            listing_id=result.listing_id,
            profiles_evaluated=result.profiles_evaluated,
            matched=result.total_matched,
            notified=result.total_notified,
            failed=result.total_failed,
        )

    return app
