"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status

from location_share.api.models import FixPayload
from location_share.app_logging import configure_logging
from location_share.containers import AppContainer
from location_share.domain.errors import (
    MalformedMetadata,
    SessionError,
    SessionExpired,
    SessionNotFound,
    StoreReadFailed,
    StoreWriteFailed,
)
from location_share.domain.locations import LocationReport, PositionFix
from location_share.domain.sessions import SessionValidity, to_epoch_ms
from location_share.services.store import utc_now

_SESSION_ERROR_STATUS = {
    SessionNotFound: status.HTTP_404_NOT_FOUND,
    SessionExpired: status.HTTP_410_GONE,
    MalformedMetadata: 422,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/")
    async def select_role(
        request: Request, session: str | None = None
    ) -> dict[str, object]:
        """Pick the tracker or submitter role from the ``session`` parameter."""
        if not session:
            return {"role": "tracker"}
        state_container: AppContainer = request.app.state.container
        validity = _check(state_container, session, logger)
        payload = {"role": "submitter", **_validity_payload(session, validity)}
        if not validity.valid:
            payload["view"] = "link_invalid"
        return payload

    @app.post("/sessions", status_code=status.HTTP_201_CREATED)
    async def create_session(request: Request) -> dict[str, object]:
        """Generate a new session and its shareable link."""
        state_container: AppContainer = request.app.state.container
        try:
            session, link = state_container.session_service.create_session()
        except StoreWriteFailed as exc:
            logger.exception("Failed to create session")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not create a tracking session.",
            ) from exc
        return {
            "session_id": session.id,
            "link": link,
            "created": to_epoch_ms(session.created),
            "expires": to_epoch_ms(session.expires),
        }

    @app.get("/sessions/{session_id}")
    async def session_validity(session_id: str, request: Request) -> dict[str, object]:
        """Report whether a session link is still usable."""
        state_container: AppContainer = request.app.state.container
        validity = _check(state_container, session_id, logger)
        return _validity_payload(session_id, validity)

    @app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_session(session_id: str, request: Request) -> Response:
        """Remove a session and its location."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.session_service.delete_session(session_id)
        except StoreWriteFailed as exc:
            logger.exception("Failed to delete session", extra={"session": session_id})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            ) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.put("/sessions/{session_id}/location")
    async def submit_location(
        session_id: str, payload: FixPayload, request: Request
    ) -> dict[str, object]:
        """Accept a fix from the submitter for a valid session."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.session_service.require_valid(session_id)
        except SessionError as exc:
            raise HTTPException(
                status_code=_SESSION_ERROR_STATUS[type(exc)],
                detail=SessionValidity.invalid(exc.reason).message,
            ) from exc
        except StoreReadFailed as exc:
            logger.exception("Failed to check session", extra={"session": session_id})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            ) from exc

        timestamp = payload.timestamp
        if timestamp is None:
            timestamp = to_epoch_ms(utc_now())
        fix = PositionFix(
            latitude=payload.latitude,
            longitude=payload.longitude,
            accuracy=payload.accuracy,
            timestamp=timestamp,
        )
        try:
            outcome = await state_container.location_service.report_fix(
                session_id, fix
            )
        except (StoreReadFailed, StoreWriteFailed) as exc:
            logger.exception("Failed to store location", extra={"session": session_id})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Failed to send location.",
            ) from exc
        return {"stored": outcome.stored, "location": _report_payload(outcome.report)}

    @app.get("/sessions/{session_id}/location")
    async def latest_location(session_id: str, request: Request) -> dict[str, object]:
        """Return the latest location for a session, or null before any fix."""
        state_container: AppContainer = request.app.state.container
        try:
            report = state_container.location_service.latest(session_id)
        except StoreReadFailed as exc:
            logger.exception("Failed to poll location", extra={"session": session_id})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            ) from exc
        return {"location": _report_payload(report) if report else None}

    return app


def _check(
    state_container: AppContainer, session_id: str, logger: logging.Logger
) -> SessionValidity:
    try:
        return state_container.session_service.check_validity(session_id)
    except (StoreReadFailed, StoreWriteFailed) as exc:
        logger.exception("Failed to check session", extra={"session": session_id})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE) from exc


def _validity_payload(session_id: str, validity: SessionValidity) -> dict[str, object]:
    payload: dict[str, object] = {
        "session_id": session_id,
        "valid": validity.valid,
        "reason": validity.reason.value if validity.reason else None,
        "message": validity.message,
    }
    if validity.session is not None:
        payload["expires"] = to_epoch_ms(validity.session.expires)
    return payload


def _report_payload(report: LocationReport) -> dict[str, object]:
    return report.model_dump(by_alias=True, exclude_none=True)
