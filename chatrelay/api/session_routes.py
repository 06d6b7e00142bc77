from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from chatrelay.deps import get_relay
from chatrelay.errors import not_found
from chatrelay.schemas import HealthResponse, SessionResponse
from chatrelay.services import RelayService

router = APIRouter(tags=["sessions"])


@router.get("/users", response_model=list[str])
def list_active_users(relay: RelayService = Depends(get_relay)) -> list[str]:
    """Identities with persisted activity inside the active-user window."""
    return relay.active_users()


@router.get("/sessions/{recipient}", response_model=SessionResponse)
def get_session_endpoint(
    recipient: str,
    relay: RelayService = Depends(get_relay),
) -> SessionResponse:
    session = relay.session(recipient)
    if session is None:
        raise not_found(f"Session '{recipient}' not found")
    return SessionResponse.from_session(session)


@router.delete("/sessions/{recipient}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session_endpoint(
    recipient: str,
    relay: RelayService = Depends(get_relay),
) -> Response:
    """
    Drop the recipient's negotiation state, as an idle expiry would.
    Delivered and persisted messages are kept.
    """
    if not relay.reset_session(recipient):
        raise not_found(f"Session '{recipient}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse()


__all__ = ["router"]
