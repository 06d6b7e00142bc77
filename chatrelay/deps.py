from fastapi import Request

from .services import RelayService


def get_relay(request: Request) -> RelayService:
    """
    FastAPI dependency returning the relay owned by the running application.

    The instance is created by the lifespan handler in chatrelay.routes (or
    installed beforehand by tests) and lives on ``app.state.relay``.
    """
    return request.app.state.relay
