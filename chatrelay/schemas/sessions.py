from pydantic import Field

from chatrelay.protocol import Session

from .common import CamelModel


class SessionResponse(CamelModel):
    """In-memory negotiation state of one recipient."""

    recipient: str
    expected_seq: int = Field(..., alias="expectedSeq")
    window_occupancy: int = Field(..., alias="windowOccupancy")
    delivered_through: int = Field(..., alias="deliveredThrough")
    last_activity: float = Field(..., alias="lastActivity", description="Epoch seconds")
    ack: int

    @classmethod
    def from_session(cls, session: Session) -> "SessionResponse":
        return cls(
            recipient=session.recipient,
            expected_seq=session.expected_seq,
            window_occupancy=session.window_occupancy,
            delivered_through=session.delivered_through,
            last_activity=session.last_activity,
            ack=session.ack,
        )


class HealthResponse(CamelModel):
    status: str = "ok"


__all__ = ["HealthResponse", "SessionResponse"]
