from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from chatrelay.deps import get_relay
from chatrelay.schemas import AckResponse, PolledMessage, ReceiveResponse, SendMessageRequest
from chatrelay.schemas.common import Identity
from chatrelay.services import RelayService

router = APIRouter(tags=["messages"])


@router.post("/send-message", response_model=AckResponse)
def send_message(
    payload: SendMessageRequest,
    relay: RelayService = Depends(get_relay),
) -> AckResponse | Response:
    """
    Submit one text message for in-order admission.

    The ACK is the recipient's cumulative acknowledgment whether or not this
    submission was accepted. A submission lost on the simulated channel gets
    an empty 200 response; the sender retries the same seq.
    """
    result = relay.submit_text(
        sender=payload.sender,
        recipient=payload.receiver,
        seq=payload.seq,
        payload=payload.message,
    )
    if result.dropped:
        return Response(status_code=200)
    return AckResponse(ack=result.decision.ack)


@router.get("/receive", response_model=ReceiveResponse, response_model_exclude_none=True)
def receive(
    user: Annotated[Identity, Query()],
    last_ack: int = Query(-1, alias="lastAck", ge=-1),
    relay: RelayService = Depends(get_relay),
) -> ReceiveResponse:
    """Replay messages past the ``lastAck`` watermark and confirm delivery up to it."""
    result = relay.poll(user, last_ack)
    return ReceiveResponse(
        messages=[PolledMessage.from_message(m) for m in result.messages],
        ack=result.ack,
    )


__all__ = ["router"]
