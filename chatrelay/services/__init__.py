from .persistence import PersistenceDispatcher
from .relay_service import PollResult, RelayService, TextSubmission

__all__ = ["PersistenceDispatcher", "PollResult", "RelayService", "TextSubmission"]
