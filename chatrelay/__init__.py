"""Chat relay emulating Go-Back-N delivery over stateless HTTP request/response."""

__version__ = "0.1.0"
