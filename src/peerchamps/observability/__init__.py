"""
peerchamps.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Request-scoped log context (request id, principal, tenant).
"""
