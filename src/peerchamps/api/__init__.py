"""
peerchamps.api

HTTP API package (FastAPI).

Responsibilities:
- App factory and composition root.
- Routers for session introspection, tenant-scoped reads and health probes.
"""
