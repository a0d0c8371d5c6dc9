"""
peerchamps.auth

Authentication/authorization package.

Responsibilities:
- Identity types (`Identity`, `Principal`, `Role`).
- JWT helpers and the bearer-token identity provider.
- FastAPI gating dependencies built on the permission evaluator.
"""
