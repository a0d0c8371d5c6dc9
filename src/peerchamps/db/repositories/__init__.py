"""
peerchamps.db.repositories

Thin data-access repositories; access decisions live in `rbac` and `session`.
"""
