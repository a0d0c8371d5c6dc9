"""
peerchamps.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models for tenants (companies) and users, engine/session setup,
  and repositories.
"""
