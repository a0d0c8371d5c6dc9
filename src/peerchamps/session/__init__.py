"""
peerchamps.session

Session/tenant context.

Responsibilities:
- Resolve the current principal, its role and tenant (`session.context`).
- Define the store/provider seams the context depends on (`session.store`).
"""

# Package marker; import from submodules to avoid pulling SQLAlchemy into `errors`.
