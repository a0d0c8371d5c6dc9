"""
peerchamps

Top-level package for the PeerChamps access core (RBAC + tenant-scoped sessions).

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal; submodules pull in FastAPI/SQLAlchemy and should only be
# imported where they are needed.
