"""
peerchamps.api.routers

HTTP routers; each module exposes a module-level `router`.
"""
