"""
Internal RPC surface.

Other services call this read‑only API to list bikes by owner.  It runs
as a separate ASGI application on its own port and shares the service
layer with the public HTTP API.
"""
