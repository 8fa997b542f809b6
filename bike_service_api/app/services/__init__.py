"""
Service layer.

``BikeService`` and ``ComponentService`` receive their repositories and
cache at construction time, so HTTP handlers, the RPC surface and tests
can all share one wiring path.
"""
