"""
Top‑level package for the Bike Service API.

All functionality lives in submodules under ``app``; importing this
package has no side effects.  Modules are addressed with fully
qualified names such as ``bike_service_api.app.main``.
"""

__all__ = []
