"""
Pydantic records for bikes, components and the authenticated caller.

The same models are used as domain records inside the services and as
request/response bodies at the HTTP boundary.
"""
