"""
Application package for the bike service.

The code is split into layers: ``core`` holds configuration, logging,
security, storage and cache plumbing; ``schemas`` holds the pydantic
records; ``repositories`` talk to SQLite; ``services`` hold the bike
and component business rules; ``api`` and ``rpc`` are the two
transport surfaces that share those services.  Use
``bike_service_api.app.main.create_app`` to build an application.
"""
