"""
Error taxonomy shared by repositories, services and transports.

Services raise these exceptions; the HTTP endpoints translate them into
status codes and the RPC surface swallows them.  ``CacheError`` never
escapes a service because the cache is advisory.
"""


class BikeServiceError(Exception):
    """Base class for all domain errors raised by this package."""


class ValidationError(BikeServiceError):
    """Malformed or missing required fields."""


class InvalidIdentifierError(BikeServiceError):
    """An identifier string is not a valid UUID."""


class NotFoundError(BikeServiceError):
    """No matching row, or a mutation affected zero rows."""


class ReferenceNotFoundError(BikeServiceError):
    """A referenced owner or parent bike does not exist at insert time."""


class UnauthorizedError(BikeServiceError):
    """Missing or invalid caller identity."""


class ForbiddenError(BikeServiceError):
    """The caller is neither the resource owner nor an administrator."""


class CacheError(BikeServiceError):
    """The cache backend failed.  Always logged and swallowed."""


class StorageError(BikeServiceError):
    """Unclassified storage failure, propagated as‑is."""
