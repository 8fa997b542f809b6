"""Print a development token signed with ``TOKEN_SECRET``.

Usage:
    python create_token.py [USER_ID] [ROLE]

``USER_ID`` defaults to a random UUID and ``ROLE`` to ``admin``.
"""
import sys
import uuid

from bike_service_api.app.core.config import Settings
from bike_service_api.app.core.security import JWTTokenService

user_id = sys.argv[1] if len(sys.argv) > 1 else str(uuid.uuid4())
role = sys.argv[2] if len(sys.argv) > 2 else "admin"
# valid for 365 days (seconds)
service = JWTTokenService(Settings().secret_key)
token = service.create_access_token(
    {"id": str(uuid.uuid4()), "user_id": user_id, "role": role},
    expires_delta=365 * 24 * 60 * 60,
)
print(token)
