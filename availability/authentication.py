"""
Token authentication for the API.

Clients send ``Authorization: Bearer <token>``; tokens are DRF authtoken
keys.  Kept in its own module so REST framework can import it from
settings without pulling in any views.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Bearer`` keyword."""

    keyword = 'Bearer'
