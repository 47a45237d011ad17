"""
Token authentication used by the API.

Clients may send either the legacy DRF token (``Authorization: Token
<key>``) or a JWT access token (``Authorization: Bearer <jwt>``); the
JWT class is configured next to this one in ``REST_FRAMEWORK``.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication with a stable import path for settings."""

    keyword = 'Token'
