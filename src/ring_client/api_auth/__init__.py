"""
Authentication module for the Ring clients_api.

Provides the session-creation (login) request and the token-holding client.
"""

__all__: list[str] = []
