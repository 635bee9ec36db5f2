"""
Mock authentication provider for local development.
"""

from focusplan.interfaces.auth_provider import IAuthProvider, User


class MockAuthProvider(IAuthProvider):
    """
    Takes the bearer token as the user ID.

    Lets several local users keep separate task lists and plans without an
    identity provider.
    """

    def __init__(self, enabled: bool = False):
        self._enabled = enabled

    async def verify_token(self, token: str) -> User:
        user_id = token.strip()
        if not user_id:
            raise ValueError("Empty bearer token")
        email = user_id if "@" in user_id else f"{user_id}@focusplan.local"
        return User(id=user_id, email=email, display_name=user_id)

    def is_enabled(self) -> bool:
        return self._enabled
