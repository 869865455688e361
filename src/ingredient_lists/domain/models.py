"""Domain models for the ingredient lists service."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserCredential:
    """Represents the signed-in user passed to backend calls."""

    access_token: str
    username: str = "User"
