"""User-related business logic."""

from dataclasses import dataclass

from ingredient_lists.adapters.backend_gateway import BackendGateway
from ingredient_lists.domain.errors import ErrorKind, OperationResult
from ingredient_lists.domain.models import UserCredential


@dataclass
class UserService:
    """Application service for user lifecycle actions."""

    gateway: BackendGateway

    async def ensure_user(self, credential: UserCredential) -> OperationResult:
        """Ensure the backend knows the signed-in user."""
        if await self.gateway.create_user(credential):
            return OperationResult.success()
        return OperationResult.failure(
            ErrorKind.UPSTREAM_FAILURE, "Failed to register user with backend."
        )
