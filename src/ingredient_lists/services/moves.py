"""Cross-list ingredient moves with compensation."""

import logging
from dataclasses import dataclass

from ingredient_lists.adapters.backend_gateway import BackendGateway
from ingredient_lists.domain.ingredients import Ingredient
from ingredient_lists.domain.models import UserCredential
from ingredient_lists.domain.moves import MoveOutcome, MoveResult, MoveStep

_logger = logging.getLogger(__name__)


@dataclass
class MoveOperation:
    """Moves an ingredient between two lists without a shared transaction.

    The destination add happens first and the source remove second. If the
    remove fails, the ingredient is added back to the source and removed
    from the destination; calls never overlap. A move never reports partial
    success.

    Compensation calls are retried up to ``compensation_attempts`` times
    each. When they still fail the move ends as ``PARTIALLY_RECONCILED``.
    """

    gateway: BackendGateway
    credential: UserCredential
    compensation_attempts: int = 3

    async def execute(
        self, source: str, destination: str, ingredient: Ingredient
    ) -> MoveResult:
        """Move the ingredient from ``source`` to ``destination``."""
        steps: list[MoveStep] = []

        added = await self.gateway.add_ingredient(
            self.credential, destination, ingredient.copy()
        )
        steps.append(MoveStep("add", destination, added))
        if not added:
            _logger.info(
                "Move of %s to %s failed at destination add",
                ingredient.name,
                destination,
            )
            return MoveResult(MoveOutcome.FAILED, steps)

        removed = await self.gateway.remove_ingredient(
            self.credential, source, ingredient.copy()
        )
        steps.append(MoveStep("remove", source, removed))
        if removed:
            _logger.info("Moved %s from %s to %s", ingredient.name, source, destination)
            return MoveResult(MoveOutcome.MOVED, steps)

        _logger.warning(
            "Source remove failed moving %s from %s to %s; compensating",
            ingredient.name,
            source,
            destination,
        )
        restored = await self._compensate("add", source, ingredient, steps)
        withdrawn = await self._compensate("remove", destination, ingredient, steps)
        if restored and withdrawn:
            return MoveResult(MoveOutcome.FAILED, steps)

        _logger.error(
            "Compensation incomplete moving %s from %s to %s "
            "(restored_source=%s, removed_from_destination=%s)",
            ingredient.name,
            source,
            destination,
            restored,
            withdrawn,
        )
        return MoveResult(MoveOutcome.PARTIALLY_RECONCILED, steps)

    async def _compensate(
        self,
        action: str,
        list_name: str,
        ingredient: Ingredient,
        steps: list[MoveStep],
    ) -> bool:
        call = (
            self.gateway.add_ingredient
            if action == "add"
            else self.gateway.remove_ingredient
        )
        for attempt in range(1, max(self.compensation_attempts, 1) + 1):
            succeeded = await call(self.credential, list_name, ingredient.copy())
            steps.append(MoveStep(action, list_name, succeeded, compensation=True))
            if succeeded:
                return True
            _logger.warning(
                "Compensating %s on %s failed (attempt %s/%s)",
                action,
                list_name,
                attempt,
                self.compensation_attempts,
            )
        return False
