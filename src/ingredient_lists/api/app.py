"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status

from ingredient_lists.api.models import (
    CreateListRequest,
    EditIngredientRequest,
    IngredientPayload,
    IngredientRef,
    MoveIngredientRequest,
    RenameListRequest,
    catalog_entry_to_dict,
    ingredient_to_dict,
    list_to_dict,
)
from ingredient_lists.app_logging import configure_logging
from ingredient_lists.containers import AppContainer
from ingredient_lists.domain.errors import ErrorKind, OperationResult
from ingredient_lists.domain.models import UserCredential
from ingredient_lists.domain.moves import MoveResult
from ingredient_lists.services.lists import ListService

_ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.UPSTREAM_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.PARTIAL_RECONCILIATION_FAILURE: status.HTTP_502_BAD_GATEWAY,
}


async def require_credential(
    authorization: str | None = Header(default=None),
) -> UserCredential:
    """Extract the bearer token the backend calls are made with."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return UserCredential(access_token=token.strip())


def _raise_for(result: OperationResult | MoveResult) -> None:
    if result:
        return
    kind = result.error or ErrorKind.UPSTREAM_FAILURE
    detail = getattr(result, "message", None) or kind.value
    raise HTTPException(status_code=_ERROR_STATUS[kind], detail=detail)


async def _session(request: Request, credential: UserCredential) -> ListService:
    container: AppContainer = request.app.state.container
    service, loaded = await container.list_sessions.get(credential)
    if service is None:
        _raise_for(loaded)
    return service


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/users/me")
    async def register_user(
        request: Request, credential: UserCredential = Depends(require_credential)
    ) -> dict[str, str]:
        """Register the signed-in user with the backend."""
        state_container: AppContainer = request.app.state.container
        _raise_for(await state_container.user_service.ensure_user(credential))
        return {"status": "ok"}

    @app.get("/catalog")
    async def catalog(
        request: Request,
        q: str | None = None,
        limit: int = 20,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, object]:
        """Search the ingredient catalog."""
        state_container: AppContainer = request.app.state.container
        entries = await state_container.catalog_service.search(credential, q, limit)
        if entries is None:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to fetch all ingredients",
            )
        return {"ingredients": [catalog_entry_to_dict(entry) for entry in entries]}

    @app.get("/units")
    async def units(
        request: Request, credential: UserCredential = Depends(require_credential)
    ) -> dict[str, object]:
        """Return the allowed measurement units."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.catalog_service.units(credential)
        if result is None:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to fetch measurement units",
            )
        return {"units": result}

    @app.get("/lists")
    async def get_lists(
        request: Request, credential: UserCredential = Depends(require_credential)
    ) -> dict[str, object]:
        """Return every list with its entries."""
        service = await _session(request, credential)
        return {"lists": [list_to_dict(item) for item in service.get_lists()]}

    @app.post("/lists", status_code=status.HTTP_201_CREATED)
    async def create_list(
        payload: CreateListRequest,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, str]:
        """Create an empty list."""
        service = await _session(request, credential)
        _raise_for(await service.create_list(payload.name))
        return {"status": "created"}

    @app.get("/lists/{name}")
    async def get_list(
        name: str,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, object]:
        """Return a single list."""
        service = await _session(request, credential)
        found = service.find_list(name)
        if found is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return list_to_dict(found)

    @app.get("/lists/{name}/search")
    async def search_list(
        name: str,
        request: Request,
        q: str = "",
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, object]:
        """Filter a list's entries by name."""
        service = await _session(request, credential)
        matches = service.search_list(name, q)
        if matches is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"ingredients": [ingredient_to_dict(entry) for entry in matches]}

    @app.delete("/lists/{name}")
    async def delete_list(
        name: str,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, str]:
        """Delete a list."""
        service = await _session(request, credential)
        _raise_for(await service.delete_list(name))
        return {"status": "deleted"}

    @app.patch("/lists/{name}")
    async def rename_list(
        name: str,
        payload: RenameListRequest,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, str]:
        """Rename a list."""
        service = await _session(request, credential)
        _raise_for(await service.rename_list(name, payload.name))
        return {"status": "renamed"}

    @app.post("/lists/{name}/ingredients")
    async def add_ingredient(
        name: str,
        payload: IngredientPayload,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, str]:
        """Add an ingredient to a list."""
        service = await _session(request, credential)
        _raise_for(await service.add_ingredient(name, payload.to_domain()))
        return {"status": "added"}

    @app.delete("/lists/{name}/ingredients")
    async def remove_ingredient(
        name: str,
        payload: IngredientRef,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, str]:
        """Remove an ingredient from a list."""
        service = await _session(request, credential)
        _raise_for(await service.remove_ingredient(name, payload.to_domain()))
        return {"status": "removed"}

    @app.put("/lists/{name}/ingredients")
    async def edit_ingredient(
        name: str,
        payload: EditIngredientRequest,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, str]:
        """Edit the amount and unit of an ingredient."""
        service = await _session(request, credential)
        _raise_for(
            await service.edit_ingredient(
                name, payload.old.to_domain(), payload.new.to_domain()
            )
        )
        return {"status": "edited"}

    @app.post("/moves")
    async def move_ingredient(
        payload: MoveIngredientRequest,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, str]:
        """Move an ingredient between two lists."""
        service = await _session(request, credential)
        result = await service.move_ingredient(
            payload.source, payload.destination, payload.ingredient.to_domain()
        )
        if isinstance(result, MoveResult) and not result:
            logger.warning(
                "Move from %s to %s ended as %s",
                payload.source,
                payload.destination,
                result.outcome.value,
            )
        _raise_for(result)
        return {"status": "moved"}

    @app.delete("/custom-ingredients")
    async def purge_custom_ingredient(
        payload: IngredientRef,
        request: Request,
        credential: UserCredential = Depends(require_credential),
    ) -> dict[str, int]:
        """Remove a deleted custom ingredient from every list."""
        service = await _session(request, credential)
        template = payload.to_domain()
        template.is_custom = True
        return {"removed": await service.cascade_delete_custom(template)}

    return app
