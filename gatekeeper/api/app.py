"""
FastAPI application for gatekeeper.

A thin HTTP surface over the token codec and the action controllers.
All authorization decisions happen in the controllers; this module
only maps their outcomes to status codes.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from gatekeeper.actions.errors import ActionError, ErrorCode
from gatekeeper.actions.organizations import OrganizationsController
from gatekeeper.api.dependencies import get_request_context
from gatekeeper.auth.context import RequestContext
from gatekeeper.auth.errors import TokenError
from gatekeeper.auth.jwt import TokenCodec, TokenPair
from gatekeeper.auth.roles import RoleBindings, load_role_bindings
from gatekeeper.auth.secret import SecretManager
from gatekeeper.config import Settings, configure_logging, get_settings
from gatekeeper.core.models import Organization
from gatekeeper.storage import Store, create_local_store

logger = logging.getLogger(__name__)


STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.INTERNAL_ERR: 500,
    ErrorCode.INVALID_ARGUMENT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.ALREADY_EXISTS_ERR: 409,
    ErrorCode.PERMISSION_DENIED: 403,
}


# =============================================================================
# App State
# =============================================================================


class AppState:
    """Application state - one per app, shared by every request."""

    def __init__(self, store: Store, settings: Settings, bindings: RoleBindings):
        self.store = store
        self.settings = settings
        self.bindings = bindings
        self.secrets = SecretManager(settings)
        self.codec = TokenCodec(self.secrets, settings)
        self.organizations = OrganizationsController(store, settings=settings)


class RefreshRequest(BaseModel):
    access_token: str
    refresh_token: str


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    store: Store | None = None,
    settings: Settings | None = None,
    bindings: RoleBindings | None = None,
) -> FastAPI:
    """
    Build the application.

    The signing secret is bootstrapped in the lifespan hook, before
    the first request is served.
    """
    settings = settings or get_settings()
    if bindings is None:
        bindings = load_role_bindings(settings.roles_file) if settings.roles_file else RoleBindings()

    state = AppState(store or create_local_store(), settings, bindings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await state.secrets.init_secret(state.store)
        logger.info(f"Gatekeeper API starting in {settings.environment} mode")
        yield
        logger.info("Gatekeeper API shutting down")

    app = FastAPI(title="gatekeeper", lifespan=lifespan)
    app.state.gatekeeper = state

    @app.exception_handler(ActionError)
    async def action_error_handler(request: Request, exc: ActionError) -> JSONResponse:
        return JSONResponse(
            status_code=STATUS_CODES[exc.code],
            content={"code": exc.code.name.lower(), "detail": exc.message},
        )

    # =========================================================================
    # Auth
    # =========================================================================

    @app.post("/auth/refresh", response_model=TokenPair)
    async def refresh(data: RefreshRequest):
        """Exchange an (expired) access token and a refresh token for a new pair."""
        try:
            return state.codec.refresh(data.access_token, data.refresh_token)
        except TokenError as e:
            logger.info(f"Refresh rejected: {e}")
            raise HTTPException(status_code=401, detail="invalid token")

    # =========================================================================
    # Organizations
    # =========================================================================

    @app.get("/organizations", response_model=list[Organization])
    async def list_organizations(ctx: RequestContext = Depends(get_request_context)):
        return await state.organizations.query(ctx)

    @app.get("/organizations/{name:path}", response_model=Organization)
    async def get_organization(name: str, ctx: RequestContext = Depends(get_request_context)):
        return await state.organizations.find(ctx, name)

    @app.post("/organizations", status_code=201)
    async def create_organization(
        org: Organization,
        ctx: RequestContext = Depends(get_request_context),
    ):
        await state.organizations.create(ctx, org)
        return Response(status_code=201)

    @app.put("/organizations/{name:path}", status_code=204)
    async def update_organization(
        name: str,
        org: Organization,
        ctx: RequestContext = Depends(get_request_context),
    ):
        await state.organizations.update(ctx, org.model_copy(update={"name": name}))
        return Response(status_code=204)

    @app.delete("/organizations/{name:path}", status_code=204)
    async def delete_organization(name: str, ctx: RequestContext = Depends(get_request_context)):
        await state.organizations.destroy(ctx, name)
        return Response(status_code=204)

    return app


def main():
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(create_app(settings=settings), host="0.0.0.0", port=8080)


if __name__ == "__main__":
    main()
