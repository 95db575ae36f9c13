"""
FastAPI dependencies - turn a request into a RequestContext.

The bearer token (if any) is validated, its claims bound to the
context, and the subject's rule set resolved from the role bindings.
Requests without a token get an empty context; controllers deny
whatever it asks for.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from gatekeeper.auth.context import (
    RequestContext,
    extract_bearer_token,
    set_claims_into_context,
    with_org_env,
    with_rules,
)
from gatekeeper.auth.errors import TokenError

logger = logging.getLogger(__name__)


async def get_request_context(request: Request) -> RequestContext:
    """
    Build the request context.

    Usage:
        @app.get("/organizations")
        async def list_orgs(ctx: RequestContext = Depends(get_request_context)):
            ...
    """
    state = request.app.state.gatekeeper
    ctx = with_org_env(
        RequestContext(),
        request.query_params.get("org", ""),
        request.query_params.get("env", ""),
    )

    token_string = extract_bearer_token(request)
    if not token_string:
        return ctx

    try:
        token = state.codec.validate_access_token(token_string)
    except TokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=401, detail="invalid token")

    ctx = set_claims_into_context(ctx, token)
    return with_rules(ctx, state.bindings.rules_for(token.claims.subject))
