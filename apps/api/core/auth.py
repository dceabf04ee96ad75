"""Centralized authentication and tenant resolution dependencies.

Provides user-scoped and service-role Supabase clients, and resolves the
caller's organization (the tenant every transaction is stored under).

The organization id is read from the user's ``app_metadata``, which only
the service role can write. It is never taken from the request body or
query string.
"""

import os
from dataclasses import dataclass

import structlog
from fastapi import Depends, Header, HTTPException
from supabase import Client, create_client

from apps.api.core.errors import AuthenticationError, AuthorizationError
from apps.api.core.logging import bind_request_context

logger = structlog.get_logger()

ORGANIZATION_CLAIM = "organization_id"


@dataclass(frozen=True)
class TenantContext:
    """Who is calling, and which organization their data belongs to."""

    user_id: str
    organization_id: str
    email: str = ""


def _get_supabase_url() -> str:
    url = os.environ.get("SUPABASE_URL") or os.environ.get("NEXT_PUBLIC_SUPABASE_URL")
    if not url:
        raise RuntimeError("SUPABASE_URL is not configured")
    return url


def _get_supabase_anon_key() -> str:
    key = os.environ.get("SUPABASE_ANON_KEY") or os.environ.get("NEXT_PUBLIC_SUPABASE_ANON_KEY")
    if not key:
        raise RuntimeError("SUPABASE_ANON_KEY is not configured")
    return key


async def get_user_token(authorization: str = Header(default="")) -> str:
    """Extract Bearer token from Authorization header.

    Returns the raw JWT string.
    """
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Missing or invalid Authorization header. Expected: Bearer <token>",
        )

    token = authorization[7:].strip()
    if not token:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
        )
    return token


async def get_user_client(token: str = Depends(get_user_token)) -> Client:
    """Provide a Supabase client authenticated with the user's JWT.

    RLS policies will be enforced for all queries.

    Note: We pass an empty string as the refresh token because the API
    is stateless — each request carries a fresh token from the client.
    The backend never refreshes tokens.
    """
    client = create_client(_get_supabase_url(), _get_supabase_anon_key())
    try:
        client.auth.set_session(token, "")
    except Exception as e:
        logger.warning("session_rejected", error=str(e))
        raise AuthenticationError("Invalid or expired bearer token")
    return client


async def get_tenant_context(client: Client = Depends(get_user_client)) -> TenantContext:
    """Resolve the authenticated user and their organization."""
    try:
        user_response = client.auth.get_user()
    except Exception as e:
        logger.warning("user_lookup_failed", error=str(e))
        raise AuthenticationError("Invalid bearer token")

    if not user_response or not user_response.user:
        raise AuthenticationError("Invalid bearer token")

    user = user_response.user
    app_metadata = user.app_metadata or {}
    organization_id = app_metadata.get(ORGANIZATION_CLAIM)
    if not organization_id:
        logger.warning("user_without_organization", user_id=str(user.id))
        raise AuthorizationError()

    context = TenantContext(
        user_id=str(user.id),
        organization_id=str(organization_id),
        email=user.email or "",
    )
    bind_request_context(organization_id=context.organization_id, user_id=context.user_id)
    return context


def get_service_client() -> Client:
    """Provide a service-role Supabase client (bypasses RLS).

    Used by the bulk import tool, which writes on behalf of an organization
    named on the command line.
    """
    url = _get_supabase_url()
    service_key = os.environ.get("SUPABASE_SERVICE_KEY", "")
    if not service_key:
        raise RuntimeError("SUPABASE_SERVICE_KEY is not configured")
    return create_client(url, service_key)
