"""ITGlue REST API client.

This module provides:
- ITGlueClient: HTTP client with auth, retry and pagination
- ApiKeyAuth / JWTAuth: request authentication
- RetryPolicy: rate limit and timeout recovery
- PagedFetcher: page accumulation for list endpoints
- Resource endpoints for organizations, configurations, contacts, ...

Example:
    from itglue_tools.api import ITGlueClient

    with ITGlueClient(region="eu") as client:
        for org in client.resource("organizations").list():
            print(org.id, org.get("name"))
"""

from itglue_tools.api.auth import ApiKeyAuth, JWTAuth
from itglue_tools.api.base import ITGlueClient
from itglue_tools.api.credentials import (
    ITGlueCredentials,
    JWTCredentials,
    delete_credentials,
    get_credentials,
    get_jwt_credentials,
    save_credentials,
)
from itglue_tools.api.filters import build_filter_params
from itglue_tools.api.pagination import PagedFetcher
from itglue_tools.api.resources import (
    Configurations,
    Contacts,
    DocumentFolders,
    Documents,
    Exports,
    FlexibleAssets,
    Groups,
    Locations,
    Manufacturers,
    Models,
    Organizations,
    Passwords,
    ResourceEndpoint,
    Users,
)
from itglue_tools.api.retry import RetryPolicy

__all__ = [
    # Client
    "ITGlueClient",
    "RetryPolicy",
    "PagedFetcher",
    "build_filter_params",
    # Auth
    "ApiKeyAuth",
    "JWTAuth",
    "ITGlueCredentials",
    "JWTCredentials",
    "get_credentials",
    "get_jwt_credentials",
    "save_credentials",
    "delete_credentials",
    # Endpoints
    "ResourceEndpoint",
    "Organizations",
    "Configurations",
    "Contacts",
    "Documents",
    "Passwords",
    "FlexibleAssets",
    "Locations",
    "Manufacturers",
    "Models",
    "Groups",
    "Users",
    "DocumentFolders",
    "Exports",
]
