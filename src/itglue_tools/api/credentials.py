"""Cross-platform credential management for the ITGlue API.

Credentials are resolved in the following order:
1. Explicit parameters passed to the client
2. Environment variables (ITGLUE_BASE_URL, ITGLUE_API_KEY, ...)
3. System keyring (via keyring library)
4. .env file in current directory or parent directories

The API base URL falls back to the region (ITGLUE_REGION) and finally to
the US endpoint, so only the API key is strictly required.

Example:
    from itglue_tools.api.credentials import get_credentials

    # Auto-discover credentials
    base_url, api_key = get_credentials()

    # EU tenant with an explicit key
    base_url, api_key = get_credentials(api_key="ITG.xxx", region="eu")
"""

import logging
import os
from pathlib import Path
from typing import NamedTuple

import keyring

logger = logging.getLogger(__name__)

# Default keyring service name
DEFAULT_SERVICE = "itglue-tools"

REGION_URLS = {
    "us": "https://api.itglue.com",
    "eu": "https://api.eu.itglue.com",
    "au": "https://api.au.itglue.com",
}
DEFAULT_REGION = "us"

# Environment variable names
ENV_BASE_URL = "ITGLUE_BASE_URL"
ENV_REGION = "ITGLUE_REGION"
ENV_API_KEY = "ITGLUE_API_KEY"
ENV_PORTAL_URL = "ITGLUE_PORTAL_URL"
ENV_USER_EMAIL = "ITGLUE_USER_EMAIL"
ENV_PASSWORD = "ITGLUE_PASSWORD"  # noqa: S105

# Keyring account names
KEYRING_BASE_URL = "base_url"
KEYRING_API_KEY = "api_key"
KEYRING_PORTAL_URL = "portal_url"
KEYRING_EMAIL = "user_email"
KEYRING_PASSWORD = "password"  # noqa: S105


class ITGlueCredentials(NamedTuple):
    """ITGlue API key credentials."""

    base_url: str
    api_key: str


class JWTCredentials(NamedTuple):
    """ITGlue user credentials for the JWT login flow."""

    portal_url: str
    email: str
    password: str


def region_url(region: str) -> str:
    """Return the API base URL for a region code ('us', 'eu', 'au').

    Raises:
        ValueError: If the region is unknown
    """
    try:
        return REGION_URLS[region.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown ITGlue region '{region}'. Choose from {sorted(REGION_URLS)}"
        ) from None


def get_credentials(
    base_url: str | None = None,
    api_key: str | None = None,
    region: str | None = None,
    service: str = DEFAULT_SERVICE,
) -> ITGlueCredentials:
    """Get ITGlue API key credentials from various sources.

    Resolution order:
    1. Explicit parameters
    2. Environment variables
    3. System keyring
    4. .env file
    5. Region URL (base URL only)

    Args:
        base_url: Explicit API base URL (overrides other sources)
        api_key: Explicit API key (overrides other sources)
        region: Region code used when no base URL is configured
        service: Keyring service name

    Returns:
        ITGlueCredentials tuple with base_url, api_key

    Raises:
        ValueError: If no API key can be found
    """
    resolved_url = base_url or os.environ.get(ENV_BASE_URL)
    resolved_key = api_key or os.environ.get(ENV_API_KEY)
    resolved_region = region or os.environ.get(ENV_REGION)

    # An explicit region wins over stored base URLs
    if not resolved_url and resolved_region:
        resolved_url = region_url(resolved_region)

    if not resolved_url:
        resolved_url = _get_from_keyring(service, KEYRING_BASE_URL)
    if not resolved_key:
        resolved_key = _get_from_keyring(service, KEYRING_API_KEY)

    if not all([resolved_url, resolved_key]):
        env_vars = _load_dotenv()
        if not resolved_url:
            resolved_url = env_vars.get(ENV_BASE_URL)
            if not resolved_url and env_vars.get(ENV_REGION):
                resolved_url = region_url(env_vars[ENV_REGION])
        if not resolved_key:
            resolved_key = env_vars.get(ENV_API_KEY)

    if not resolved_key:
        raise ValueError(
            f"Missing ITGlue credentials: api_key. "
            f"Set the {ENV_API_KEY} environment variable, use the keyring, "
            f"or provide credentials explicitly."
        )

    if not resolved_url:
        resolved_url = REGION_URLS[DEFAULT_REGION]

    return ITGlueCredentials(base_url=resolved_url.rstrip("/"), api_key=resolved_key)


def get_portal_url(portal_url: str | None = None, service: str = DEFAULT_SERVICE) -> str:
    """Resolve the tenant portal URL alone (enough for SAML login).

    Raises:
        ValueError: If no portal URL is configured
    """
    resolved_url = (
        portal_url
        or os.environ.get(ENV_PORTAL_URL)
        or _get_from_keyring(service, KEYRING_PORTAL_URL)
        or _load_dotenv().get(ENV_PORTAL_URL)
    )
    if not resolved_url:
        raise ValueError(
            f"Missing ITGlue portal URL. Set {ENV_PORTAL_URL}, use the keyring, "
            f"or pass --portal-url."
        )
    return resolved_url.rstrip("/")


def get_jwt_credentials(
    portal_url: str | None = None,
    email: str | None = None,
    password: str | None = None,
    service: str = DEFAULT_SERVICE,
) -> JWTCredentials:
    """Get ITGlue user credentials for JWT authentication.

    Uses the same resolution order as get_credentials.

    Args:
        portal_url: Tenant portal URL (e.g., https://company.itglue.com)
        email: User email
        password: User password
        service: Keyring service name

    Returns:
        JWTCredentials tuple

    Raises:
        ValueError: If any value cannot be found
    """
    resolved_url = portal_url or os.environ.get(ENV_PORTAL_URL)
    resolved_email = email or os.environ.get(ENV_USER_EMAIL)
    resolved_password = password or os.environ.get(ENV_PASSWORD)

    if not resolved_url:
        resolved_url = _get_from_keyring(service, KEYRING_PORTAL_URL)
    if not resolved_email:
        resolved_email = _get_from_keyring(service, KEYRING_EMAIL)
    if not resolved_password:
        resolved_password = _get_from_keyring(service, KEYRING_PASSWORD)

    if not all([resolved_url, resolved_email, resolved_password]):
        env_vars = _load_dotenv()
        if not resolved_url:
            resolved_url = env_vars.get(ENV_PORTAL_URL)
        if not resolved_email:
            resolved_email = env_vars.get(ENV_USER_EMAIL)
        if not resolved_password:
            resolved_password = env_vars.get(ENV_PASSWORD)

    missing = []
    if not resolved_url:
        missing.append("portal_url")
    if not resolved_email:
        missing.append("email")
    if not resolved_password:
        missing.append("password")

    if missing:
        raise ValueError(
            f"Missing ITGlue login credentials: {', '.join(missing)}. "
            f"Set environment variables ({ENV_PORTAL_URL}, {ENV_USER_EMAIL}, {ENV_PASSWORD}), "
            f"use the keyring, or provide credentials explicitly."
        )

    assert resolved_url is not None
    assert resolved_email is not None
    assert resolved_password is not None

    return JWTCredentials(
        portal_url=resolved_url.rstrip("/"),
        email=resolved_email,
        password=resolved_password,
    )


def save_credentials(
    api_key: str,
    base_url: str | None = None,
    service: str = DEFAULT_SERVICE,
) -> None:
    """Save API key credentials to the system keyring.

    Args:
        api_key: ITGlue API key
        base_url: API base URL (stored only when given)
        service: Keyring service name
    """
    keyring.set_password(service, KEYRING_API_KEY, api_key)
    if base_url:
        keyring.set_password(service, KEYRING_BASE_URL, base_url)
    logger.info("Credentials saved to keyring (service: %s)", service)


def delete_credentials(service: str = DEFAULT_SERVICE) -> None:
    """Delete all stored credentials from the system keyring.

    Args:
        service: Keyring service name
    """
    accounts = [
        KEYRING_BASE_URL,
        KEYRING_API_KEY,
        KEYRING_PORTAL_URL,
        KEYRING_EMAIL,
        KEYRING_PASSWORD,
    ]
    for account in accounts:
        try:
            keyring.delete_password(service, account)
        except keyring.errors.PasswordDeleteError:
            pass  # Already deleted or doesn't exist
    logger.info("Credentials deleted from keyring (service: %s)", service)


def _get_from_keyring(service: str, account: str) -> str | None:
    """Get a value from the system keyring.

    Args:
        service: Keyring service name
        account: Account/key name

    Returns:
        Value from keyring or None if not found
    """
    try:
        return keyring.get_password(service, account)
    except keyring.errors.KeyringError as e:
        logger.debug("Keyring error for %s/%s: %s", service, account, e)
        return None


def _load_dotenv() -> dict[str, str]:
    """Load variables from the nearest .env file.

    Returns:
        Dictionary of variables from the first .env found walking upwards
    """
    env_vars: dict[str, str] = {}

    current = Path.cwd()
    for directory in [current, *current.parents]:
        env_file = directory / ".env"
        if env_file.exists():
            logger.debug("Loading .env from %s", env_file)
            try:
                with open(env_file, encoding="utf-8") as f:
                    for line in f:
                        line = line.strip()
                        if not line or line.startswith("#"):
                            continue
                        if "=" in line:
                            key, _, value = line.partition("=")
                            key = key.strip()
                            value = value.strip()
                            if value and value[0] in ('"', "'") and value[-1] == value[0]:
                                value = value[1:-1]
                            env_vars[key] = value
            except OSError as e:
                logger.debug("Error reading .env file: %s", e)
            break  # Only load from first .env found

    return env_vars
