"""Command-line interface for itglue-tools.

Usage:
    # Resources
    itglue organizations list --filter name=Acme
    itglue contacts list --parent-id 42 --filter last_name=Smith
    itglue configurations get 1001 --json
    itglue passwords get 77 --show-password
    itglue locations create --parent-id 42 --set name=HQ --set city=Boston
    itglue contacts update 1001 --attributes '{"title": "CTO"}'
    itglue contacts delete 1001 1002
    itglue exports create --organization-id 42

    # Configuration
    itglue config show
    itglue config setup
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from itglue_tools.core.log_setup import DESTINATIONS, setup_logging
from itglue_tools.core.models import Resource
from itglue_tools.core.registry import get_resource, list_resources


def _build_client(args: argparse.Namespace) -> Any:
    """Create an ITGlueClient from global CLI options."""
    from itglue_tools.api import ITGlueClient, JWTAuth, RetryPolicy
    from itglue_tools.api.credentials import get_jwt_credentials, get_portal_url

    retry_policy = RetryPolicy(max_rate_limit_retries=args.max_rate_limit_retries)

    if args.auth == "jwt":
        if args.saml_assertion:
            auth = JWTAuth(
                portal_url=get_portal_url(args.portal_url),
                saml_assertion=args.saml_assertion,
            )
        else:
            auth = JWTAuth(
                credentials=get_jwt_credentials(portal_url=args.portal_url), otp=args.otp
            )
        return ITGlueClient(
            base_url=args.base_url,
            region=args.region,
            auth=auth,
            retry_policy=retry_policy,
        )

    return ITGlueClient(
        base_url=args.base_url,
        region=args.region,
        retry_policy=retry_policy,
    )


def _parse_pairs(values: list[str] | None) -> dict[str, str]:
    """Parse repeated key=value options into a dict."""
    pairs: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{item}'")
        pairs[key.strip()] = value.strip()
    return pairs


def _read_attributes(args: argparse.Namespace) -> dict[str, Any]:
    """Merge --attributes JSON, --attributes-file and --set pairs."""
    attributes: dict[str, Any] = {}
    if getattr(args, "attributes_file", None):
        with open(args.attributes_file, encoding="utf-8") as f:
            attributes.update(json.load(f))
    if getattr(args, "attributes", None):
        attributes.update(json.loads(args.attributes))
    attributes.update(_parse_pairs(getattr(args, "set", None)))
    return attributes


def _label(resource: Resource) -> str:
    for key in ("name", "title", "username", "email"):
        value = resource.get(key)
        if value:
            return str(value)
    return ""


def _print_resource(resource: Resource) -> None:
    print(f"ID:          {resource.id}")
    print(f"Type:        {resource.type}")
    for key, value in resource.attributes.items():
        if value is None or value == "" or isinstance(value, (dict, list)):
            continue
        print(f"  {key}: {value}")


# =============================================================================
# Resource Commands
# =============================================================================


def cmd_list(args: argparse.Namespace) -> int:
    """List resources."""
    filters = _parse_pairs(args.filter)
    include = args.include.split(",") if args.include else None

    with _build_client(args) as client:
        endpoint = get_resource(args.resource, client)
        resources = endpoint.list(
            filters=filters,
            parent_id=args.parent_id,
            sort=args.sort,
            include=include,
            page_size=args.page_size,
        )

    if args.json:
        print(json.dumps([r.raw for r in resources], indent=2, default=str))
        return 0

    if not resources:
        print(f"No {args.resource} found")
        return 0

    print(f"Found {len(resources)} {args.resource}:\n")
    for resource in resources:
        print(f"  [{resource.id}] {_label(resource)}")

    return 0


def cmd_get(args: argparse.Namespace) -> int:
    """Get a single resource."""
    from itglue_tools.core.exceptions import NotFoundError

    params: dict[str, Any] = {}
    if getattr(args, "show_password", False):
        params["show_password"] = True

    with _build_client(args) as client:
        endpoint = get_resource(args.resource, client)
        try:
            resource = endpoint.get(args.resource_id, parent_id=args.parent_id, **params)
        except NotFoundError:
            print(f"{args.resource} {args.resource_id} not found", file=sys.stderr)
            return 1

    if args.json:
        print(json.dumps(resource.raw, indent=2, default=str))
    else:
        _print_resource(resource)

    return 0


def cmd_create(args: argparse.Namespace) -> int:
    """Create a resource."""
    with _build_client(args) as client:
        endpoint = get_resource(args.resource, client)
        if args.resource == "exports" and args.organization_id:
            resource = endpoint.export_organization(
                args.organization_id, include_logs=args.include_logs
            )
        else:
            attributes = _read_attributes(args)
            if not attributes:
                print("Attributes are required (--attributes, --attributes-file or --set)",
                      file=sys.stderr)
                return 1
            resource = endpoint.create(attributes, parent_id=args.parent_id)

    print(f"Created {resource.type} {resource.id}")
    return 0


def cmd_update(args: argparse.Namespace) -> int:
    """Update a resource."""
    attributes = _read_attributes(args)
    if not attributes:
        print("Attributes are required (--attributes, --attributes-file or --set)",
              file=sys.stderr)
        return 1

    with _build_client(args) as client:
        endpoint = get_resource(args.resource, client)
        resource = endpoint.update(args.resource_id, attributes, parent_id=args.parent_id)

    print(f"Updated {resource.type} {resource.id}")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete one or more resources."""
    with _build_client(args) as client:
        endpoint = get_resource(args.resource, client)
        result = endpoint.delete(args.resource_ids)

    if result.success:
        print(result.message)
        return 0
    print(f"Failed: {result.message}", file=sys.stderr)
    return 1


# =============================================================================
# Config Commands
# =============================================================================


def cmd_config_show(args: argparse.Namespace) -> int:
    """Show current configuration."""
    import os

    from itglue_tools.api.credentials import ENV_API_KEY, ENV_BASE_URL, get_credentials

    print("ITGlue Tools Configuration")
    print("=" * 40)

    api_key = os.environ.get(ENV_API_KEY)
    if api_key:
        print("\nITGlue (from environment):")
        print(f"  URL:     {os.environ.get(ENV_BASE_URL) or '(default)'}")
        print(f"  API key: {'****' + api_key[-4:] if len(api_key) > 4 else '****'}")
        return 0

    try:
        creds = get_credentials()
        print("\nITGlue (from keyring/.env):")
        print(f"  URL:     {creds.base_url}")
        print(f"  API key: ****{creds.api_key[-4:]}")
    except ValueError:
        print("\nITGlue: Not configured")
        print("  Set environment variables or use: itglue config setup")

    return 0


def cmd_config_setup(args: argparse.Namespace) -> int:
    """Interactive credential setup."""
    import getpass

    from itglue_tools.api import ITGlueClient
    from itglue_tools.api.credentials import REGION_URLS, save_credentials

    print("ITGlue Tools - API Key Configuration")
    print("=" * 40)
    print("\nCreate an API key under Account > Settings > API Keys.\n")

    region = input(f"Region {sorted(REGION_URLS)} [us]: ").strip().lower() or "us"
    if region not in REGION_URLS:
        print(f"Unknown region '{region}'", file=sys.stderr)
        return 1

    api_key = getpass.getpass("API key (hidden): ").strip()
    if not api_key:
        print("API key is required", file=sys.stderr)
        return 1

    base_url = REGION_URLS[region]
    print("\nTesting credentials...")
    try:
        with ITGlueClient(base_url=base_url, api_key=api_key) as client:
            client.test_connection()
        print("Connection successful!")
    except Exception as e:
        print(f"Connection failed: {e}", file=sys.stderr)
        return 1

    save_credentials(api_key, base_url=base_url)
    print("\nCredentials saved to system keyring.")

    return 0


# =============================================================================
# Main Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser from the registered resources."""
    parser = argparse.ArgumentParser(
        prog="itglue",
        description="ITGlue API command line tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  itglue organizations list --filter name=Acme
  itglue contacts list --parent-id 42
  itglue passwords get 77 --show-password --json
  itglue exports create --organization-id 42

  itglue config show
  itglue config setup
        """,
    )
    parser.add_argument("--version", action="version", version="itglue-tools 0.1.0")
    parser.add_argument("--region", choices=["us", "eu", "au"], help="API region")
    parser.add_argument("--base-url", help="API base URL (overrides --region)")
    parser.add_argument(
        "--auth", choices=["api-key", "jwt"], default="api-key", help="Authentication method"
    )
    parser.add_argument("--otp", help="One-time password for JWT login")
    parser.add_argument("--portal-url", help="Tenant portal URL for JWT login")
    parser.add_argument(
        "--saml-assertion", help="Base64 SAML response for JWT login (instead of a password)"
    )
    parser.add_argument(
        "--max-rate-limit-retries",
        type=int,
        default=None,
        help="Give up after this many rate limited retries (default: unlimited)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    parser.add_argument(
        "--log-destination", choices=DESTINATIONS, default="console", help="Where logs go"
    )
    parser.add_argument("--log-file", help="Log file path (for --log-destination file)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # =========================================================================
    # Resource subcommands
    # =========================================================================
    for name, endpoint_cls in list_resources().items():
        resource_parser = subparsers.add_parser(name, help=f"{name} commands")
        resource_sub = resource_parser.add_subparsers(dest="action", required=True)
        operations = endpoint_cls.operations
        nested = endpoint_cls.parent is not None

        if "list" in operations:
            list_cmd = resource_sub.add_parser("list", help=f"List {name}")
            list_cmd.add_argument(
                "--filter", action="append", metavar="KEY=VALUE", help="Filter (repeatable)"
            )
            list_cmd.add_argument("--sort", help="Sort expression")
            list_cmd.add_argument("--include", help="Comma-separated related resources")
            list_cmd.add_argument("--page-size", type=int, help="Page size (max 1000)")
            list_cmd.add_argument("--json", action="store_true", help="Output raw JSON")
            _add_parent(list_cmd, nested, endpoint_cls.parent)

        if "get" in operations:
            get_cmd = resource_sub.add_parser("get", help=f"Get one of {name}")
            get_cmd.add_argument("resource_id", help="Resource ID")
            get_cmd.add_argument("--json", action="store_true", help="Output raw JSON")
            if name == "passwords":
                get_cmd.add_argument(
                    "--show-password", action="store_true", help="Include the password value"
                )
            _add_parent(get_cmd, nested, endpoint_cls.parent)

        if "create" in operations:
            create_cmd = resource_sub.add_parser("create", help=f"Create one of {name}")
            _add_attribute_args(create_cmd)
            _add_parent(create_cmd, nested, endpoint_cls.parent)
            if name == "exports":
                create_cmd.add_argument("--organization-id", help="Organization to export")
                create_cmd.add_argument(
                    "--include-logs", action="store_true", help="Include activity logs"
                )

        if "update" in operations:
            update_cmd = resource_sub.add_parser("update", help=f"Update one of {name}")
            update_cmd.add_argument("resource_id", help="Resource ID")
            _add_attribute_args(update_cmd)
            _add_parent(update_cmd, nested, endpoint_cls.parent)

        if "delete" in operations:
            delete_cmd = resource_sub.add_parser("delete", help=f"Delete {name}")
            delete_cmd.add_argument("resource_ids", nargs="+", help="Resource IDs")

    # =========================================================================
    # Config subcommands
    # =========================================================================
    config_parser = subparsers.add_parser("config", help="Configuration commands")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", help="Show current configuration")
    config_sub.add_parser("setup", help="Interactive credential setup")

    return parser


def _add_parent(parser: argparse.ArgumentParser, nested: bool, parent: str | None) -> None:
    if nested:
        parser.add_argument("--parent-id", help=f"Parent {parent} ID")
    else:
        parser.set_defaults(parent_id=None)


def _add_attribute_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--attributes", help="Attributes as a JSON object")
    parser.add_argument("--attributes-file", help="Read attributes from a JSON file")
    parser.add_argument(
        "--set", action="append", metavar="KEY=VALUE", help="Attribute (repeatable)"
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(args.log_level, args.log_destination, args.log_file)

        if args.command == "config":
            commands = {
                "show": cmd_config_show,
                "setup": cmd_config_setup,
            }
            return commands[args.config_command](args)

        args.resource = args.command
        commands = {
            "list": cmd_list,
            "get": cmd_get,
            "create": cmd_create,
            "update": cmd_update,
            "delete": cmd_delete,
        }
        return commands[args.action](args)

    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
