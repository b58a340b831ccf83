#!/usr/bin/env python3
"""
Create, delete, and list GCP tag bindings using the Cloud Resource Manager API.

Examples:
  tag_bindings.py create service-account.json \\
      //compute.googleapis.com/projects/my-project/zones/us-central1-a/instances/my-vm \\
      tagValues/123456789 us-central1-a
  tag_bindings.py delete service-account.json \\
      tagBindings/compute.googleapis.com@projects@my-project@zones@us-central1-a@instances@my-vm@tagValues@123456789
  tag_bindings.py list-resource service-account.json //storage.googleapis.com/projects/_/buckets/my-bucket
  tag_bindings.py list-tag service-account.json tagValues/123456789
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import pathlib
import sys
import traceback
from typing import Any, Sequence

from googleapiclient.errors import HttpError

SRC_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from managers.models import TagBinding  # noqa: E402
from managers.tag_binding_manager import TagBindingManager  # noqa: E402
from utils.auth import AUTH_METHODS, SCOPES, get_credentials, project_id_from_credentials  # noqa: E402
from utils.errors import ArgumentError, TaggingError  # noqa: E402
from utils.events import LOGGER_NAME, LoggingEventSink  # noqa: E402
from utils.http_gateway import TRANSPORTS, build_gateway  # noqa: E402
from utils.resource_names import (  # noqa: E402
    RESOURCE_KINDS,
    encode_tag_binding_name,
    format_resource_name,
)
from utils.settings import TaggingSettings, load_settings  # noqa: E402

_API_COMMANDS = ("create", "delete", "list-resource", "list-tag")

logger = logging.getLogger(LOGGER_NAME)


class _ArgumentParser(argparse.ArgumentParser):
    """argparse with exit status 1 on usage errors."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _add_location(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "location",
        nargs="?",
        help="Optional zone or region (e.g. us-central1-a). Omit for global resources.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        description="Manage tag bindings between GCP resources and tag values.",
    )
    parser.add_argument(
        "--auth",
        choices=AUTH_METHODS,
        default="service",
        help="Auth method: service (Service Account key file, default), user (OAuth), or adc.",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        help="HTTP stack: rest (google-auth requests session) or api-client (googleapiclient).",
    )
    parser.add_argument(
        "--config-path",
        help="Optional YAML settings file. Defaults to config/tagging.yaml when present.",
    )
    parser.add_argument("--poll-interval", type=float, help="Seconds between operation polls.")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for an operation.")
    parser.add_argument(
        "--no-region-from-zone",
        action="store_true",
        help="Use the location verbatim as the endpoint prefix instead of reducing a zone to its region.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log HTTP traffic and tracebacks.")

    subparsers = parser.add_subparsers(dest="command", metavar="command", parser_class=_ArgumentParser)

    create = subparsers.add_parser("create", help="Create a tag binding for a resource.")
    create.add_argument("credentials_file")
    create.add_argument("resource_name")
    create.add_argument("tag_value")
    _add_location(create)

    delete = subparsers.add_parser("delete", help="Delete a tag binding.")
    delete.add_argument("credentials_file")
    delete.add_argument(
        "tag_binding_name",
        help="Binding name, or the resource name when --tag-value is given.",
    )
    delete.add_argument(
        "--tag-value",
        help="Delete the binding of this tag value on the resource given as tag_binding_name.",
    )
    _add_location(delete)

    list_resource = subparsers.add_parser("list-resource", help="List tag bindings for a resource.")
    list_resource.add_argument("credentials_file")
    list_resource.add_argument("resource_name")
    _add_location(list_resource)

    list_tag = subparsers.add_parser("list-tag", help="List tag bindings for a tag value.")
    list_tag.add_argument("credentials_file")
    list_tag.add_argument("tag_value")
    _add_location(list_tag)

    format_name = subparsers.add_parser("format-name", help="Print a canonical resource name.")
    format_name.add_argument("kind", choices=RESOURCE_KINDS)
    format_name.add_argument("parts", nargs="+")

    encode_name = subparsers.add_parser(
        "encode-name",
        help="Print the tagBindings/... display name for a resource and tag value.",
    )
    encode_name.add_argument("resource_name")
    encode_name.add_argument("tag_value")

    return parser


def resolve_settings(args: argparse.Namespace) -> TaggingSettings:
    """Load settings and apply command-line overrides."""
    settings = load_settings(args.config_path)
    overrides: dict[str, Any] = {}
    if args.transport:
        overrides["transport"] = args.transport
    if args.poll_interval is not None:
        overrides["poll_interval_s"] = args.poll_interval
    if args.timeout is not None:
        overrides["operation_timeout_s"] = args.timeout
    if args.no_region_from_zone:
        overrides["derive_region_from_zone"] = False
    if not overrides:
        return settings
    if overrides.get("poll_interval_s", 1) <= 0 or overrides.get("operation_timeout_s", 1) <= 0:
        raise ArgumentError("--poll-interval and --timeout must be positive.")
    return dataclasses.replace(settings, **overrides)


def build_manager(args: argparse.Namespace, settings: TaggingSettings) -> TagBindingManager:
    credentials = get_credentials(args.auth, args.credentials_file, SCOPES)
    logger.info(
        "Loaded credentials from %s (project: %s)",
        args.credentials_file,
        project_id_from_credentials(credentials) or "unknown",
    )
    events = LoggingEventSink()
    gateway = build_gateway(
        settings.transport,
        credentials,
        events=events,
        timeout_s=settings.request_timeout_s,
    )
    return TagBindingManager.from_settings(settings, gateway, events=events)


def _binding_payload(binding: TagBinding) -> dict[str, Any]:
    payload = binding.to_payload()
    if binding.name is None and binding.source:
        payload["operation"] = binding.source
    return payload


def run(args: argparse.Namespace) -> Any:
    """Execute one command and return the JSON-serializable result."""
    if args.command == "format-name":
        try:
            return {"resourceName": format_resource_name(args.kind, *args.parts)}
        except ValueError as exc:
            raise ArgumentError(str(exc)) from exc
    if args.command == "encode-name":
        return {"tagBindingName": encode_tag_binding_name(args.resource_name, args.tag_value)}

    settings = resolve_settings(args)
    manager = build_manager(args, settings)

    if args.command == "create":
        binding = manager.create_tag_binding(args.resource_name, args.tag_value, args.location)
        return {"created": _binding_payload(binding)}

    if args.command == "delete":
        if args.tag_value:
            result = manager.delete_tag_binding_for(
                args.tag_binding_name,
                args.tag_value,
                args.location,
            )
        else:
            result = manager.delete_tag_binding(args.tag_binding_name, args.location)
        return {"deleted": True, "result": result}

    if args.command == "list-resource":
        bindings = manager.list_tag_bindings_for_resource(args.resource_name, args.location)
        return {"resourceName": args.resource_name, "tagBindings": [b.to_payload() for b in bindings]}

    if args.command == "list-tag":
        bindings = manager.list_tag_bindings_for_tag_value(args.tag_value, args.location)
        return {"tagValue": args.tag_value, "tagBindings": [b.to_payload() for b in bindings]}

    raise ArgumentError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help(sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = run(args)
    except (TaggingError, HttpError, FileNotFoundError, ValueError) as error:
        print(f"Error: {error}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        if isinstance(error, ArgumentError):
            parser.print_usage(sys.stderr)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
