"""Operator CLI for managing AuthProxy tenants and roles.

This module serves as a CLI wrapper around authproxy.core.admin_api services.
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from authproxy.config import load_settings
from authproxy.core.admin_api import (
    ConfigurationError,
    OperationResult,
    Role,
    RoleReconciler,
    SharedConfig,
    Tenant,
    TenantDataSource,
    TenantReconciler,
)

logger = logging.getLogger("authproxy")


def setup_logging(verbose: bool = False) -> None:
    """Send library logs to stderr so stdout stays machine-readable."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(level)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)


def _emit(result: OperationResult) -> int:
    """Print the resulting state and diagnostics; return the exit status."""
    state = asdict(result.state) if result.state is not None else None
    if state is not None and "scopes" in state:
        state["scopes"] = list(state["scopes"])
    print(json.dumps(state, sort_keys=True))
    for record in result.diagnostics:
        print(f"[{record.severity.value}] {record.summary}: {record.detail}", file=sys.stderr)
    return 0 if result.ok else 1


def _desired_scopes(args, current_scopes):
    if args.clear_scopes:
        return ()
    if args.scopes is None:
        return current_scopes
    return args.scopes


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AuthProxy tenant and role administration")
    parser.add_argument("--endpoint", default=None, help="AuthProxy endpoint (default: $AUTHPROXY_ENDPOINT)")
    parser.add_argument("--username", default=None, help="Admin username (default: $AUTHPROXY_USERNAME)")
    parser.add_argument("--password", default=None, help="Admin password (default: $AUTHPROXY_PASSWORD)")
    parser.add_argument("--verbose", "-v", action="store_true")

    sub = parser.add_subparsers(dest="cmd")

    tc = sub.add_parser("tenant-create")
    tc.add_argument("--name", required=True)

    tr = sub.add_parser("tenant-read")
    tr.add_argument("--name", required=True)
    tr.add_argument("--id", default=None)

    tu = sub.add_parser("tenant-rename")
    tu.add_argument("--from-name", required=True)
    tu.add_argument("--to-name", required=True)
    tu.add_argument("--id", default=None)

    td = sub.add_parser("tenant-delete")
    td.add_argument("--name", required=True)
    td.add_argument("--id", default=None)

    ti = sub.add_parser("tenant-import")
    ti.add_argument("identifier", help="Tenant name")

    tl = sub.add_parser("tenant-lookup")
    tl.add_argument("--name", required=True)

    rc = sub.add_parser("role-create")
    rc.add_argument("--tenant", required=True)
    rc.add_argument("--name", required=True)
    rc.add_argument("--scope", dest="scopes", action="append", default=[])

    rr = sub.add_parser("role-read")
    rr.add_argument("--tenant", required=True)
    rr.add_argument("--name", required=True)

    ru = sub.add_parser("role-update")
    ru.add_argument("--tenant", required=True)
    ru.add_argument("--name", required=True)
    ru.add_argument("--new-name", default=None)
    scope_change = ru.add_mutually_exclusive_group()
    scope_change.add_argument("--scope", dest="scopes", action="append", default=None,
                              help="Replace the scopes (repeatable; default: keep current)")
    scope_change.add_argument("--clear-scopes", action="store_true", help="Remove every scope")
    ru.add_argument("--id", default=None)

    rd = sub.add_parser("role-delete")
    rd.add_argument("--tenant", required=True)
    rd.add_argument("--name", required=True)
    rd.add_argument("--id", default=None)

    ri = sub.add_parser("role-import")
    ri.add_argument("identifier", help="'<tenant>/<name>'")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.cmd:
        parser.print_help()
        return 0

    try:
        settings = load_settings(
            {"endpoint": args.endpoint, "username": args.username, "password": args.password}
        )
        config = SharedConfig.from_settings(settings)
    except ConfigurationError as exc:
        parser.error(str(exc))

    tenants = TenantReconciler(config)
    roles = RoleReconciler(config)

    if args.cmd == "tenant-create":
        return _emit(tenants.create(Tenant(name=args.name)))
    if args.cmd == "tenant-read":
        return _emit(tenants.read(Tenant(name=args.name, id=args.id)))
    if args.cmd == "tenant-rename":
        old = Tenant(name=args.from_name, id=args.id)
        return _emit(tenants.apply(old, Tenant(name=args.to_name)))
    if args.cmd == "tenant-delete":
        return _emit(tenants.delete(Tenant(name=args.name, id=args.id)))
    if args.cmd == "tenant-import":
        imported = tenants.import_state(args.identifier)
        return _emit(tenants.read(imported.state))
    if args.cmd == "tenant-lookup":
        return _emit(TenantDataSource(config).read(args.name))
    if args.cmd == "role-create":
        return _emit(roles.create(Role(name=args.name, tenant=args.tenant, scopes=args.scopes)))
    if args.cmd == "role-read":
        return _emit(roles.read(Role(name=args.name, tenant=args.tenant)))
    if args.cmd == "role-update":
        # The current scopes are needed to diff; fetch them first.
        current = roles.read(Role(name=args.name, tenant=args.tenant, id=args.id))
        if not current.ok:
            return _emit(current)
        desired = Role(
            name=args.new_name or args.name,
            tenant=args.tenant,
            scopes=_desired_scopes(args, current.state.scopes),
        )
        return _emit(roles.apply(current.state, desired))
    if args.cmd == "role-delete":
        return _emit(roles.delete(Role(name=args.name, tenant=args.tenant, id=args.id)))
    if args.cmd == "role-import":
        imported = roles.import_state(args.identifier)
        return _emit(roles.read(imported.state))

    parser.error(f"Unknown command: {args.cmd}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
