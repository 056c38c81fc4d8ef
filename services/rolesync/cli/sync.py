"""
Evaluate the external-role mapper for one user and print the outcome.

Run via: python -m rolesync.cli.sync --claims token.json --store store.yaml \
    --user alice --external-role myclient.admin --role admin --event resync

The claims file holds the decoded access token payload (JSON). The store file
describes realms, roles and users (see rolesync.store.memory). Prints a JSON
object with the decision and the user's resulting roles; exits 1 when the
configured local role does not exist or an input file cannot be loaded.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml

from rolesync.auth.claims_mapper import has_external_role
from rolesync.auth.sync_policy import SyncEvent
from rolesync.config import EXTERNAL_ROLE, ROLE, MapperConfig, settings
from rolesync.logging_config import configure_logging
from rolesync.mappers import get_mapper, init_mappers
from rolesync.mappers.base import BrokerSession
from rolesync.mappers.external_role import PROVIDER_ID
from rolesync.store.memory import InMemoryRoleStore
from rolesync.store.protocol import RoleStoreError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rolesync-sync", description=__doc__.splitlines()[1])
    parser.add_argument("--claims", required=True, help="JSON file with token claims ('-' for stdin)")
    parser.add_argument("--store", required=True, help="YAML store document")
    parser.add_argument("--user", required=True, help="Local username (created if missing)")
    parser.add_argument("--external-role", required=True, help="'role' or 'client.role'")
    parser.add_argument("--role", required=True, help="Local role, 'role' or 'client.role'")
    parser.add_argument(
        "--event",
        choices=[e.value for e in SyncEvent],
        default=SyncEvent.FIRST_LOGIN.value,
    )
    parser.add_argument("--realm", default=settings.realm)
    return parser


def load_claims(path: str) -> dict[str, Any]:
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text())


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        claims = load_claims(args.claims)
        store = InMemoryRoleStore.from_yaml(args.store)
    except (OSError, json.JSONDecodeError, yaml.YAMLError, RoleStoreError) as e:
        print(json.dumps({"event": args.event, "error": f"Invalid input: {e}"}, indent=2))
        return 1

    user = store.add_user(args.realm, args.user)
    config = MapperConfig.from_config({EXTERNAL_ROLE: args.external_role, ROLE: args.role})
    session = BrokerSession(store=store, realm=args.realm)

    mapper = get_mapper(PROVIDER_ID)
    if mapper is None:
        raise RuntimeError(f"Mapper not registered: {PROVIDER_ID}")
    hooks = {
        SyncEvent.FIRST_LOGIN: mapper.on_first_login,
        SyncEvent.RESYNC: mapper.on_resync,
        SyncEvent.LEGACY_RESYNC: mapper.on_legacy_resync,
    }
    result = hooks[SyncEvent(args.event)](session, user, config, claims)

    output = {
        "event": args.event,
        "has_external_role": has_external_role(claims, args.external_role),
        "action": result.action.value,
        "applied": result.applied,
        "error": result.failure.message if result.failure else None,
        "roles": user.role_names(),
    }
    print(json.dumps(output, indent=2))
    return 0 if result.ok else 1


def main() -> None:
    configure_logging(json_logs=settings.json_logs, log_level=settings.log_level)
    init_mappers()
    sys.exit(run())


if __name__ == "__main__":
    main()
