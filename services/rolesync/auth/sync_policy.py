"""Sync policy: what to do with a membership decision at each call site."""

from enum import StrEnum


class SyncEvent(StrEnum):
    """Call sites from which the broker runs a mapper."""

    FIRST_LOGIN = "first-login"
    RESYNC = "resync"
    LEGACY_RESYNC = "legacy-resync"


class SyncAction(StrEnum):
    GRANT = "grant"
    REVOKE = "revoke"
    NONE = "none"


def decide_action(event: SyncEvent, has_role: bool) -> SyncAction:
    """Map an event and a membership decision to a role action.

    - FIRST_LOGIN: grant on membership, otherwise nothing (the freshly
      linked account has no mapping to remove).
    - RESYNC: grant on membership, revoke otherwise.
    - LEGACY_RESYNC: always nothing. Legacy re-sync never updated roles and
      deployments depend on that; it must stay a no-op.
    """
    match event:
        case SyncEvent.FIRST_LOGIN:
            return SyncAction.GRANT if has_role else SyncAction.NONE
        case SyncEvent.RESYNC:
            return SyncAction.GRANT if has_role else SyncAction.REVOKE
        case SyncEvent.LEGACY_RESYNC:
            return SyncAction.NONE
    raise ValueError(f"Unknown sync event: {event}")
