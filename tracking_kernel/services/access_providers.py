"""
In-memory territory and authorization providers.

The identity provider's own model lives outside this package.  These
implementations satisfy ``TerritoryProvider`` and ``AuthorizationProvider``
from a static mapping, for embedding in scripts and for tests.
"""

from typing import Iterable, Mapping
from uuid import UUID

from tracking_kernel.domain.dtos import BranchScope
from tracking_kernel.logging_config import get_logger

logger = get_logger("services.access")


def _capability(resource: str, action: str) -> str:
    return f"{resource}:{action}"


class StaticAuthorizationProvider:
    """Grants keyed by user id, each a set of ``"resource:action"`` strings.

    ``"*"`` grants every capability.
    """

    def __init__(self, grants: Mapping[UUID, Iterable[str]] | None = None):
        self._grants: dict[UUID, frozenset[str]] = {
            user_id: frozenset(caps) for user_id, caps in (grants or {}).items()
        }

    def grant(self, user_id: UUID, resource: str, action: str) -> None:
        current = self._grants.get(user_id, frozenset())
        self._grants[user_id] = current | {_capability(resource, action)}

    def has_permission(
        self, user_id: UUID, org_id: str, resource: str, action: str,
    ) -> bool:
        caps = self._grants.get(user_id, frozenset())
        allowed = "*" in caps or _capability(resource, action) in caps
        if not allowed:
            logger.info(
                "permission_denied",
                extra={
                    "user_id": user_id,
                    "org_id": org_id,
                    "resource": resource,
                    "action": action,
                },
            )
        return allowed


class StaticTerritoryProvider:
    """Branch scopes keyed by user id; unknown users get ``default``."""

    def __init__(
        self,
        scopes: Mapping[UUID, BranchScope] | None = None,
        default: BranchScope | None = None,
    ):
        self._scopes = dict(scopes or {})
        self._default = default or BranchScope.none()

    def assign(self, user_id: UUID, scope: BranchScope) -> None:
        self._scopes[user_id] = scope

    def get_branch_scope(self, user_id: UUID, org_id: str) -> BranchScope:
        return self._scopes.get(user_id, self._default)
