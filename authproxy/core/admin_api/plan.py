"""Pure planning of remote calls for tenants and roles.

Each ``plan_*`` function compares the last observed state with the desired
state and returns the calls needed to converge, without touching the network.
The ``*_call`` builders are the single place where paths and request bodies
for every operation are defined; the reconcilers execute what they return.

    >>> plan = plan_tenant(Tenant("acme", id="t-1"), Tenant("acme-corp"))
    >>> plan.action
    <PlanAction.UPDATE: 'update'>
    >>> plan.calls[0].path
    '/tenants'
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from ..validators import path_segment
from .codec import RoleCodec, TenantCodec
from .exceptions import RequestBuildError
from .models import Role, Tenant

StateT = TypeVar("StateT")


class PlanAction(str, Enum):
    """What a plan does to the remote entity."""

    NOOP = "noop"
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"


@dataclass(frozen=True)
class RemoteCall:
    """One request to issue against the AuthProxy API."""

    method: str
    path: str
    body: Optional[Dict[str, Any]] = None
    operation: str = ""


@dataclass(frozen=True)
class Plan(Generic[StateT]):
    """Calls to issue, in order, and the state expected once they all succeed.

    ``state.id`` is the last known identifier; the API assigns the real one.
    """

    action: PlanAction
    calls: List[RemoteCall] = field(default_factory=list)
    state: Optional[StateT] = None


def _segment(value: str, field_name: str) -> str:
    try:
        return path_segment(value, field_name)
    except ValueError as exc:
        raise RequestBuildError(str(exc)) from exc


# ─────────────────────────────────────────────────────────────────────────────
# Addressing keys
# ─────────────────────────────────────────────────────────────────────────────
def tenant_key(tenant: Tenant) -> str:
    """Return the name addressing a tenant.

    An imported tenant only carries its import identifier, which is the
    tenant name.
    """
    if tenant.name:
        return tenant.name
    if tenant.id:
        return tenant.id
    raise RequestBuildError("Tenant name is required")


def role_key(role: Role) -> Tuple[str, str]:
    """Return the ``(tenant, name)`` pair addressing a role.

    An imported role only carries its import identifier ``"<tenant>/<name>"``.
    """
    if role.tenant and role.name:
        return role.tenant, role.name
    if role.id:
        tenant, sep, name = role.id.partition("/")
        if sep and tenant and name:
            return tenant, name
        raise RequestBuildError(
            f"Role import identifier must look like '<tenant>/<name>', got {role.id!r}"
        )
    raise RequestBuildError("Role tenant and name are required")


# ─────────────────────────────────────────────────────────────────────────────
# Call builders
# ─────────────────────────────────────────────────────────────────────────────
def tenant_create_call(desired: Tenant) -> RemoteCall:
    _segment(desired.name, "Tenant name")
    return RemoteCall("POST", "/tenants", TenantCodec.create_request(desired), "create tenant")


def tenant_read_call(current: Tenant) -> RemoteCall:
    name = _segment(tenant_key(current), "Tenant name")
    return RemoteCall("GET", f"/tenants/{name}", None, "read tenant")


def tenant_update_call(old: Tenant, desired: Tenant) -> RemoteCall:
    _segment(old.name, "Current tenant name")
    _segment(desired.name, "New tenant name")
    return RemoteCall("PATCH", "/tenants", TenantCodec.update_request(old, desired), "update tenant")


def tenant_delete_call(current: Tenant) -> RemoteCall:
    name = _segment(tenant_key(current), "Tenant name")
    return RemoteCall("DELETE", f"/tenants/{name}", None, "delete tenant")


def role_create_call(desired: Role) -> RemoteCall:
    _segment(desired.tenant, "Role tenant")
    _segment(desired.name, "Role name")
    return RemoteCall("POST", "/roles", RoleCodec.create_request(desired), "create role")


def _role_path(role: Role) -> str:
    tenant, name = role_key(role)
    return f"/tenants/{_segment(tenant, 'Role tenant')}/roles/{_segment(name, 'Role name')}"


def role_read_call(current: Role) -> RemoteCall:
    return RemoteCall("GET", _role_path(current), None, "read role")


def role_update_call(old: Role, desired: Role) -> RemoteCall:
    _segment(old.tenant, "Role tenant")
    _segment(old.name, "Current role name")
    _segment(desired.name, "New role name")
    return RemoteCall("PATCH", "/roles", RoleCodec.update_request(old, desired), "update role")


def role_delete_call(current: Role) -> RemoteCall:
    return RemoteCall("DELETE", _role_path(current), None, "delete role")


# ─────────────────────────────────────────────────────────────────────────────
# Planning
# ─────────────────────────────────────────────────────────────────────────────
def plan_tenant(observed: Optional[Tenant], desired: Optional[Tenant]) -> Plan[Tenant]:
    """Plan the calls converging a tenant from ``observed`` to ``desired``.

    Args:
        observed: Last confirmed state, None if the tenant does not exist
        desired: Target state, None if the tenant should not exist

    Returns:
        Plan with the calls to issue and the expected resulting state
    """
    if observed is None and desired is None:
        return Plan(PlanAction.NOOP)
    if observed is None:
        return Plan(PlanAction.CREATE, [tenant_create_call(desired)], replace(desired, id=None))
    if desired is None:
        return Plan(PlanAction.DELETE, [tenant_delete_call(observed)], None)

    state = replace(desired, id=observed.id)
    if observed.name == desired.name:
        return Plan(PlanAction.NOOP, [], state)
    return Plan(PlanAction.UPDATE, [tenant_update_call(observed, desired)], state)


def plan_role(observed: Optional[Role], desired: Optional[Role]) -> Plan[Role]:
    """Plan the calls converging a role from ``observed`` to ``desired``.

    Moving a role to another tenant changes its addressing key, so it is
    planned as a replacement: delete from the old tenant, create in the new.
    Scope order is significant; a reordering alone triggers an update.
    """
    if observed is None and desired is None:
        return Plan(PlanAction.NOOP)
    if observed is None:
        return Plan(PlanAction.CREATE, [role_create_call(desired)], replace(desired, id=None))
    if desired is None:
        return Plan(PlanAction.DELETE, [role_delete_call(observed)], None)

    if observed.tenant != desired.tenant:
        return Plan(
            PlanAction.REPLACE,
            [role_delete_call(observed), role_create_call(desired)],
            replace(desired, id=None),
        )

    state = replace(desired, id=observed.id)
    if observed.name == desired.name and observed.scopes == desired.scopes:
        return Plan(PlanAction.NOOP, [], state)
    return Plan(PlanAction.UPDATE, [role_update_call(observed, desired)], state)
