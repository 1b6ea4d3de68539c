"""AuthProxy role lifecycle operations."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from .codec import RoleCodec
from .diagnostics import Diagnostics
from .exceptions import RequestBuildError
from .models import OperationResult, Role
from .plan import (
    PlanAction,
    plan_role,
    role_create_call,
    role_delete_call,
    role_key,
    role_read_call,
    role_update_call,
)
from .service import AdminService

logger = logging.getLogger(__name__)


class RoleReconciler(AdminService):
    """Create, read, update, delete and import roles.

    Roles are addressed by ``(tenant, name)``. The referenced tenant must
    exist on the AuthProxy side; that constraint is enforced remotely and
    surfaces here as a rejected request.
    """

    def create(self, desired: Role) -> OperationResult[Role]:
        """Create a role with its scopes in the given order.

        Args:
            desired: Role to create (``id`` is ignored)

        Returns:
            Result whose state carries the new id on success, or ``desired``
            unchanged on failure
        """
        diagnostics = Diagnostics()
        call = self._build(role_create_call, "create role", diagnostics, desired)
        if call is None:
            return OperationResult(desired, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            return OperationResult(desired, diagnostics)

        role_id = self._decode(RoleCodec.decode_id, response, call.operation, diagnostics)
        if role_id is None:
            return OperationResult(desired, diagnostics)

        logger.debug(
            "created a role resource, response was",
            extra={"id": role_id, "tenant": desired.tenant, "scopes": list(desired.scopes)},
        )
        return OperationResult(replace(desired, id=role_id), diagnostics)

    def read(self, current: Role) -> OperationResult[Role]:
        """Refresh a role, including its scopes, from the API.

        Scopes are taken in the order returned by the API. A failed read
        leaves the descriptor untouched.
        """
        diagnostics = Diagnostics()
        call = self._build(role_read_call, "read role", diagnostics, current)
        if call is None:
            return OperationResult(current, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            return OperationResult(current, diagnostics)

        remote = self._decode(RoleCodec.decode_role, response, call.operation, diagnostics)
        if remote is None:
            return OperationResult(current, diagnostics)
        return OperationResult(
            replace(current, name=remote.name, tenant=remote.tenant, scopes=remote.scopes, id=remote.id),
            diagnostics,
        )

    def update(self, old: Role, desired: Role) -> OperationResult[Role]:
        """Rename a role and/or replace its scopes.

        The role keeps its tenant; moving between tenants is a replacement
        (see :meth:`apply`). On failure ``desired`` is returned as given.
        """
        diagnostics = Diagnostics()
        if old.tenant != desired.tenant:
            diagnostics.add_exception(
                "update role",
                RequestBuildError(
                    f"cannot move role '{old.name}' from tenant '{old.tenant}' to '{desired.tenant}' in place"
                ),
            )
            return OperationResult(desired, diagnostics)

        call = self._build(role_update_call, "update role", diagnostics, old, desired)
        if call is None:
            return OperationResult(desired, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            return OperationResult(desired, diagnostics)

        role_id = self._decode(RoleCodec.decode_id, response, call.operation, diagnostics)
        if role_id is None:
            return OperationResult(desired, diagnostics)

        logger.debug("updated a role resource", extra={"id": role_id, "from": old.name, "to": desired.name})
        return OperationResult(replace(desired, id=role_id), diagnostics)

    def delete(self, current: Role) -> OperationResult[Role]:
        """Delete a role; best effort, the state is None once this returns."""
        diagnostics = Diagnostics()
        call = self._build(role_delete_call, "delete role", diagnostics, current)
        if call is None:
            return OperationResult(None, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            logger.warning(
                "role delete not confirmed",
                extra={"tenant": current.tenant, "role": current.name, "id": current.id},
            )
            return OperationResult(None, diagnostics)

        tenant, _ = role_key(current)
        removed = self._decode(
            lambda body: RoleCodec.decode_deleted(body, tenant), response, call.operation, diagnostics
        )
        if removed is not None:
            if current.name and current.tenant and current.id and removed.id != current.id:
                diagnostics.add_warning(
                    "Role identity mismatch",
                    f"Deleted role '{removed.name}' has id {removed.id}, expected {current.id}",
                )
            logger.debug("deleted a role resource", extra={"id": removed.id, "role": removed.name})
        return OperationResult(None, diagnostics)

    def import_state(self, identifier: str) -> OperationResult[Role]:
        """Seed a descriptor from an import identifier ``"<tenant>/<name>"``.

        Only ``id`` is set; a following :meth:`read` fills in name, tenant
        and scopes and replaces the identifier with the authoritative id.
        """
        return OperationResult(Role(name="", tenant="", id=identifier))

    def apply(self, observed: Optional[Role], desired: Optional[Role]) -> OperationResult[Role]:
        """Converge ``observed`` towards ``desired`` using the planned action.

        A replacement deletes the role from its old tenant first and only
        creates it in the new tenant if the deletion succeeded.
        """
        diagnostics = Diagnostics()
        try:
            plan = plan_role(observed, desired)
        except RequestBuildError as exc:
            diagnostics.add_exception("plan role", exc)
            return OperationResult(observed, diagnostics)

        logger.debug("planned role change", extra={"action": plan.action.value, "calls": len(plan.calls)})
        if plan.action is PlanAction.CREATE:
            return self.create(desired)
        if plan.action is PlanAction.UPDATE:
            return self.update(observed, desired)
        if plan.action is PlanAction.DELETE:
            return self.delete(observed)
        if plan.action is PlanAction.REPLACE:
            removed = self.delete(observed)
            diagnostics.extend(removed.diagnostics)
            if not removed.ok:
                return OperationResult(observed, diagnostics)
            created = self.create(replace(desired, id=None))
            diagnostics.extend(created.diagnostics)
            return OperationResult(created.state, diagnostics)
        return OperationResult(plan.state, diagnostics)
