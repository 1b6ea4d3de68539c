"""AuthProxy tenant lifecycle operations."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from .codec import TenantCodec
from .diagnostics import Diagnostics
from .exceptions import RequestBuildError
from .models import OperationResult, Tenant
from .plan import (
    PlanAction,
    plan_tenant,
    tenant_create_call,
    tenant_delete_call,
    tenant_read_call,
    tenant_update_call,
)
from .service import AdminService

logger = logging.getLogger(__name__)


class TenantReconciler(AdminService):
    """Create, read, update, delete and import tenants.

    Every method performs at most one remote call and never raises for
    remote failures: problems are reported in the result's diagnostics and
    the returned state keeps whatever identity was already known.
    """

    def create(self, desired: Tenant) -> OperationResult[Tenant]:
        """Create a tenant and return it with the id assigned by the API.

        Args:
            desired: Tenant to create (``id`` is ignored)

        Returns:
            Result whose state carries the new id on success, or ``desired``
            unchanged on failure
        """
        diagnostics = Diagnostics()
        call = self._build(tenant_create_call, "create tenant", diagnostics, desired)
        if call is None:
            return OperationResult(desired, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            return OperationResult(desired, diagnostics)

        tenant_id = self._decode(TenantCodec.decode_id, response, call.operation, diagnostics)
        if tenant_id is None:
            return OperationResult(desired, diagnostics)

        logger.debug("created a tenant resource, response was", extra={"id": tenant_id})
        return OperationResult(replace(desired, id=tenant_id), diagnostics)

    def read(self, current: Tenant) -> OperationResult[Tenant]:
        """Refresh a tenant from the API.

        A failed read leaves the descriptor untouched, in particular a known
        ``id`` is never cleared by a transient error.
        """
        diagnostics = Diagnostics()
        call = self._build(tenant_read_call, "read tenant", diagnostics, current)
        if call is None:
            return OperationResult(current, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            return OperationResult(current, diagnostics)

        remote = self._decode(TenantCodec.decode_tenant, response, call.operation, diagnostics)
        if remote is None:
            return OperationResult(current, diagnostics)
        return OperationResult(replace(current, name=remote.name, id=remote.id), diagnostics)

    def update(self, old: Tenant, desired: Tenant) -> OperationResult[Tenant]:
        """Rename a tenant from ``old.name`` to ``desired.name``.

        On failure ``desired`` is returned as given; there is no rollback to
        ``old``.
        """
        diagnostics = Diagnostics()
        call = self._build(tenant_update_call, "update tenant", diagnostics, old, desired)
        if call is None:
            return OperationResult(desired, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            return OperationResult(desired, diagnostics)

        tenant_id = self._decode(TenantCodec.decode_id, response, call.operation, diagnostics)
        if tenant_id is None:
            return OperationResult(desired, diagnostics)

        logger.debug("updated a tenant resource", extra={"id": tenant_id, "from": old.name, "to": desired.name})
        return OperationResult(replace(desired, id=tenant_id), diagnostics)

    def delete(self, current: Tenant) -> OperationResult[Tenant]:
        """Delete a tenant.

        Deletion is best effort: the state is None once this returns, even
        when the API refused; the diagnostics say what went wrong.
        """
        diagnostics = Diagnostics()
        call = self._build(tenant_delete_call, "delete tenant", diagnostics, current)
        if call is None:
            return OperationResult(None, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            logger.warning("tenant delete not confirmed", extra={"tenant": current.name, "id": current.id})
            return OperationResult(None, diagnostics)

        removed = self._decode(TenantCodec.decode_tenant, response, call.operation, diagnostics)
        if removed is not None:
            # An import-only descriptor still carries the import identifier as id.
            if current.name and current.id and removed.id != current.id:
                diagnostics.add_warning(
                    "Tenant identity mismatch",
                    f"Deleted tenant '{removed.name}' has id {removed.id}, expected {current.id}",
                )
            logger.debug("deleted a tenant resource", extra={"id": removed.id, "tenant": removed.name})
        return OperationResult(None, diagnostics)

    def import_state(self, identifier: str) -> OperationResult[Tenant]:
        """Seed a descriptor from an import identifier (the tenant name).

        Only ``id`` is set; a following :meth:`read` resolves the tenant and
        replaces it with the authoritative id.
        """
        return OperationResult(Tenant(name="", id=identifier))

    def apply(self, observed: Optional[Tenant], desired: Optional[Tenant]) -> OperationResult[Tenant]:
        """Converge ``observed`` towards ``desired`` using the planned action."""
        diagnostics = Diagnostics()
        try:
            plan = plan_tenant(observed, desired)
        except RequestBuildError as exc:
            diagnostics.add_exception("plan tenant", exc)
            return OperationResult(observed, diagnostics)

        logger.debug("planned tenant change", extra={"action": plan.action.value, "calls": len(plan.calls)})
        if plan.action is PlanAction.CREATE:
            return self.create(desired)
        if plan.action is PlanAction.UPDATE:
            return self.update(observed, desired)
        if plan.action is PlanAction.DELETE:
            return self.delete(observed)
        return OperationResult(plan.state, diagnostics)


class TenantDataSource(AdminService):
    """Read-only lookup of an existing tenant by name."""

    def read(self, name: str) -> OperationResult[Tenant]:
        diagnostics = Diagnostics()
        lookup = Tenant(name=name)
        call = self._build(tenant_read_call, "read tenant", diagnostics, lookup)
        if call is None:
            return OperationResult(lookup, diagnostics)

        response = self._send(call, diagnostics)
        if response is None:
            return OperationResult(lookup, diagnostics)

        tenant = self._decode(TenantCodec.decode_tenant, response, call.operation, diagnostics)
        if tenant is None:
            return OperationResult(lookup, diagnostics)
        logger.debug("read a data source", extra={"id": tenant.id})
        return OperationResult(Tenant(name=name, id=tenant.id), diagnostics)
