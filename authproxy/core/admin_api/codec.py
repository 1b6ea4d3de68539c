"""Wire representations for AuthProxy tenants and roles.

This module converts descriptors into the JSON request bodies expected by the
AuthProxy administration API and turns success bodies back into descriptors.

Usage:
    payload = TenantCodec.create_request(Tenant(name="acme"))
    # {"tenant": "acme"}

    tenant = TenantCodec.decode_tenant(b'{"id": "42", "name": "acme"}')
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

from .exceptions import DecodeError
from .models import Role, Tenant


def _load_object(body: bytes) -> Dict[str, Any]:
    """Parse a response body that must be a JSON object."""
    try:
        document = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise DecodeError(f"response is not valid JSON: {exc}", body) from exc
    if not isinstance(document, dict):
        raise DecodeError(f"expected a JSON object, got {type(document).__name__}", body)
    return document


def _require_str(document: Dict[str, Any], key: str, body: bytes) -> str:
    value = document.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"response field '{key}' is missing or not a string", body)
    return value


def _require_scopes(document: Dict[str, Any], body: bytes) -> List[str]:
    scopes = document.get("scopes")
    if scopes is None:
        return []
    if not isinstance(scopes, list) or not all(isinstance(scope, str) for scope in scopes):
        raise DecodeError("response field 'scopes' must be a list of strings", body)
    return scopes


def decode_id(body: bytes) -> str:
    """Decode the ``{id}`` body returned by create and update calls."""
    return _require_str(_load_object(body), "id", body)


class TenantCodec:
    """Request/response shapes for tenants."""

    @staticmethod
    def create_request(tenant: Tenant) -> Dict[str, Any]:
        return {"tenant": tenant.name}

    @staticmethod
    def update_request(old: Tenant, desired: Tenant) -> Dict[str, Any]:
        """Rename payload: the old name addresses the tenant, the new one replaces it."""
        return {"tenant": old.name, "new_tenant": desired.name}

    @staticmethod
    def decode_id(body: bytes) -> str:
        return decode_id(body)

    @staticmethod
    def decode_tenant(body: bytes) -> Tenant:
        """Decode the ``{id, name}`` body of read and delete calls."""
        document = _load_object(body)
        return Tenant(
            name=_require_str(document, "name", body),
            id=_require_str(document, "id", body),
        )


class RoleCodec:
    """Request/response shapes for roles."""

    @staticmethod
    def create_request(role: Role) -> Dict[str, Any]:
        return {"name": role.name, "tenant": role.tenant, "scopes": list(role.scopes)}

    @staticmethod
    def update_request(old: Role, desired: Role) -> Dict[str, Any]:
        """Role-scoped rename and scope replacement.

        The role is addressed by its previous ``(tenant, name)``; ``new_scopes``
        replaces the whole scope list in order.
        """
        return {
            "name": old.name,
            "tenant": old.tenant,
            "new_name": desired.name,
            "new_scopes": list(desired.scopes),
        }

    @staticmethod
    def decode_id(body: bytes) -> str:
        return decode_id(body)

    @staticmethod
    def decode_role(body: bytes) -> Role:
        """Decode the ``{id, name, tenant, scopes}`` body of a role read."""
        document = _load_object(body)
        return Role(
            name=_require_str(document, "name", body),
            tenant=_require_str(document, "tenant", body),
            scopes=tuple(_require_scopes(document, body)),
            id=_require_str(document, "id", body),
        )

    @staticmethod
    def decode_deleted(body: bytes, tenant: str) -> Role:
        """Decode the ``{id, name}`` confirmation of a role deletion."""
        document = _load_object(body)
        return Role(
            name=_require_str(document, "name", body),
            tenant=tenant,
            id=_require_str(document, "id", body),
        )
