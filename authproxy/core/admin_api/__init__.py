"""AuthProxy administration API client library.

This package keeps locally declared tenants and roles in sync with the
AuthProxy administration API.

Architecture:
- client.py: HTTP client with basic authentication (transport)
- provider.py: Shared, read-only provider configuration
- codec.py: Request bodies and response decoding per entity kind
- plan.py: Pure planning of remote calls from observed/desired state
- service.py: Call execution and outcome classification
- tenants.py: Tenant lifecycle and tenant lookup
- roles.py: Role lifecycle
- diagnostics.py: Per-operation error/warning records
- exceptions.py: Typed exceptions for error handling

Usage:
    from authproxy.core.admin_api import configure_provider, Tenant, TenantReconciler

    config = configure_provider("http://authproxy:8080", "admin", "password")
    result = TenantReconciler(config).create(Tenant(name="acme"))
    if result.ok:
        print(result.state.id)
"""
from .client import (
    AuthProxyClient,
    TransportResponse,
    REQUEST_TIMEOUT,
)
from .codec import RoleCodec, TenantCodec
from .diagnostics import Diagnostic, Diagnostics, Severity
from .exceptions import (
    AuthProxyError,
    ConfigurationError,
    RequestBuildError,
    TransportError,
    RemoteRejected,
    DecodeError,
)
from .models import OperationResult, Role, Tenant
from .plan import Plan, PlanAction, RemoteCall, plan_role, plan_tenant
from .provider import SharedConfig, configure_provider
from .roles import RoleReconciler
from .tenants import TenantDataSource, TenantReconciler

__all__ = [
    # Client
    "AuthProxyClient",
    "TransportResponse",
    "REQUEST_TIMEOUT",

    # Configuration
    "SharedConfig",
    "configure_provider",

    # Exceptions
    "AuthProxyError",
    "ConfigurationError",
    "RequestBuildError",
    "TransportError",
    "RemoteRejected",
    "DecodeError",

    # Models
    "Tenant",
    "Role",
    "OperationResult",
    "Diagnostic",
    "Diagnostics",
    "Severity",

    # Codec and planning
    "TenantCodec",
    "RoleCodec",
    "Plan",
    "PlanAction",
    "RemoteCall",
    "plan_tenant",
    "plan_role",

    # Services
    "TenantReconciler",
    "TenantDataSource",
    "RoleReconciler",
]
