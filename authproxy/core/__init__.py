"""Core Business Logic Module

Module Structure:
    - admin_api/     : AuthProxy administration API client and reconcilers
    - validators.py  : Endpoint and entity key validation

Import explicitly when needed:
    from authproxy.core.admin_api import TenantReconciler, RoleReconciler
    from authproxy.core.validators import normalize_endpoint
"""
