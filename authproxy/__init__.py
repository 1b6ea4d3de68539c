"""AuthProxy administration reconciler package.

To use the reconcilers:
    from authproxy.core.admin_api import configure_provider, TenantReconciler, RoleReconciler

To load settings from the environment:
    from authproxy.config import load_settings
"""
