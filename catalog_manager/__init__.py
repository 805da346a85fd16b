"""Catalog Manager.

Headless product catalog manager backed by a remote REST service.

This package provides:
- Product schemas and form-draft validation
- Thin async HTTP client for the catalog API
- Query cache and mutation helpers (refetch-after-write synchronization)
- Form, dialog and table view components exposing renderable snapshots
"""

__version__ = "1.0.0"
