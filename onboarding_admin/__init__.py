"""FastAPI application package for the onboarding questions admin tool.

The server half exposes CRUD and reorder endpoints over a question store
(`onboarding_admin.logic`, `onboarding_admin.routes`). The client half
(`onboarding_admin.client`) is the admin UI core: payload normalisation, the
API client and the drag-and-drop reorder reconciler.
"""

from __future__ import annotations

from onboarding_admin.main import create_app

__all__ = ["create_app"]
