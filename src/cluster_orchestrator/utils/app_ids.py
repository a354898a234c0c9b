"""Helpers for scheduler application identifiers."""

from cluster_orchestrator.core.exceptions import InvalidArgumentError


def normalize_app_id(app_id: str) -> str:
    """Return the id in its absolute form (leading slash).

    Raises:
        InvalidArgumentError: If the id is empty or only slashes/whitespace.
    """
    if app_id is None or not str(app_id).strip().strip("/"):
        raise InvalidArgumentError("application id cannot be empty", code="invalid_app_id")
    app_id = str(app_id).strip()
    return app_id if app_id.startswith("/") else f"/{app_id}"


def app_path(app_id: str) -> str:
    """Id as used inside URL paths (no leading slash)."""
    return normalize_app_id(app_id).lstrip("/")
