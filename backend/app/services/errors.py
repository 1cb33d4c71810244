"""Service-layer exceptions, each mapped to an HTTP status by the global handlers."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List


class ServiceError(Exception):
    """Base service exception."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or invalid request identifier/parameter (-> HTTP 400)."""

    status_code = 400


class NotFoundError(ServiceError):
    """Integration, repository or issue absent (-> HTTP 404)."""

    status_code = 404


class UpstreamError(ServiceError):
    """The GitHub API call failed or returned a non-success status (-> HTTP 500)."""

    status_code = 500


class PersistenceError(ServiceError):
    """A store write failed (-> HTTP 500)."""

    status_code = 500


def require_fields(values: Dict[str, Any], required: Iterable[str]) -> None:
    """
    Raise ValidationError naming every empty required field.

    Field names are reported as given, so callers pass the public
    (request-facing) names, e.g. ``{"userId": user_id}``.
    """
    missing: List[str] = [name for name in required if not values.get(name)]
    if not missing:
        return
    if len(missing) == 1:
        raise ValidationError(f"{missing[0]} is required")
    raise ValidationError(f"{', '.join(missing[:-1])} and {missing[-1]} are required")
