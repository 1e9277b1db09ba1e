"""Exceptions raised by the service layer."""


class DashboardError(Exception):
    """Base class for service-layer errors."""

    error_type = "internal_error"


class NotFoundError(DashboardError):
    error_type = "not_found"


class ConflictError(DashboardError):
    """The operation is blocked by another moderator's work on the item."""

    error_type = "conflict"


class AuthenticationError(DashboardError):
    error_type = "authentication_error"


class PermissionDenied(DashboardError):
    error_type = "permission_denied"


class ClassifierError(DashboardError):
    """A third-party classifier call failed or returned an unusable body."""

    error_type = "classifier_error"


class MediaProbeError(DashboardError):
    error_type = "media_probe_error"


class ThumbnailError(DashboardError):
    error_type = "thumbnail_error"


class AnalysisError(DashboardError):
    error_type = "analysis_error"


class InvalidRequestError(DashboardError):
    error_type = "validation_error"
