"""Domain exceptions.

Every exception carries a stable ``code`` that is reported back to callers
in failure results and bulk item outcomes.
"""


class ContentGovError(Exception):
    """Base exception for contentgov."""

    code: str = "ContentGovError"


class NotFound(ContentGovError):
    """Requested resource was not found."""

    code = "NotFound"

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found")


class ContentNotFound(NotFound):
    """Content item (source or target) does not resolve."""

    code = "ContentNotFound"

    def __init__(self, content_type: str, content_id: str) -> None:
        super().__init__(str(content_type), content_id)


class GranteeInvalid(ContentGovError):
    """Grantee id was rejected by the platform."""

    code = "GranteeInvalid"


class GranteeNotFound(NotFound, GranteeInvalid):
    """Grantee does not exist on the site."""

    code = "GranteeNotFound"

    def __init__(self, grantee_type: str, grantee_id: str) -> None:
        super().__init__(str(grantee_type), grantee_id)


class NothingToCopy(ContentGovError):
    """Source content item has no grants."""

    code = "NothingToCopy"


class NoCompatibleCapabilities(ContentGovError):
    """No source capability survives the content type compatibility filter."""

    code = "NoCompatibleCapabilities"


class IncompatibleCapabilities(ContentGovError):
    """Capabilities requested that do not apply to the content type."""

    code = "IncompatibleCapabilities"

    def __init__(self, content_type: str, capabilities: list[str]) -> None:
        self.content_type = content_type
        self.capabilities = capabilities
        super().__init__(
            f"Capabilities not valid for {content_type}: {', '.join(capabilities)}"
        )


class ValidationError(ContentGovError):
    """Validation failed for input data."""

    code = "ValidationError"


class RepositoryError(ContentGovError):
    """Transport or backend failure reported by the content platform."""

    code = "RepositoryError"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
