"""Exceptions raised by the OC Transpo client. All derive from OCTranspoError."""

# Embedded <Error> codes documented by OC Transpo.
ERROR_MESSAGES: dict[str, str] = {
    "1": "Invalid API key",
    "2": "Unable to query data source",
    "10": "Invalid stop number",
    "11": "Invalid route number",
    "12": "Stop does not service route",
}


def describe_error_code(code: str) -> str:
    """Human-readable message for an upstream error code; unknown codes pass through."""
    return ERROR_MESSAGES.get(code, code)


class OCTranspoError(Exception):
    """Base class for every error surfaced by this package."""


class TransportError(OCTranspoError):
    """Network failure, non-2xx status or an unparseable body."""


class NoReplyError(OCTranspoError):
    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"No reply for {resource}")


class UpstreamError(OCTranspoError):
    """The API answered with an embedded error code."""

    def __init__(self, code: str, context: str = ""):
        self.code = code
        self.message = describe_error_code(code)
        self.context = context
        super().__init__(f"{context}: {self.message}" if context else self.message)


class MissingFieldError(OCTranspoError):
    """A required child element is absent (schema drift)."""

    def __init__(self, name: str, detail: str = ""):
        self.name = name
        msg = f"Could not find child element {name}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class NoRoutesFoundError(OCTranspoError):
    def __init__(self, stop: str):
        self.stop = stop
        super().__init__(f"No routes found for stop {stop}")
