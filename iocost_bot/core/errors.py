"""
Errors
======
Exception taxonomy for the ingestion pipeline.

Every stage raises one of these immediately; nothing in the pipeline recovers
locally. The entry point maps any IngestError to a non-zero exit code.
"""


class IngestError(Exception):
    """Base exception for all pipeline failures."""


class ConfigurationError(IngestError):
    """Raised when a required environment input is missing or unparsable."""


class MalformedPayload(IngestError):
    """Raised when the event payload is not valid JSON of the expected shape."""


class UnhandledEvent(IngestError):
    """Raised for an event action this bot does not know how to process."""

    def __init__(self, event_name: str, action: str):
        self.event_name = event_name
        self.action = action
        super().__init__(f"Called for event we do not handle: {event_name} / {action}")


class MissingContent(IngestError):
    """Raised when the issue or comment body is absent from the payload."""


class FetchError(IngestError):
    """Raised on a transport error or non-success HTTP status."""

    def __init__(self, url: str, cause: str):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to download {url}: {cause}")


class ExternalToolError(IngestError):
    """Raised when resctl-bench writes to stderr or cannot be run."""

    def __init__(self, stderr: str):
        self.stderr = stderr
        super().__init__(f"resctl-bench reported an error: {stderr.strip()}")


class ParseError(IngestError):
    """Raised when the info report does not match '<label>: <description>'."""


class InvalidModelName(IngestError):
    """Raised when a normalized model name is not usable as a directory name."""


class MoveError(IngestError):
    """Raised when a downloaded result cannot be moved into its model directory."""


class GitError(IngestError):
    """Raised when staging, committing, branching or pushing fails."""

    def __init__(self, operation: str, cause: str):
        self.operation = operation
        self.cause = cause
        super().__init__(f"git {operation} failed: {cause.strip()}")
