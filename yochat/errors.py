"""Error types raised by yochat."""


class YochatError(Exception):
    """Base class for every error the CLI reports to the user."""


class ConfigError(YochatError):
    """Config directory could not be resolved, or the file could not be read, written or parsed."""


class MissingAPIKeyError(YochatError):
    def __init__(self, message: str = "API key not set. Run `chat set <your-api-key>` first."):
        super().__init__(message)


class AttachmentError(YochatError):
    """The file passed with --file could not be read."""


class BackendError(YochatError):
    """The model backend failed while opening or streaming a response."""


class RequestTimeoutError(YochatError, TimeoutError):
    """The request did not finish before its deadline."""


class ClipboardError(YochatError):
    """Copying to the system clipboard failed. Never fatal."""
