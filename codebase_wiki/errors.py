"""Error types raised by the documentation and security insight engines."""


class WikiError(Exception):
    """Base class for all codebase-wiki errors."""


class InputUnavailableError(WikiError):
    """A file could not be read or its control-flow graph could not be built.

    Always recovered by the caller's next fallback tier.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Input unavailable for {path}: {reason}")


class ConfigurationError(WikiError):
    """Invalid or incomplete configuration, raised at construction time."""


class InternalError(WikiError):
    """Unrecoverable failure inside a component (e.g. serialization)."""

    def __init__(self, component: str, message: str):
        self.component = component
        self.message = message
        super().__init__(f"[{component}] {message}")
