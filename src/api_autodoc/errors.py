"""Errors raised while turning a recorded exchange into a document."""


class AutodocError(Exception):
    """Base class for all api-autodoc errors."""


class MissingTransactionData(AutodocError):
    """A required piece of the recorded exchange is not available."""

    def __init__(self, field: str, detail: str = ""):
        self.field = field
        message = f"recorded transaction is missing {field!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class MalformedJsonBody(AutodocError):
    """A body declared as JSON could not be parsed."""


class MalformedXmlBody(AutodocError):
    """A body could not be parsed as well-formed XML."""


class CyclicSchema(AutodocError):
    """A parameter node appears inside its own subtree."""


class ConfigurationError(AutodocError):
    """The configuration file or values are invalid."""


class TemplateError(ConfigurationError):
    """The document template references an unknown placeholder."""
