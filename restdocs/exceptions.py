class RestDocsException(Exception):
    """Base exception for restdocs."""
    message: str

    def __init__(self, message: str | None = None, *args):
        super().__init__(message, *args)
        if message is not None:
            self.message = message
        elif args and args[0]:
            self.message = str(args[0])
        else:
            self.message = self.__class__.__name__

    def __str__(self):
        return self.message


class InvalidArgumentError(RestDocsException, ValueError):
    """Raised when a required argument is missing or malformed."""


class TemplateExpansionError(RestDocsException, ValueError):
    """Raised when a URI template cannot be expanded with the given values."""

    def __init__(self, message: str, template: str, variable: str | None = None):
        super().__init__(message)
        self.template = template
        self.variable = variable


class RestDocsConfigError(RestDocsException):
    """Raised for configuration errors."""
