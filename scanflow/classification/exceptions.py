class ClassificationError(Exception):
    """Raised when classification fails."""


class ClassificationValidationError(ClassificationError):
    """Raised when the model's answer fails domain validation."""


class ClassificationNetworkError(ClassificationError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
