"""Exception types for the context engine."""


class ContextEngineError(Exception):
    """Base exception for context engine failures."""

    pass


class InvalidRequestError(ContextEngineError):
    """Request fields failed validation."""

    pass


class InvalidContextTypeError(InvalidRequestError):
    """Raised when an unknown context kind is requested."""

    def __init__(self, invalid_type: str, valid_types: list[str]):
        self.invalid_type = invalid_type
        self.valid_types = valid_types
        super().__init__(
            f"Invalid context type '{invalid_type}'. "
            f"Valid types: {', '.join(valid_types)}"
        )


class ProviderError(ContextEngineError):
    """Raised when an upstream provider call fails."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")
