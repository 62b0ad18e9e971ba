class GenerationError(RuntimeError):
    """The generative service call failed before a usable body came back."""


class MalformedResponseError(GenerationError):
    """The service answered, but not with the JSON object the caller asked for."""

    def __init__(self, message: str, *, missing_keys: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_keys = missing_keys or []


class ValidationError(ValueError):
    pass


class NotFoundError(LookupError):
    pass


class PersistenceError(RuntimeError):
    pass
