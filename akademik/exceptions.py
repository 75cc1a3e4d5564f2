"""Domain error raised by academic services and turned into API responses."""


class AkademikError(Exception):
    """A business rule was violated; ``status_code`` is the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return self.message
