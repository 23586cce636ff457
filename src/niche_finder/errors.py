"""Exception types raised by niche_finder."""


class NicheFinderError(Exception):
    """Base class for niche_finder errors."""


class FailoverError(NicheFinderError):
    """Every credential in a pool failed, or the pool had none to try.

    failures: [(index, exception), ...] in the order they were attempted.
    """

    def __init__(self, message: str, failures: list | None = None):
        super().__init__(message)
        self.failures = failures or []

    @property
    def last_error(self) -> Exception | None:
        return self.failures[-1][1] if self.failures else None


class InvalidResponseFormat(NicheFinderError):
    """The provider answered, but the text was not the JSON we asked for."""

    def __init__(self, parse_error):
        super().__init__(
            f"The response from the AI was not valid JSON: {parse_error.cause}"
        )
        self.parse_error = parse_error


class NoUsableKeyError(NicheFinderError):
    """No credential for the selected provider has been validated."""

    def __init__(self, provider: str):
        super().__init__(
            f"No valid {provider} API key configured; add a key and check it first"
        )
        self.provider = provider
