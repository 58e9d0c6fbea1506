"""Exception types for promptlens."""


class PromptLensError(Exception):
    """Base class for promptlens errors."""


class SemanticProviderError(PromptLensError):
    """The completion provider reported an error instead of a response."""


class ConfigurationError(PromptLensError):
    """A component was constructed with unusable settings."""
