"""Error taxonomy shared by the orchestration pipeline."""


class PapergridError(Exception):
    """Base class for all assistant errors."""


class InputError(PapergridError):
    """Required request data is missing or malformed. Raised before any model call."""


class UnsupportedProviderError(InputError):
    """Provider name is outside the supported set."""


class ConfigurationError(PapergridError):
    """Provider configuration is incomplete (e.g. credential not in the environment)."""


class ProviderError(PapergridError):
    """Network, timeout or provider-side failure during a model call."""


class OutputValidationError(PapergridError):
    """Model output does not satisfy the declared schema or output contract."""


# Errors that count as a failed model invocation.
MODEL_FAILURES = (ProviderError, OutputValidationError)
