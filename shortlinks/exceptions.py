class ShortLinksError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortlinks_error'


class BadRequestError(ShortLinksError):
    """Raised for invalid URLs, invalid or duplicate custom codes, and malformed identities."""

    error_code = 'request:bad_request_error'


class LinkDisabledError(BadRequestError):
    """Raised when a disabled short link is requested for redirect."""

    error_code = 'request:link_disabled_error'


class QuotaExceededError(ShortLinksError):
    """Raised when a guest identity has reached its link creation limit."""

    error_code = 'quota:quota_exceeded_error'


class NotFoundError(ShortLinksError):
    """Raised for unknown short codes and unknown owners."""

    error_code = 'request:not_found_error'


class AllocationExhaustedError(ShortLinksError):
    """Raised when the code generator runs out of collision retries."""

    error_code = 'allocation:allocation_exhausted_error'


class UnavailableError(ShortLinksError):
    """Raised when the persistence backend cannot serve the request."""

    error_code = 'infra:unavailable_error'


class ConfigurationError(ShortLinksError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
