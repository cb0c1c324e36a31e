class PaylinkError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:paylink_error'


class ValidationError(PaylinkError):
    """Raised when a request carries missing or malformed input."""

    error_code = 'app:validation_error'


class ConfigurationError(PaylinkError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class FeatureDisabledError(ConfigurationError):
    """Raised when an operation needs a feature that isn't configured."""

    error_code = 'config:feature_disabled_error'


class UpstreamError(PaylinkError):
    """Raised when an external provider (payments, SMS, orders, store) fails.

    Attributes:
        provider (str): Name of the failing provider, e.g. 'stripe'.
        code (str | int | None): Provider-specific error code or HTTP status.
    """

    error_code = 'upstream:upstream_error'

    def __init__(self, message: str = '', *, provider: str = 'unknown', code: str | int | None = None):
        super().__init__(message)
        self.provider = provider
        self.code = code


class RecipientNotVerifiedError(UpstreamError):
    """Raised when the SMS provider refuses an unverified recipient number."""

    error_code = 'upstream:recipient_not_verified_error'


class SecurityError(PaylinkError):
    """Base exception for all security-related rejections."""

    error_code = 'security:security_error'


class UnsafeTargetError(SecurityError):
    """Raised when a short link would redirect outside the trusted payment host."""

    error_code = 'security:unsafe_target_error'


class TokenCollisionError(SecurityError):
    """Raised when no free short link token could be found within the attempt limit."""

    error_code = 'security:token_collision_error'


class InvalidSignatureError(SecurityError):
    """Raised when a webhook payload fails signature verification."""

    error_code = 'security:invalid_signature_error'


class InvalidApiKeyError(SecurityError):
    """Raised when a guarded route is called without a valid API key."""

    error_code = 'security:invalid_api_key_error'
