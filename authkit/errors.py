"""
Error hierarchy for authkit.

Every error raised by the library derives from AuthKitError. The input-related
errors also derive from ValueError, so callers that already catch ValueError
keep working.

Untrusted wire input (cookie headers) never raises; see auth.cookies.
"""


class AuthKitError(Exception):
    """Base class for all authkit errors."""
    pass


class ValidationError(AuthKitError, ValueError):
    """Raised when a caller-supplied parameter is out of range or malformed."""
    pass


class CodecError(AuthKitError, ValueError):
    """Raised when text cannot be decoded with the selected alphabet."""
    pass


class PolicyError(AuthKitError, ValueError):
    """Raised when cookie attributes violate RFC 6265bis limits."""
    pass


class ProviderError(AuthKitError, RuntimeError):
    """Raised when a keyed-hash or digest backend fails."""
    pass
