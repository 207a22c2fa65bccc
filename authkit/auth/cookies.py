"""
Signed Cookie Module

Serializes and parses HTTP cookies, with optional HMAC-SHA256 signing.

Wire format of a signed value:
    <value>.<base64url(HMAC-SHA256(key, value)), no padding>

Security considerations:
- Signatures are compared in constant time (hmac.compare_digest)
- Cookie headers are untrusted input: malformed pairs are dropped, never raised
- A pair whose signature fails is removed from the result entirely
- Attribute limits follow RFC 6265bis (400-day Max-Age/Expires, __Host-/__Secure-)
- Never log cookie values, keys or signatures
"""

import hmac
import logging
import math
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime, parsedate_to_datetime
from enum import Enum
from typing import Dict, Optional
from urllib.parse import quote, unquote

from ..binary import BinaryLike, to_bytes
from ..crypto.providers import DEFAULT_HMAC_PROVIDER, HashFamily, KeyedHashProvider
from ..encoding import base64
from ..errors import PolicyError, ValidationError


logger = logging.getLogger(__name__)


# Cookie configuration
DEFAULT_SIGNING_HASH = HashFamily.SHA256
MAX_AGE_LIMIT = 34_560_000              # 400 days, RFC 6265bis section 4.1.2.2
EXPIRES_LIMIT = timedelta(seconds=MAX_AGE_LIMIT)

SECURE_PREFIX = "__Secure-"
HOST_PREFIX = "__Host-"

# RFC 6265 section 4.1.1: ASCII 0x20-0x7E except '"', ';' and '\'.
# Space and comma are technically excluded too but common in practice.
VALID_VALUE_RE = re.compile(r'^[ !#-:<-\[\]-~]*$')
# token: alphanumerics and !#$%&'*.^`|~+-_
VALID_NAME_RE = re.compile(r"^[\w!#$%&'*.^`|~+-]+$", re.ASCII)

# Set-Cookie entries are joined with ", ", but Expires dates contain ", " too.
# Only split where the next thing looks like "name=".
_SET_COOKIE_SPLIT_RE = re.compile(r", (?=[^;,=\s]+=)")

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"


class SameSite(Enum):
    STRICT = 'strict'
    LAX = 'lax'
    NONE = 'none'


@dataclass
class CookieAttributes:
    """Cookie attributes for Set-Cookie serialization and parsing."""
    expires: Optional[datetime] = None
    path: Optional[str] = None
    domain: Optional[str] = None
    max_age: Optional[int] = None
    secure: bool = False
    http_only: bool = False
    same_site: Optional[SameSite] = None
    partitioned: bool = False
    prefix: Optional[str] = None  # "secure" or "host"
    extensions: Dict[str, str] = field(default_factory=dict)


@dataclass
class ParsedSetCookie:
    """One entry of a parsed Set-Cookie header."""
    value: str
    attributes: CookieAttributes = field(default_factory=CookieAttributes)


# ============================================================================
# Signing
# ============================================================================

def sign_value(value: str, key: BinaryLike,
               provider: Optional[KeyedHashProvider] = None) -> str:
    """
    Compute the cookie signature for a value.

    Returns:
        base64url (no padding) HMAC-SHA256 of the value
    """
    provider = provider or DEFAULT_HMAC_PROVIDER
    mac = provider.sign(DEFAULT_SIGNING_HASH, to_bytes(key), value.encode('utf-8'))
    return base64.urlsafe_encode(mac)


def verify_signed_cookie(cookie_value: str, key: BinaryLike,
                         provider: Optional[KeyedHashProvider] = None) -> bool:
    """
    Verify a "<value>.<signature>" cookie value.

    Args:
        cookie_value: Signed value (already percent-decoded)
        key: Signing key
        provider: HMAC backend (cryptography if None)

    Returns:
        True only if the signature matches. An empty value or signature
        gives False without computing any HMAC.
    """
    value, _, signature = cookie_value.partition('.')
    if not value or not signature:
        return False

    expected = sign_value(value, key, provider)
    return hmac.compare_digest(expected.encode('ascii'), signature.encode('utf-8'))


# ============================================================================
# Serialization
# ============================================================================

def _apply_prefix_rules(name: str, opt: CookieAttributes) -> CookieAttributes:
    if name.startswith(SECURE_PREFIX) and not opt.secure:
        opt = replace(opt, secure=True)

    if name.startswith(HOST_PREFIX):
        # rfc6265bis-13 section 4.1.3.2
        opt = replace(opt, secure=True, path="/", domain=None)

    return opt


def _check_max_age(max_age) -> Optional[int]:
    """Return the whole-second Max-Age to emit, or None if it should be omitted."""
    if max_age is None:
        return None
    if isinstance(max_age, bool) or not isinstance(max_age, (int, float)) \
            or (isinstance(max_age, float) and not math.isfinite(max_age)):
        raise ValidationError(f"Max-Age must be a number of seconds, got {max_age!r}")
    if max_age < 0:
        return None
    if max_age > MAX_AGE_LIMIT:
        logger.warning("Rejected cookie Max-Age of %s seconds", max_age)
        raise PolicyError(
            "Cookies Max-Age SHOULD NOT be greater than 400 days "
            f"({MAX_AGE_LIMIT} seconds) in duration."
        )
    return int(math.floor(max_age))


def _check_expires(expires, now: datetime) -> Optional[datetime]:
    if expires is None:
        return None
    if not isinstance(expires, datetime):
        raise ValidationError(f"Expires must be a datetime, got {type(expires).__name__}")
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    if expires - now > EXPIRES_LIMIT:
        logger.warning("Rejected cookie Expires more than 400 days ahead")
        raise PolicyError(
            "Cookies Expires SHOULD NOT be greater than 400 days "
            f"({MAX_AGE_LIMIT} seconds) in the future."
        )
    return expires.astimezone(timezone.utc)


def _check_same_site(same_site) -> Optional[SameSite]:
    if not same_site:
        return None
    if isinstance(same_site, str):
        same_site = same_site.lower()
    try:
        return SameSite(same_site)
    except ValueError as e:
        raise ValidationError(f"Unknown SameSite value: {same_site!r}") from e


def serialize_cookie(name: str, value: str,
                     attributes: Optional[CookieAttributes] = None,
                     signing_key: Optional[BinaryLike] = None,
                     provider: Optional[KeyedHashProvider] = None,
                     now: Optional[datetime] = None) -> str:
    """
    Build a Set-Cookie header value.

    Prefix rules are applied first. __Secure- forces Secure. __Host- forces
    Secure and Path=/ and drops Domain. All limits are then checked before
    any output is produced.

    Args:
        name: Cookie name
        value: Plain cookie value
        attributes: Cookie attributes (not modified)
        signing_key: If given, append ".<signature>" to the value
        provider: HMAC backend (cryptography if None)
        now: Reference time for the Expires limit (current time if None)

    Returns:
        "name=value; Max-Age=...; Domain=...; Path=...; Expires=...;
         HttpOnly; Secure; SameSite=...; Partitioned" (only the set attributes)

    Raises:
        PolicyError: Max-Age or Expires beyond 400 days, or Partitioned
            without Secure
        ValidationError: Malformed Max-Age, Expires or SameSite
    """
    opt = _apply_prefix_rules(name, attributes or CookieAttributes())

    max_age = _check_max_age(opt.max_age)
    expires = _check_expires(opt.expires, now or datetime.now(timezone.utc))
    same_site = _check_same_site(opt.same_site)
    if opt.partitioned and not opt.secure:
        logger.warning("Rejected partitioned cookie without Secure")
        raise PolicyError("Partitioned Cookie must have Secure attributes")

    if signing_key is not None:
        value = f"{value}.{sign_value(value, signing_key, provider)}"

    parts = [f"{name}={quote(value, safe=_URI_COMPONENT_SAFE)}"]

    if max_age is not None:
        parts.append(f"Max-Age={max_age}")
    if opt.domain and opt.prefix != "host":
        parts.append(f"Domain={opt.domain}")
    if opt.path:
        parts.append(f"Path={opt.path}")
    if expires is not None:
        parts.append(f"Expires={format_datetime(expires, usegmt=True)}")
    if opt.http_only:
        parts.append("HttpOnly")
    if opt.secure:
        parts.append("Secure")
    if same_site is not None:
        parts.append(f"SameSite={same_site.value.capitalize()}")
    if opt.partitioned:
        parts.append("Partitioned")

    return "; ".join(parts)


# ============================================================================
# Parsing
# ============================================================================

def parse_cookies(header: str, name: Optional[str] = None,
                  signing_key: Optional[BinaryLike] = None,
                  provider: Optional[KeyedHashProvider] = None) -> Dict[str, str]:
    """
    Parse a Cookie request header.

    Args:
        header: Raw "a=1; b=2" header
        name: If given, only this cookie is kept
        signing_key: If given, the cookie called `name` must carry a valid
            signature. It is returned without the signature, or left out of
            the result if the signature is wrong.
        provider: HMAC backend (cryptography if None)

    Returns:
        Mapping of cookie name to percent-decoded value
    """
    cookies: Dict[str, str] = {}

    for pair in header.strip().split(';'):
        pair = pair.strip()
        cookie_name, sep, cookie_value = pair.partition('=')
        if not sep:
            continue

        cookie_name = cookie_name.strip()
        if (name and name != cookie_name) or not VALID_NAME_RE.match(cookie_name):
            logger.debug("Dropped cookie pair with unexpected or invalid name")
            continue

        cookie_value = cookie_value.strip()
        if len(cookie_value) >= 2 and cookie_value.startswith('"') and cookie_value.endswith('"'):
            cookie_value = cookie_value[1:-1]

        if not VALID_VALUE_RE.match(cookie_value):
            logger.debug("Dropped cookie %s with invalid value characters", cookie_name)
            continue

        decoded = unquote(cookie_value)
        cookies[cookie_name] = decoded

        if signing_key is not None and cookie_name == name:
            if verify_signed_cookie(decoded, signing_key, provider):
                cookies[cookie_name] = decoded.partition('.')[0]
            else:
                logger.debug("Signature check failed for cookie %s", cookie_name)
                del cookies[cookie_name]

    return cookies


def get_cookie(header: str, name: str,
               signing_key: Optional[BinaryLike] = None,
               provider: Optional[KeyedHashProvider] = None) -> Optional[str]:
    """Return one cookie value from a Cookie header, or None."""
    return parse_cookies(header, name, signing_key, provider).get(name)


def _parse_attribute(attrs: CookieAttributes, raw_name: str, raw_value: str) -> None:
    attr_value = raw_value.strip()
    normalized = raw_name.strip().lower()

    if normalized == "max-age":
        try:
            attrs.max_age = int(attr_value)
        except ValueError:
            logger.debug("Ignored malformed Max-Age")
    elif normalized == "expires":
        try:
            expires = parsedate_to_datetime(attr_value) if attr_value else None
        except (TypeError, ValueError, IndexError, OverflowError):
            logger.debug("Ignored malformed Expires")
        else:
            # A -0000 zone parses to a naive datetime
            if expires is not None and expires.tzinfo is None:
                expires = expires.replace(tzinfo=timezone.utc)
            attrs.expires = expires
    elif normalized == "domain":
        attrs.domain = attr_value or None
    elif normalized == "path":
        attrs.path = attr_value or None
    elif normalized == "secure":
        attrs.secure = True
    elif normalized == "httponly":
        attrs.http_only = True
    elif normalized == "samesite":
        try:
            attrs.same_site = SameSite(attr_value.lower()) if attr_value else None
        except ValueError:
            logger.debug("Ignored unknown SameSite value")
    elif normalized == "partitioned":
        attrs.partitioned = True
    else:
        attrs.extensions[raw_name] = raw_value


def parse_set_cookies(header: str) -> Dict[str, ParsedSetCookie]:
    """
    Parse one or more Set-Cookie values joined with ", ".

    Args:
        header: e.g. "a=1; Path=/; Secure, b=2; HttpOnly"

    Returns:
        Mapping of cookie name to ParsedSetCookie. Malformed entries are
        dropped.
    """
    result: Dict[str, ParsedSetCookie] = {}

    for entry in _SET_COOKIE_SPLIT_RE.split(header):
        parts = [part.strip() for part in entry.split(';')]
        name, sep, value = parts[0].partition('=')
        name = name.strip()
        if not sep or not name:
            logger.debug("Dropped malformed Set-Cookie entry")
            continue

        parsed = ParsedSetCookie(value=value.strip())
        for attribute in parts[1:]:
            if not attribute:
                continue
            attr_name, _, attr_value = attribute.partition('=')
            _parse_attribute(parsed.attributes, attr_name, attr_value)

        result[name] = parsed

    return result


class CookieSigner:
    """
    Signs and verifies cookies with one server-side key.

    Example:
        >>> signer = CookieSigner("secret")
        >>> header = signer.serialize("session", "abc", CookieAttributes(http_only=True))
        >>> signer.get(header.split(";")[0], "session")
        'abc'
    """

    def __init__(self, key: BinaryLike, provider: Optional[KeyedHashProvider] = None):
        """
        Initialize the signer.

        Args:
            key: Server-side secret for HMAC
            provider: HMAC backend (cryptography if None)
        """
        self._key = to_bytes(key)
        self._provider = provider or DEFAULT_HMAC_PROVIDER

    def sign(self, value: str) -> str:
        """Return "<value>.<signature>"."""
        return f"{value}.{sign_value(value, self._key, self._provider)}"

    def verify(self, cookie_value: str) -> bool:
        return verify_signed_cookie(cookie_value, self._key, self._provider)

    def serialize(self, name: str, value: str,
                  attributes: Optional[CookieAttributes] = None) -> str:
        return serialize_cookie(name, value, attributes, self._key, self._provider)

    def get(self, header: str, name: str) -> Optional[str]:
        return get_cookie(header, name, self._key, self._provider)
