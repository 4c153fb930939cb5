"""
BTSim Helper Functions

Utility functions used throughout the application.
"""

import re
import time
import uuid
import ipaddress
from datetime import datetime, timezone
from typing import Optional, Union
from urllib.parse import urlparse, ParseResult


# ============================================================================
# ID and Timestamp Generation
# ============================================================================

def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier, optionally prefixed."""
    value = uuid.uuid4().hex[:12]
    return f"{prefix}-{value}" if prefix else value


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def local_datetime(timestamp_ms: int, tz: Optional[timezone] = None) -> datetime:
    """Convert epoch milliseconds to a datetime in ``tz`` (local time when None)."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)


# ============================================================================
# Numeric Helpers
# ============================================================================

def clamp(value: Union[int, float], lower: Union[int, float], upper: Union[int, float]):
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


# ============================================================================
# URL Helpers
# ============================================================================

def parse_url(url: str) -> Optional[ParseResult]:
    """
    Parse an absolute URL.

    Args:
        url: URL string

    Returns:
        ParseResult, or None when the URL has no scheme/host or is malformed
    """
    if not url or not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
        # Accessing .port validates it
        parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not parsed.hostname:
        return None
    return parsed


def extract_host(url: str) -> Optional[str]:
    """Get lower-cased hostname from URL."""
    parsed = parse_url(url)
    return parsed.hostname.lower() if parsed else None


def is_ip_address(host: str) -> bool:
    """Check whether host is a literal IPv4/IPv6 address."""
    if not host:
        return False
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        return False


def domain_matches(host: str, domain: str) -> bool:
    """Exact or subdomain match of host against domain."""
    host = host.lower().rstrip(".")
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


def matches_any(patterns, value: str) -> bool:
    """Case-insensitive regex search of any pattern in value."""
    return any(re.search(p, value or "", re.IGNORECASE) for p in patterns)


def truncate_string(s: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate string to max length."""
    if not s or len(s) <= max_length:
        return s
    return s[:max_length - len(suffix)] + suffix
