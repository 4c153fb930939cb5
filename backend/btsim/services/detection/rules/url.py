"""
BTSim URL Detection Rules

Rules over the page URL. A malformed URL is itself a high-risk signal and
suppresses the other URL rules.
"""

import re
from typing import Optional

from btsim.models.detection import DetectionInput, Severity
from btsim.utils.constants import (
    KNOWN_LEGITIMATE_DOMAINS,
    SHORTENER_DOMAINS,
    SUSPICIOUS_URL_PATTERNS,
)
from btsim.utils.helpers import domain_matches, is_ip_address, truncate_string

from .base import DetectionRule, RuleMatch, register_rule


@register_rule
class InsecureProtocolRule(DetectionRule):
    """Page served without transport encryption."""

    rule_id = "URL-001"
    factor_type = "insecure_protocol"
    description = "Page does not use HTTPS encryption"
    category = "url"
    severity = Severity.HIGH
    weight = 0.2

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        parsed = self.get_parsed_url(data)
        if parsed is None or parsed.scheme.lower() == "https":
            return None

        return self.create_match(evidence=[f"Scheme: {parsed.scheme}"])


@register_rule
class InvalidURLRule(DetectionRule):
    """URL could not be parsed."""

    rule_id = "URL-002"
    factor_type = "invalid_url"
    description = "Could not parse URL"
    category = "url"
    severity = Severity.HIGH
    weight = 0.3

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        if self.get_parsed_url(data) is not None:
            return None

        return self.create_match(evidence=[f"URL: {truncate_string(data.url or '(empty)')}"])


@register_rule
class UnknownDomainRule(DetectionRule):
    """Host is not on the allow-list of known-legitimate domains."""

    rule_id = "URL-003"
    factor_type = "unknown_domain"
    description = "Domain is not in known legitimate list"
    category = "url"
    severity = Severity.MEDIUM
    weight = 0.15

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        parsed = self.get_parsed_url(data)
        if parsed is None:
            return None

        host = parsed.hostname.lower()
        if any(domain_matches(host, d) for d in KNOWN_LEGITIMATE_DOMAINS):
            return None

        return self.create_match(evidence=[f"Host: {host}"])


@register_rule
class IPAddressHostRule(DetectionRule):
    """URL uses a literal network address instead of a name."""

    rule_id = "URL-004"
    factor_type = "ip_address"
    description = "URL uses IP address instead of domain name"
    category = "url"
    severity = Severity.HIGH
    weight = 0.2

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        parsed = self.get_parsed_url(data)
        if parsed is None or not is_ip_address(parsed.hostname):
            return None

        return self.create_match(evidence=[f"Host: {parsed.hostname}"])


@register_rule
class URLShortenerRule(DetectionRule):
    """URL hosted on a known link shortener."""

    rule_id = "URL-005"
    factor_type = "url_shortener"
    description = "URL uses a link shortener"
    category = "url"
    severity = Severity.MEDIUM
    weight = 0.15

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        parsed = self.get_parsed_url(data)
        if parsed is None:
            return None

        host = parsed.hostname.lower()
        shortener = next((s for s in SHORTENER_DOMAINS if domain_matches(host, s)), None)
        if shortener is None:
            return None

        return self.create_match(
            evidence=[f"Shortener: {shortener}"],
            indicators=[{'type': 'url_shortener', 'domain': shortener}],
        )


@register_rule
class SuspiciousURLPatternRule(DetectionRule):
    """Verify/confirm/secure-login style phrasing in the URL."""

    rule_id = "URL-006"
    factor_type = "suspicious_url_pattern"
    description = "URL contains suspicious keywords"
    category = "url"
    severity = Severity.MEDIUM
    weight = 0.1

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        parsed = self.get_parsed_url(data)
        if parsed is None:
            return None

        target = f"{parsed.netloc}{parsed.path}?{parsed.query}"
        for pattern in SUSPICIOUS_URL_PATTERNS:
            if re.search(pattern, target, re.IGNORECASE):
                return self.create_match(evidence=[f"Pattern: {pattern}"])

        return None
