"""
BTSim Context Aggregator

Merges per-site UserContext snapshots into a single ContextAnalysis used to
personalize simulations.
"""

import logging
from collections import Counter
from datetime import timezone
from typing import Dict, List, Mapping, Optional

from btsim.models.context import (
    Site,
    RiskProfile,
    UserContext,
    ContextAnalysis,
    TimingPattern,
)
from btsim.utils import constants
from btsim.utils.helpers import local_datetime

logger = logging.getLogger(__name__)


# Sites whose users are typical business-email-compromise targets
HIGH_IMPACT_SITES = {Site.LINKEDIN}

# Candidate attack vectors per site, in preference order
SITE_ATTACK_VECTORS: Dict[Site, List[str]] = {
    Site.GITHUB: ["oauth_grant", "credential_harvest", "session_hijack"],
    Site.LINKEDIN: ["credential_harvest", "connection_impersonation"],
    Site.GMAIL: ["credential_harvest", "oauth_grant", "mfa_bypass"],
    Site.UNKNOWN: [],
}


class ContextAggregator:
    """
    Build a ContextAnalysis from whatever per-site contexts are available.

    Never raises: absent or empty input yields the default analysis.
    """

    def __init__(self, contact_limit: int = constants.KEY_CONTACT_LIMIT, tz: Optional[timezone] = None):
        """
        Args:
            contact_limit: Number of key contacts to keep
            tz: Timezone for hour/day bucketing (local time when None)
        """
        self.contact_limit = contact_limit
        self.tz = tz

    def aggregate(self, contexts: Optional[Mapping[Site, UserContext]]) -> ContextAnalysis:
        """
        Analyze user context across all sites.

        Args:
            contexts: Partial mapping site -> UserContext, may be empty

        Returns:
            ContextAnalysis
        """
        present = self.keyed_contexts(contexts)

        if not present:
            return self.default_analysis()

        try:
            return ContextAnalysis(
                risk_profile=self.calculate_risk_profile(present),
                primary_site=self.determine_primary_site(present),
                key_contacts=self.extract_key_contacts(present),
                topics=self.extract_topics(present),
                organizations=self.extract_organizations(present),
                suggested_attack_vectors=self.suggest_attack_vectors(present),
                personalization_score=self.calculate_personalization_score(present),
                timing=self.analyze_timing_patterns(present),
                anomalies={
                    c.site: anomalies
                    for c in present
                    if (anomalies := self.detect_anomalies(c))
                },
            )
        except Exception as e:
            logger.error(f"Context aggregation failed, using default analysis: {e}", exc_info=True)
            return self.default_analysis()

    def calculate_risk_profile(self, contexts: List[UserContext]) -> RiskProfile:
        """Exposure grows with activity volume, graph size and site category."""
        score = constants.BASELINE_CONTEXT_RISK

        for context in contexts:
            if len(context.recent_activity) > constants.HIGH_ACTIVITY_THRESHOLD:
                score += constants.HIGH_ACTIVITY_INCREMENT
            if len(context.connections) > constants.WIDE_GRAPH_THRESHOLD:
                score += constants.WIDE_GRAPH_INCREMENT
            if context.site in HIGH_IMPACT_SITES:
                score += constants.BUSINESS_IMPACT_INCREMENT

        if score >= constants.RISK_PROFILE_HIGH:
            return RiskProfile.HIGH
        if score >= constants.RISK_PROFILE_MEDIUM:
            return RiskProfile.MEDIUM
        return RiskProfile.LOW

    def determine_primary_site(self, contexts: List[UserContext]) -> Site:
        """
        Site with the most activity items.

        Equal counts resolve to the first site in mapping iteration order.
        """
        counts: Dict[Site, int] = {}
        for context in contexts:
            counts[context.site] = counts.get(context.site, 0) + len(context.recent_activity)

        best_site = Site.UNKNOWN
        best_count = -1
        for site, count in counts.items():
            if count > best_count:
                best_site, best_count = site, count
        return best_site

    def extract_key_contacts(self, contexts: List[UserContext]) -> List[str]:
        contacts: List[str] = []
        for context in contexts:
            for connection in context.connections:
                if connection.name and connection.name not in contacts:
                    contacts.append(connection.name)
                    if len(contacts) >= self.contact_limit:
                        return contacts
        return contacts

    def extract_topics(self, contexts: List[UserContext]) -> List[str]:
        """Top categories by keyword hits over activity text."""
        scores: Counter = Counter()

        for context in contexts:
            for activity in context.recent_activity:
                content = (activity.content or "").lower()
                for topic, keywords in constants.TOPIC_KEYWORDS.items():
                    for keyword in keywords:
                        if keyword in content:
                            scores[topic] += 1

        # sorted() is stable, so equal scores keep declaration order
        ranked = sorted(
            (topic for topic in constants.TOPIC_KEYWORDS if scores[topic] > 0),
            key=lambda topic: scores[topic],
            reverse=True,
        )
        return ranked[:constants.TOPIC_LIMIT]

    def extract_organizations(self, contexts: List[UserContext]) -> List[str]:
        orgs: List[str] = []
        for context in contexts:
            if context.organization and context.organization not in orgs:
                orgs.append(context.organization)
        return orgs

    def suggest_attack_vectors(self, contexts: List[UserContext]) -> List[str]:
        vectors: List[str] = []
        for context in contexts:
            for vector in SITE_ATTACK_VECTORS.get(context.site, []):
                if vector not in vectors:
                    vectors.append(vector)
        return vectors or [constants.DEFAULT_ATTACK_VECTOR]

    def calculate_personalization_score(self, contexts: List[UserContext]) -> int:
        """Share of populated personal fields (4 per context), 0-100."""
        if not contexts:
            return 0

        populated = 0
        for context in contexts:
            populated += sum([
                bool(context.username),
                bool(context.email),
                bool(context.organization),
                bool(context.connections),
            ])

        return round(populated / (4 * len(contexts)) * 100)

    def analyze_timing_patterns(self, contexts: List[UserContext]) -> TimingPattern:
        """
        Most active hour of day and day of week across all activity.

        Defaults to Monday 9:00 when there are no timestamps.
        """
        timestamps = [
            activity.timestamp
            for context in contexts
            for activity in context.recent_activity
        ]

        if not timestamps:
            return TimingPattern(
                best_hour=constants.DEFAULT_BEST_HOUR,
                best_day=constants.DEFAULT_BEST_DAY,
                sample_size=0,
            )

        hour_counts = [0] * 24
        day_counts = [0] * 7
        for timestamp in timestamps:
            moment = local_datetime(timestamp, self.tz)
            hour_counts[moment.hour] += 1
            day_counts[moment.weekday()] += 1

        # list.index returns the lowest index among equal maxima
        return TimingPattern(
            best_hour=hour_counts.index(max(hour_counts)),
            best_day=day_counts.index(max(day_counts)),
            sample_size=len(timestamps),
        )

    def detect_anomalies(self, context: UserContext) -> List[str]:
        """Flag burst activity and activity at unusual hours for one context."""
        anomalies: List[str] = []

        if not context.recent_activity:
            return anomalies

        ordered = sorted(context.recent_activity, key=lambda a: a.timestamp)
        for previous, current in zip(ordered, ordered[1:]):
            if current.timestamp - previous.timestamp < constants.BURST_ACTIVITY_GAP_MS:
                anomalies.append("burst_activity")
                break

        hour = local_datetime(ordered[-1].timestamp, self.tz).hour
        if hour < constants.UNUSUAL_HOURS_START or hour >= constants.UNUSUAL_HOURS_END:
            anomalies.append("unusual_hours")

        return anomalies

    def build_relationship_graph(self, contexts: Mapping[Site, UserContext]) -> Dict[str, List[str]]:
        """Map each known identity to its connection names."""
        graph: Dict[str, List[str]] = {}
        for context in self.keyed_contexts(contexts):
            if not context.connections:
                continue
            identity = context.username or context.email or context.site.value
            graph[identity] = [c.name for c in context.connections]
        return graph

    @staticmethod
    def keyed_contexts(contexts: Optional[Mapping[Site, UserContext]]) -> List[UserContext]:
        """
        Present contexts, each carrying the site it is keyed under.

        The mapping key wins over the snapshot's own `site` field.
        """
        keyed: List[UserContext] = []
        for site, context in (contexts or {}).items():
            if context is None:
                continue
            if context.site != site:
                context = context.model_copy(update={"site": Site(site)})
            keyed.append(context)
        return keyed

    @staticmethod
    def default_analysis() -> ContextAnalysis:
        """Analysis used when no context is available."""
        return ContextAnalysis(
            risk_profile=RiskProfile.MEDIUM,
            primary_site=Site.UNKNOWN,
            key_contacts=[],
            topics=[],
            organizations=[],
            suggested_attack_vectors=[constants.DEFAULT_ATTACK_VECTOR],
            personalization_score=0,
            timing=TimingPattern(
                best_hour=constants.DEFAULT_BEST_HOUR,
                best_day=constants.DEFAULT_BEST_DAY,
            ),
            anomalies={},
        )


# Singleton instance
_context_aggregator: Optional[ContextAggregator] = None


def get_context_aggregator() -> ContextAggregator:
    """Get the context aggregator singleton."""
    global _context_aggregator
    if _context_aggregator is None:
        _context_aggregator = ContextAggregator()
    return _context_aggregator
