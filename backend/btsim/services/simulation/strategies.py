"""
BTSim Content Strategies

Two ways of rendering SimulationContent behind one interface:
context-enriched templates and local heuristic subjects/bodies.
"""

import random
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from btsim.models.context import Site, UserContext, ContextAnalysis
from btsim.models.simulation import (
    AttackType,
    ContentStrategyName,
    SimulationContent,
    Theme,
    Urgency,
)
from btsim.services.simulation import templates as tpl

PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")


def personalize(template: str, values: Dict[str, str]) -> str:
    """Substitute {placeholders}; unknown names are left as-is."""
    return PLACEHOLDER_PATTERN.sub(lambda m: values.get(m.group(1), m.group(0)), template)


class ContentStrategy(ABC):
    """Renders the user-facing content of a simulation."""

    name: ContentStrategyName

    @abstractmethod
    def render(
        self,
        site: Site,
        attack_type: AttackType,
        context: Optional[UserContext],
        analysis: Optional[ContextAnalysis],
        urgency: Urgency,
        rng: random.Random,
    ) -> SimulationContent:
        pass


class ContextEnrichedStrategy(ContentStrategy):
    """Per-site, per-type templates personalised from the aggregated analysis."""

    name = ContentStrategyName.ENRICHED

    def build_personalization(
        self,
        site: Site,
        context: Optional[UserContext],
        analysis: Optional[ContextAnalysis],
        rng: random.Random,
    ) -> Dict[str, str]:
        defaults = tpl.PLACEHOLDER_DEFAULTS
        contacts = analysis.key_contacts if analysis else []
        low, high = tpl.SEARCH_COUNT_RANGE

        return {
            "username": (context.username if context else None) or defaults["username"],
            "email": (context.email if context else None) or defaults["email"],
            "organization": (context.organization if context else None) or defaults["organization"],
            "connection": contacts[0] if contacts else defaults["connection"],
            "count": str(rng.randint(low, high)),
            "site": tpl.SITE_DISPLAY_NAMES.get(site, defaults["site"]),
        }

    def render(self, site, attack_type, context, analysis, urgency, rng) -> SimulationContent:
        template = rng.choice(tpl.get_templates(site, attack_type))
        values = self.build_personalization(site, context, analysis, rng)

        return SimulationContent(
            title=personalize(template.title, values),
            body=personalize(template.body, values),
            sender=rng.choice(tpl.SENDER_NAMES.get(site, tpl.SENDER_NAMES[Site.UNKNOWN])),
            sender_email=rng.choice(tpl.SENDER_EMAILS.get(site, tpl.SENDER_EMAILS[Site.UNKNOWN])),
            urgency=urgency,
            action_text=template.action_text,
            action_url=tpl.action_url(site),
            placement=template.placement,
            theme=Theme.LIGHT,
            brand_colors=list(tpl.BRAND_COLORS.get(site, tpl.BRAND_COLORS[Site.UNKNOWN])),
        )


class LocalHeuristicStrategy(ContentStrategy):
    """Site subject lines plus per-type bodies; uses only username and organisation."""

    name = ContentStrategyName.LOCAL

    def render(self, site, attack_type, context, analysis, urgency, rng) -> SimulationContent:
        subjects = tpl.LOCAL_SUBJECTS.get(site) or tpl.LOCAL_SUBJECTS[Site.UNKNOWN]
        bodies: List[str] = tpl.LOCAL_BODIES.get(attack_type) or tpl.LOCAL_BODIES[AttackType.CREDENTIAL_HARVEST]

        username = context.username if context else None
        organization = context.organization if context else None
        values = {
            "site": tpl.SITE_DISPLAY_NAMES.get(site, tpl.PLACEHOLDER_DEFAULTS["site"]),
            "organization": organization or tpl.PLACEHOLDER_DEFAULTS["organization"],
        }

        body = personalize(rng.choice(bodies), values)
        if username:
            body = f"Hi {username}, {body}"
        if organization:
            body += f" This affects your access to {organization} resources."

        sender_names = tpl.SENDER_NAMES.get(site, tpl.SENDER_NAMES[Site.UNKNOWN])
        sender_emails = tpl.SENDER_EMAILS.get(site, tpl.SENDER_EMAILS[Site.UNKNOWN])
        index = rng.randrange(len(sender_emails))

        return SimulationContent(
            title=personalize(rng.choice(subjects), values),
            body=body,
            sender=sender_names[index % len(sender_names)],
            sender_email=sender_emails[index],
            urgency=urgency,
            action_text=tpl.LOCAL_ACTION_TEXT.get(attack_type, "Verify Account"),
            action_url=tpl.action_url(site),
            placement=rng.choice(tpl.LOCAL_PLACEMENTS.get(attack_type, [tpl.Placement.MODAL])),
            theme=Theme.LIGHT,
            brand_colors=list(tpl.BRAND_COLORS.get(site, tpl.BRAND_COLORS[Site.UNKNOWN])),
        )


def select_strategy(preference: str, analysis: Optional[ContextAnalysis]) -> ContentStrategy:
    """
    Pick the content strategy.

    Args:
        preference: "enriched", "local" or "auto"
        analysis: Aggregated context, if any

    Returns:
        Enriched when forced or when the analysis carries personalisation
    """
    if preference == ContentStrategyName.ENRICHED.value:
        return ContextEnrichedStrategy()
    if preference == ContentStrategyName.LOCAL.value:
        return LocalHeuristicStrategy()
    if analysis is not None and analysis.personalization_score > 0:
        return ContextEnrichedStrategy()
    return LocalHeuristicStrategy()
