"""
BTSim Simulation Planner Tests

Tests for cadence, attack selection, content strategies, red-team planning,
revocation and trigger evaluation.
"""

import random

import pytest

from btsim.models.context import Connection, ContextAnalysis, Site, UserContext, Activity
from btsim.models.progression import EventKind
from btsim.models.simulation import (
    AttackType,
    Comparison,
    ContentStrategyName,
    Difficulty,
    Placement,
    TriggerCondition,
    TriggerKind,
    Urgency,
)
from btsim.services.simulation import (
    CadencePolicy,
    ContextEnrichedStrategy,
    LocalHeuristicStrategy,
    SimulationPlanner,
    compare,
    context_factor,
    personalize,
    select_strategy,
    trigger_probability,
)
from btsim.services.simulation import templates as tpl
from btsim.utils.exceptions import ValidationError

from conftest import FakeClock


class FixedRandom(random.Random):
    """random() always returns the same value; choices still use the seeded generator."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class NoRandom(random.Random):
    """Fails on any draw."""

    def random(self):
        raise AssertionError("random() used")

    def choice(self, seq):
        raise AssertionError("choice() used")

    def uniform(self, a, b):
        raise AssertionError("uniform() used")

    def randint(self, a, b):
        raise AssertionError("randint() used")


def full_context(site=Site.GITHUB) -> UserContext:
    return UserContext(
        site=site,
        username="alice",
        email="alice@example.com",
        organization="Acme",
        connections=[Connection(name="Bob"), Connection(name="Carol")],
        recent_activity=[Activity(type="post", content="hello", timestamp=1)],
    )


class TestCadence:

    def test_minimum_interval_between_draws(self, clock):
        planner = SimulationPlanner(clock=clock, rng=FixedRandom(0.0))

        assert planner.should_trigger(Site.GITHUB) is True
        assert planner.should_trigger(Site.GITHUB) is False

        clock.advance(299_999)
        assert planner.should_trigger(Site.GITHUB) is False

        clock.advance(1)
        assert planner.should_trigger(Site.GITHUB) is True

    def test_failed_draw_also_blocks(self, clock):
        planner = SimulationPlanner(clock=clock, rng=FixedRandom(0.99))

        assert planner.should_trigger(Site.GMAIL) is False
        assert planner.session.last_evaluated_at == clock.now

        planner.rng.value = 0.0
        assert planner.should_trigger(Site.GMAIL) is False

    def test_interval_after_simulation(self, clock):
        planner = SimulationPlanner(clock=clock, rng=FixedRandom(0.0))
        planner.plan(Site.GITHUB)

        clock.advance(1000)
        assert planner.should_trigger(Site.GITHUB) is False

    def test_no_two_passes_within_interval(self):
        """Random call spacing never yields two passes under the interval."""
        spacing = random.Random(99)
        clock = FakeClock()
        policy = CadencePolicy(min_interval_ms=300_000)
        planner = SimulationPlanner(policy=policy, clock=clock, rng=random.Random(5))

        passed = []
        for _ in range(500):
            clock.advance(spacing.randint(0, 400_000))
            if planner.should_trigger(Site.LINKEDIN, full_context(Site.LINKEDIN)):
                passed.append(clock.now)

        assert passed
        assert all(b - a >= 300_000 for a, b in zip(passed, passed[1:]))

    def test_session_cap(self, clock):
        planner = SimulationPlanner(
            policy=CadencePolicy(max_simulations_per_session=2, min_interval_ms=0),
            clock=clock,
            rng=FixedRandom(0.0),
        )
        planner.plan(Site.GMAIL)
        planner.plan(Site.GMAIL)

        clock.advance(10_000_000)
        assert planner.should_trigger(Site.GMAIL) is False
        assert planner.session.simulation_count == 2

    def test_context_factor(self):
        assert context_factor(None) == 0.0
        assert context_factor(UserContext(username="alice")) == pytest.approx(0.1)
        assert context_factor(full_context()) == pytest.approx(0.4)

    def test_trigger_probability_capped(self):
        assert trigger_probability(None) == pytest.approx(0.2)
        assert trigger_probability(full_context()) == pytest.approx(0.6)


class TestPlanning:

    def test_plan_shape(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng)
        simulation = planner.plan(Site.GITHUB, full_context(), Difficulty.MEDIUM)

        assert simulation.target_site == Site.GITHUB
        assert simulation.metadata.created_at == clock.now
        assert simulation.metadata.difficulty == Difficulty.MEDIUM
        assert simulation.metadata.red_team is False
        assert simulation.metadata.campaign_id == "generated"
        assert simulation.metadata.training_objective == tpl.TRAINING_OBJECTIVES[simulation.attack_type]
        assert simulation.content.urgency in (Urgency.MEDIUM, Urgency.HIGH)
        assert simulation.content.action_url == "https://github.com/security-check"
        assert simulation.content.brand_colors == ["#24292e", "#0366d6"]

    def test_trigger_conditions(self, clock, rng):
        simulation = SimulationPlanner(clock=clock, rng=rng).plan(Site.GMAIL)
        time_gate, action_gate = simulation.trigger_conditions

        assert time_gate.kind == TriggerKind.TIME
        assert time_gate.comparison == Comparison.GT
        assert clock.now + 5000 <= time_gate.value <= clock.now + 30000
        assert action_gate.kind == TriggerKind.ACTION
        assert action_gate.comparison == Comparison.EQUALS
        assert action_gate.value == "page_visible"

    def test_records_session_and_pending(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng)
        simulation = planner.plan(Site.LINKEDIN)

        assert planner.session.simulation_count == 1
        assert planner.session.last_simulation_at == clock.now
        assert planner.pending == [simulation]

    def test_pending_is_bounded(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng, max_pending=3)
        planned = [planner.plan(Site.GMAIL) for _ in range(5)]
        red_team = planner.plan_red_team("alice", "phish", "Hello")

        pending_ids = [s.id for s in planner.pending]
        assert pending_ids == [planned[3].id, planned[4].id, red_team.id]
        # Dropped simulations can no longer be revoked
        assert planner.revoke(planned[0].id) is None

    def test_context_without_site_uses_planned_site(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng)
        # Snapshot left at its default site; github vectors still apply
        context = UserContext(username="octocat")
        simulation = planner.plan(Site.GITHUB, context, Difficulty.EXPERT)

        assert simulation.attack_type == AttackType.OAUTH_GRANT
        assert simulation.metadata.content_strategy == ContentStrategyName.ENRICHED

    def test_seeded_plans_are_reproducible(self, clock):
        a = SimulationPlanner(clock=clock, rng=random.Random(42)).plan(Site.LINKEDIN, full_context(Site.LINKEDIN))
        b = SimulationPlanner(clock=clock, rng=random.Random(42)).plan(Site.LINKEDIN, full_context(Site.LINKEDIN))

        assert a.id != b.id
        assert a.attack_type == b.attack_type
        assert a.content == b.content
        assert a.trigger_conditions == b.trigger_conditions

    def test_expert_prefers_most_sophisticated(self, clock):
        for seed in range(20):
            planner = SimulationPlanner(clock=clock, rng=random.Random(seed))
            simulation = planner.plan(Site.GITHUB, full_context(), Difficulty.EXPERT)
            assert simulation.attack_type == AttackType.OAUTH_GRANT

    def test_candidates_follow_suggested_vectors(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng)
        analysis = ContextAnalysis(suggested_attack_vectors=["mfa_bypass"])

        assert planner.candidate_types(Site.GMAIL, analysis) == [AttackType.MFA_BYPASS]
        # No overlap keeps the full site list
        assert planner.candidate_types(Site.LINKEDIN, analysis) == tpl.SITE_ATTACK_WEIGHTS[Site.LINKEDIN]

    def test_connection_impersonation_maps_to_credential_harvest(self):
        assert SimulationPlanner.attack_type_for_vector("connection_impersonation") == AttackType.CREDENTIAL_HARVEST
        assert SimulationPlanner.attack_type_for_vector("OAuth Grant") == AttackType.OAUTH_GRANT
        assert SimulationPlanner.attack_type_for_vector("Business Email Compromise") == AttackType.CREDENTIAL_HARVEST

    def test_easy_draws_from_weighted_list(self, clock):
        seen = set()
        for seed in range(40):
            planner = SimulationPlanner(clock=clock, rng=random.Random(seed))
            seen.add(planner.select_attack_type(Site.GMAIL, Difficulty.EASY))

        assert seen <= set(tpl.SITE_ATTACK_WEIGHTS[Site.GMAIL])
        assert AttackType.CREDENTIAL_HARVEST in seen

    def test_urgency_by_difficulty(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng)
        for difficulty, allowed in tpl.URGENCY_BY_DIFFICULTY.items():
            for _ in range(10):
                assert planner.select_urgency(difficulty) in allowed

    def test_unknown_site(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng)
        simulation = planner.plan(Site.UNKNOWN)

        assert simulation.content.sender == "Security Team"
        assert simulation.content.sender_email == "security@notification.local"
        assert simulation.content.action_url == "https://example.com/security-check"
        assert simulation.metadata.content_strategy == ContentStrategyName.LOCAL

    def test_unknown_site_enriched_uses_default_family(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng, content_strategy="enriched")
        simulation = planner.plan(Site.UNKNOWN)

        default_titles = {t.title for t in tpl.DEFAULT_TEMPLATES}
        assert simulation.content.title in default_titles
        assert simulation.metadata.content_strategy == ContentStrategyName.ENRICHED


class TestTemplates:

    def test_every_pair_resolves(self):
        for site in Site:
            for attack_type in AttackType:
                assert tpl.get_templates(site, attack_type)

    def test_empty_family_falls_back(self):
        assert tpl.get_templates(Site.LINKEDIN, AttackType.CLIPBOARD_HIJACK) is tpl.DEFAULT_TEMPLATES
        assert tpl.get_templates(Site.GMAIL, AttackType.CLIPBOARD_HIJACK) is tpl.DEFAULT_TEMPLATES

    def test_personalize(self):
        assert personalize("Hi {username} from {organization}", {"username": "alice"}) == \
            "Hi alice from {organization}"

    def test_enriched_fallback_text(self, rng):
        values = ContextEnrichedStrategy().build_personalization(Site.GITHUB, None, None, rng)

        assert values["username"] == "there"
        assert values["email"] == "your email"
        assert values["organization"] == "your organization"
        assert values["connection"] == "Someone"
        assert 10 <= int(values["count"]) <= 49

    def test_enriched_uses_key_contact(self, rng):
        analysis = ContextAnalysis(key_contacts=["Bob"], personalization_score=75)
        values = ContextEnrichedStrategy().build_personalization(Site.LINKEDIN, full_context(), analysis, rng)

        assert values["connection"] == "Bob"
        assert values["username"] == "alice"

    def test_enriched_render_leaves_no_placeholders(self):
        strategy = ContextEnrichedStrategy()
        for seed in range(30):
            content = strategy.render(
                Site.LINKEDIN, AttackType.CREDENTIAL_HARVEST, None, None, Urgency.LOW, random.Random(seed),
            )
            assert "{" not in content.title
            assert "{" not in content.body

    def test_local_strategy_personalization(self, rng):
        content = LocalHeuristicStrategy().render(
            Site.GITHUB, AttackType.MFA_BYPASS, full_context(), None, Urgency.HIGH, rng,
        )

        assert content.body.startswith("Hi alice, ")
        assert content.body.endswith("This affects your access to Acme resources.")
        assert content.action_text == "Update Security"
        assert content.placement in (Placement.MODAL, Placement.NOTIFICATION)
        assert content.urgency == Urgency.HIGH

    def test_strategy_selection(self):
        personalised = ContextAnalysis(personalization_score=25)
        blank = ContextAnalysis()

        assert isinstance(select_strategy("auto", personalised), ContextEnrichedStrategy)
        assert isinstance(select_strategy("auto", blank), LocalHeuristicStrategy)
        assert isinstance(select_strategy("auto", None), LocalHeuristicStrategy)
        assert isinstance(select_strategy("enriched", blank), ContextEnrichedStrategy)
        assert isinstance(select_strategy("local", personalised), LocalHeuristicStrategy)


class TestRedTeam:

    def test_literal_payload(self, clock):
        planner = SimulationPlanner(clock=clock, rng=NoRandom())
        simulation = planner.plan_red_team("alice", "Business Email Compromise", "Pay this invoice")

        assert simulation.content.title == "Internal: Pay this invoice"
        assert simulation.content.body == "Hi alice,\n\nPay this invoice"
        assert simulation.metadata.difficulty == Difficulty.EXPERT
        assert simulation.metadata.red_team is True
        assert simulation.metadata.campaign_id == "red-team"
        assert simulation.metadata.attack_vector_label == "Business Email Compromise"
        assert simulation.metadata.content_strategy == ContentStrategyName.RED_TEAM
        assert simulation.attack_type == AttackType.CREDENTIAL_HARVEST
        assert simulation.target_site == Site.GMAIL
        assert simulation.trigger_conditions == []

    def test_deterministic(self, clock):
        planner = SimulationPlanner(clock=clock, rng=NoRandom())
        a = planner.plan_red_team("alice", "Business Email Compromise", "Pay this invoice")
        b = planner.plan_red_team("alice", "Business Email Compromise", "Pay this invoice")

        assert a.id != b.id
        assert a.content == b.content
        assert a.metadata == b.metadata
        assert a.attack_type == b.attack_type

    def test_no_cadence_effect(self, clock):
        planner = SimulationPlanner(clock=clock, rng=NoRandom())
        planner.plan_red_team("alice", "phish", "Hello")

        assert planner.session.simulation_count == 0

    def test_default_payload(self, clock):
        simulation = SimulationPlanner(clock=clock).plan_red_team("bob", "oauth_grant", "")

        assert simulation.content.title == "Internal: Action Required"
        assert "Please review the attached document" in simulation.content.body
        assert simulation.attack_type == AttackType.OAUTH_GRANT

    def test_payload_kept_verbatim(self, clock):
        simulation = SimulationPlanner(clock=clock).plan_red_team("bob", "phish", "  Pay this invoice\n")

        assert simulation.content.title == "Internal:   Pay this invoice\n"
        assert simulation.content.body == "Hi bob,\n\n  Pay this invoice\n"

    def test_blank_payload_uses_default(self, clock):
        simulation = SimulationPlanner(clock=clock).plan_red_team("bob", "phish", "   ")

        assert simulation.content.title == "Internal: Action Required"

    def test_caller_triggers(self, clock):
        gate = TriggerCondition(kind=TriggerKind.URL, value="intranet", comparison=Comparison.CONTAINS)
        simulation = SimulationPlanner(clock=clock).plan_red_team("bob", "x", "y", trigger_conditions=[gate])

        assert simulation.trigger_conditions == [gate]

    def test_blank_target_rejected(self, clock):
        with pytest.raises(ValidationError):
            SimulationPlanner(clock=clock).plan_red_team("  ", "x", "y")


class TestRevocationAndTriggers:

    def test_revoke(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng)
        simulation = planner.plan(Site.GITHUB)

        event = planner.revoke(simulation.id)

        assert event.kind == EventKind.SIMULATION_DISMISSED
        assert event.simulation_id == simulation.id
        assert planner.pending == []
        assert simulation.trigger_conditions == []
        assert planner.revoke(simulation.id) is None

    def test_revoke_unknown(self, clock):
        assert SimulationPlanner(clock=clock).revoke("missing") is None

    def test_triggers_satisfied(self, clock, rng):
        planner = SimulationPlanner(clock=clock, rng=rng)
        simulation = planner.plan(Site.GMAIL)

        assert planner.triggers_satisfied(simulation, clock.now + 1, ["page_visible"]) is False
        assert planner.triggers_satisfied(simulation, clock.now + 30001, []) is False
        assert planner.triggers_satisfied(simulation, clock.now + 30001, ["focus", "page_visible"]) is True

    def test_signal_gates(self, clock):
        planner = SimulationPlanner(clock=clock)
        gate = TriggerCondition(kind=TriggerKind.URL, value=r"/inbox/\d+", comparison=Comparison.REGEX)
        simulation = planner.plan_red_team("alice", "x", "y", trigger_conditions=[gate])

        assert planner.triggers_satisfied(simulation, signals={"url": "https://mail.test/inbox/42"}) is True
        assert planner.triggers_satisfied(simulation, signals={"url": "https://mail.test/sent"}) is False
        assert planner.triggers_satisfied(simulation) is False

    def test_compare(self):
        assert compare(10, 5, Comparison.GT) is True
        assert compare(1, 5, Comparison.LT) is True
        assert compare("abc", 5, Comparison.GT) is False
        assert compare("page_visible", "page_visible", Comparison.EQUALS) is True
        assert compare("https://a.test/x", "a.test", Comparison.CONTAINS) is True
        assert compare("abc", "[", Comparison.REGEX) is False
        assert compare(None, "x", Comparison.EQUALS) is False
