"""
BTSim Simulation Planner

Turns context and a requested difficulty into a PhishingSimulation: attack
type selection, content rendering, urgency, trigger conditions and metadata.
Also hosts the deterministic red-team path and revocation of pending
simulations.
"""

import logging
import random
import re
from collections import OrderedDict
from typing import Any, Iterable, List, Mapping, Optional

from btsim.models.context import Site, UserContext, ContextAnalysis
from btsim.models.simulation import (
    AttackType,
    Comparison,
    ContentStrategyName,
    Difficulty,
    PhishingSimulation,
    Placement,
    SimulationContent,
    SimulationMetadata,
    TriggerCondition,
    TriggerKind,
    Urgency,
)
from btsim.models.progression import EventKind, SimulationEvent
from btsim.services.context import get_context_aggregator
from btsim.services.simulation import templates as tpl
from btsim.services.simulation.cadence import (
    CadenceGate,
    CadencePolicy,
    Clock,
    SessionState,
    system_clock,
)
from btsim.services.simulation.strategies import select_strategy
from btsim.utils import constants
from btsim.utils.exceptions import ValidationError
from btsim.utils.helpers import generate_id

logger = logging.getLogger(__name__)


PAGE_VISIBLE_ACTION = "page_visible"


# =============================================================================
# TRIGGER EVALUATION
# =============================================================================

def compare(actual: Any, expected: Any, comparison: Comparison) -> bool:
    """Apply a trigger comparison. Type mismatches evaluate to False."""
    if actual is None:
        return False

    if comparison in (Comparison.GT, Comparison.LT):
        try:
            a, e = float(actual), float(expected)
        except (TypeError, ValueError):
            return False
        return a > e if comparison == Comparison.GT else a < e

    if comparison == Comparison.EQUALS:
        return str(actual) == str(expected)
    if comparison == Comparison.CONTAINS:
        return str(expected) in str(actual)
    if comparison == Comparison.REGEX:
        try:
            return re.search(str(expected), str(actual)) is not None
        except re.error:
            logger.warning(f"Invalid trigger pattern: {expected}")
            return False
    return False


def triggers_satisfied(
    simulation: PhishingSimulation,
    now: int,
    observed_actions: Iterable[str] = (),
    signals: Optional[Mapping[str, Any]] = None,
) -> bool:
    """
    Check whether every trigger condition of a simulation holds.

    Args:
        simulation: Planned simulation
        now: Current time, epoch ms
        observed_actions: Activation events seen so far (e.g. "page_visible")
        signals: Current values for url/element/model_prediction gates

    Returns:
        True when all gates pass (vacuously true with no gates)
    """
    actions = list(observed_actions)
    signals = signals or {}

    for condition in simulation.trigger_conditions:
        if condition.kind == TriggerKind.TIME:
            ok = compare(now, condition.value, condition.comparison)
        elif condition.kind == TriggerKind.ACTION:
            ok = any(compare(a, condition.value, condition.comparison) for a in actions)
        else:
            ok = compare(signals.get(condition.kind.value), condition.value, condition.comparison)

        if not ok:
            return False
    return True


# =============================================================================
# PLANNER
# =============================================================================

class SimulationPlanner:
    """
    Plans simulations for one user session.

    Cadence state lives on the instance; create one planner per session.
    """

    def __init__(
        self,
        policy: Optional[CadencePolicy] = None,
        clock: Clock = system_clock,
        rng: Optional[random.Random] = None,
        content_strategy: str = "auto",
        max_pending: int = constants.MAX_PENDING_SIMULATIONS,
    ):
        self.clock = clock
        self.rng = rng or random.Random()
        self.content_strategy = content_strategy
        self.gate = CadenceGate(policy=policy, state=SessionState(), clock=clock, rng=self.rng)
        self.max_pending = max_pending
        self._pending: "OrderedDict[str, PhishingSimulation]" = OrderedDict()

    @property
    def session(self) -> SessionState:
        return self.gate.state

    @property
    def pending(self) -> List[PhishingSimulation]:
        return list(self._pending.values())

    def should_trigger(self, site: Site, context: Optional[UserContext] = None) -> bool:
        """
        Decide whether a simulation may be planned now.

        False within the minimum interval of the last simulation or the last
        draw, or at the session cap; otherwise a context-weighted draw.
        """
        decision = self.gate.should_trigger(context)
        logger.debug(f"Cadence decision for {site.value}: {decision}")
        return decision

    def plan(
        self,
        site: Site,
        context: Optional[UserContext] = None,
        difficulty: Difficulty = Difficulty.EASY,
        analysis: Optional[ContextAnalysis] = None,
    ) -> PhishingSimulation:
        """
        Plan a randomized training simulation.

        Args:
            site: Site the simulation targets
            context: Snapshot for the site, if any
            difficulty: Requested difficulty
            analysis: Aggregated context; derived from `context` when absent

        Returns:
            PhishingSimulation, recorded against the session as pending
        """
        if analysis is None:
            analysis = get_context_aggregator().aggregate({site: context} if context else {})

        now = self.clock()
        attack_type = self.select_attack_type(site, difficulty, analysis)
        urgency = self.select_urgency(difficulty)
        strategy = select_strategy(self.content_strategy, analysis)
        content = strategy.render(site, attack_type, context, analysis, urgency, self.rng)

        simulation = PhishingSimulation(
            id=generate_id("sim"),
            attack_type=attack_type,
            target_site=site,
            content=content,
            trigger_conditions=self.build_triggers(now),
            metadata=SimulationMetadata(
                created_at=now,
                campaign_id="generated",
                difficulty=difficulty,
                training_objective=tpl.TRAINING_OBJECTIVES[attack_type],
                red_team=False,
                content_strategy=strategy.name,
            ),
        )

        self.session.record_simulation(now)
        self._track(simulation)

        logger.info(
            f"Planned simulation {simulation.id}: site={site.value}, type={attack_type.value}, "
            f"difficulty={difficulty.value}, strategy={strategy.name.value}"
        )
        return simulation

    def plan_red_team(
        self,
        target_identity: str,
        vector: str,
        payload: Optional[str] = None,
        trigger_conditions: Optional[List[TriggerCondition]] = None,
        site: Site = Site.GMAIL,
    ) -> PhishingSimulation:
        """
        Plan an operator-controlled simulation.

        Uses no randomness, no cadence checks and no template lookup, so
        identical arguments always produce identical content.

        Raises:
            ValidationError: if the target identity is blank
        """
        if not target_identity or not target_identity.strip():
            raise ValidationError("Red-team target identity is required")

        message = payload if payload and payload.strip() else None
        title = f"Internal: {message or constants.RED_TEAM_DEFAULT_TITLE}"
        body = f"Hi {target_identity},\n\n{message or constants.RED_TEAM_DEFAULT_PAYLOAD}"

        simulation = PhishingSimulation(
            id=generate_id("redteam"),
            attack_type=self.attack_type_for_vector(vector),
            target_site=site,
            content=SimulationContent(
                title=title,
                body=body,
                sender="IT Security Team",
                sender_email="security@company.local",
                urgency=Urgency.HIGH,
                action_text="View Document",
                action_url="https://docs.company-secure.local",
                placement=Placement.NOTIFICATION,
            ),
            trigger_conditions=list(trigger_conditions or []),
            metadata=SimulationMetadata(
                created_at=self.clock(),
                campaign_id=constants.RED_TEAM_CAMPAIGN_ID,
                difficulty=Difficulty.EXPERT,
                training_objective=tpl.RED_TEAM_OBJECTIVE,
                red_team=True,
                attack_vector_label=vector,
                content_strategy=ContentStrategyName.RED_TEAM,
            ),
        )

        self._track(simulation)
        logger.info(f"Planned red-team simulation {simulation.id} (vector={vector})")
        return simulation

    def _track(self, simulation: PhishingSimulation) -> None:
        """Keep a simulation as pending; the oldest are dropped past max_pending."""
        self._pending[simulation.id] = simulation
        while len(self._pending) > self.max_pending:
            dropped, _ = self._pending.popitem(last=False)
            logger.debug(f"Dropped stale pending simulation {dropped}")

    def revoke(self, simulation_id: str) -> Optional[SimulationEvent]:
        """
        Withdraw a pending simulation.

        Returns:
            A simulation_dismissed event, or None for unknown ids
        """
        simulation = self._pending.pop(simulation_id, None)
        if simulation is None:
            return None

        simulation.trigger_conditions = []
        logger.info(f"Revoked simulation {simulation_id}")
        return SimulationEvent(
            id=generate_id("evt"),
            simulation_id=simulation_id,
            kind=EventKind.SIMULATION_DISMISSED,
            timestamp=self.clock(),
            site=simulation.target_site,
            metadata={"reason": "revoked"},
        )

    def triggers_satisfied(
        self,
        simulation: PhishingSimulation,
        now: Optional[int] = None,
        observed_actions: Iterable[str] = (),
        signals: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        return triggers_satisfied(
            simulation,
            self.clock() if now is None else now,
            observed_actions,
            signals,
        )

    # =========================================================================
    # Selection helpers
    # =========================================================================

    @staticmethod
    def attack_type_for_vector(vector: Optional[str]) -> AttackType:
        """Map a vector label to an AttackType; credential harvest otherwise."""
        if not vector:
            return AttackType.CREDENTIAL_HARVEST
        key = vector.strip().lower().replace(" ", "_").replace("-", "_")
        if key in tpl.VECTOR_ALIASES:
            return tpl.VECTOR_ALIASES[key]
        try:
            return AttackType(key)
        except ValueError:
            return AttackType.CREDENTIAL_HARVEST

    def candidate_types(self, site: Site, analysis: Optional[ContextAnalysis]) -> List[AttackType]:
        """Site-weighted candidates, narrowed to the suggested vectors when they overlap."""
        candidates = tpl.SITE_ATTACK_WEIGHTS.get(site) or tpl.SITE_ATTACK_WEIGHTS[Site.UNKNOWN]
        if analysis is None:
            return list(candidates)

        suggested = {self.attack_type_for_vector(v) for v in analysis.suggested_attack_vectors}
        narrowed = [c for c in candidates if c in suggested]
        return narrowed or list(candidates)

    def select_attack_type(
        self,
        site: Site,
        difficulty: Difficulty,
        analysis: Optional[ContextAnalysis] = None,
    ) -> AttackType:
        candidates = self.candidate_types(site, analysis)

        if self.rng.random() < tpl.SOPHISTICATION_BOOST.get(difficulty, 0.0):
            for attack_type in tpl.SOPHISTICATION_ORDER:
                if attack_type in candidates:
                    return attack_type

        return self.rng.choice(candidates)

    def select_urgency(self, difficulty: Difficulty) -> Urgency:
        levels = tpl.URGENCY_BY_DIFFICULTY.get(difficulty, tpl.URGENCY_BY_DIFFICULTY[Difficulty.MEDIUM])
        return self.rng.choice(levels)

    def build_triggers(self, now: int) -> List[TriggerCondition]:
        delay = self.rng.uniform(constants.SIMULATION_DELAY_MIN_MS, constants.SIMULATION_DELAY_MAX_MS)
        return [
            TriggerCondition(kind=TriggerKind.TIME, value=int(now + delay), comparison=Comparison.GT),
            TriggerCondition(kind=TriggerKind.ACTION, value=PAGE_VISIBLE_ACTION, comparison=Comparison.EQUALS),
        ]
