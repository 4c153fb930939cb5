"""
BTSim Detection Module

Rule-based credential-risk detection with an optional trainable model
behind the same scoring interface.
"""

from .engine import (
    DetectionEngine,
    get_detection_engine,
    reset_detection_engine,
    analyze_page,
)

from .scorer import RiskScorer

from .model import (
    CredentialModel,
    get_credential_model,
    extract_features,
)

from .strategies import (
    ScoringStrategy,
    HeuristicScoringStrategy,
    ModelScoringStrategy,
)

from .recommendations import get_recommendations

from .rules import (
    DetectionRule,
    RuleMatch,
    rule_registry,
    get_all_rules,
    get_rules_by_category,
)

__all__ = [
    # Engine
    'DetectionEngine',
    'get_detection_engine',
    'reset_detection_engine',
    'analyze_page',

    # Scoring
    'RiskScorer',
    'ScoringStrategy',
    'HeuristicScoringStrategy',
    'ModelScoringStrategy',

    # Model
    'CredentialModel',
    'get_credential_model',
    'extract_features',

    # Guidance
    'get_recommendations',

    # Rules
    'DetectionRule',
    'RuleMatch',
    'rule_registry',
    'get_all_rules',
    'get_rules_by_category',
]
