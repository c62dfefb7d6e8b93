"""
Strategy-based food recommendations.
"""
from cyclefuel.services.recommendation.base import RecommendationContext, RecommendationStrategy
from cyclefuel.services.recommendation.cycle_aware import CycleAwareStrategy
from cyclefuel.services.recommendation.deficiency import (
    IronDeficiencyStrategy,
    ProteinDeficiencyStrategy,
)
from cyclefuel.services.recommendation.orchestrator import (
    RecommendationOrchestrator,
    default_strategies,
)
from cyclefuel.services.recommendation.preference import PersonalPreferenceStrategy

__all__ = [
    "CycleAwareStrategy",
    "IronDeficiencyStrategy",
    "PersonalPreferenceStrategy",
    "ProteinDeficiencyStrategy",
    "RecommendationContext",
    "RecommendationOrchestrator",
    "RecommendationStrategy",
    "default_strategies",
]
