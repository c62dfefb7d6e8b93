"""
Runs recommendation strategies and merges their output into one ranked list.

Typical usage:
    orchestrator = RecommendationOrchestrator()
    suggestions = await orchestrator.generate(context, candidate_foods)
"""
import asyncio
from typing import Dict, List, Optional

from aws_lambda_powertools import Logger

from cyclefuel.models.food import Food, FoodSuggestion
from cyclefuel.services.exceptions import StrategyError
from cyclefuel.services.recommendation.base import RecommendationContext, RecommendationStrategy
from cyclefuel.services.recommendation.cycle_aware import CycleAwareStrategy
from cyclefuel.services.recommendation.deficiency import (
    IronDeficiencyStrategy,
    ProteinDeficiencyStrategy,
)
from cyclefuel.services.recommendation.preference import PersonalPreferenceStrategy
from cyclefuel.utils.logging import log_exception

logger = Logger()

DEFAULT_MAX_RESULTS = 10
DEFAULT_STRATEGY_TIMEOUT = 5.0

def default_strategies() -> List[RecommendationStrategy]:
    return [
        IronDeficiencyStrategy(),
        ProteinDeficiencyStrategy(),
        CycleAwareStrategy(),
        PersonalPreferenceStrategy(),
    ]

class RecommendationOrchestrator:
    """
    Ordered collection of strategies.

    Strategies run concurrently. A strategy that raises or exceeds the
    timeout is logged and contributes nothing; the rest still rank.
    """

    def __init__(
        self,
        strategies: Optional[List[RecommendationStrategy]] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        strategy_timeout: Optional[float] = DEFAULT_STRATEGY_TIMEOUT
    ):
        self._strategies: List[RecommendationStrategy] = []
        self.max_results = max_results
        self.strategy_timeout = strategy_timeout
        for strategy in default_strategies() if strategies is None else strategies:
            self.add_strategy(strategy)

    def add_strategy(self, strategy: RecommendationStrategy) -> None:
        """Register a strategy, keeping priority order with registration order as tiebreak."""
        self._strategies.append(strategy)
        self._strategies.sort(key=lambda s: s.priority(), reverse=True)

    def remove_strategy(self, name: str) -> bool:
        before = len(self._strategies)
        self._strategies = [s for s in self._strategies if s.name() != name]
        return len(self._strategies) < before

    def strategy_names(self) -> List[str]:
        return [s.name() for s in self._strategies]

    async def _run(
        self,
        strategy: RecommendationStrategy,
        context: RecommendationContext,
        foods: List[Food]
    ) -> List[FoodSuggestion]:
        if self.strategy_timeout is None:
            return await strategy.recommend(context, foods)
        try:
            return await asyncio.wait_for(strategy.recommend(context, foods), self.strategy_timeout)
        except asyncio.TimeoutError as e:
            raise StrategyError(
                f"{strategy.name()} timed out after {self.strategy_timeout}s"
            ) from e

    def _applicable(self, context: RecommendationContext) -> List[RecommendationStrategy]:
        applicable = []
        for strategy in self._strategies:
            try:
                if strategy.supports(context):
                    applicable.append(strategy)
            except Exception:
                logger.exception("Strategy applicability check failed", extra={
                    "strategy": strategy.name(),
                    "user_id": context.user.user_id
                })
        return applicable

    async def generate(
        self,
        context: RecommendationContext,
        foods: List[Food]
    ) -> List[FoodSuggestion]:
        """
        Produce the merged, ranked recommendation list.

        Args:
            context: Recommendation context for the user
            foods: Candidate foods

        Returns:
            At most ``max_results`` suggestions, one per food, highest
            priority first
        """
        applicable = self._applicable(context)
        results = await asyncio.gather(
            *(self._run(s, context, foods) for s in applicable),
            return_exceptions=True
        )

        merged: Dict[str, FoodSuggestion] = {}
        for strategy, result in zip(applicable, results):
            if isinstance(result, BaseException):
                log_exception(logger, "Strategy failed", exc_info=result, extra={
                    "strategy": strategy.name(),
                    "user_id": context.user.user_id,
                    "error": str(result) or result.__class__.__name__
                })
                continue

            logger.debug("Strategy produced suggestions", extra={
                "strategy": strategy.name(),
                "count": len(result)
            })
            for suggestion in result:
                existing = merged.get(suggestion.food.id)
                if existing is None or suggestion.priority > existing.priority:
                    merged[suggestion.food.id] = suggestion

        ranked = sorted(merged.values(), key=lambda s: s.priority, reverse=True)
        return ranked[:self.max_results]
