"""
Rarity-weighted discovery sampling.

Each undiscovered candidate carries its tier weight; a uniform roll over the
total weight walks the candidates in catalog order. Tier weights are global
constants, so a tier with many remaining entries is proportionally more
likely than one with few, and a fully discovered tier simply drops out of
the total.
"""

from __future__ import annotations

import random
import secrets
from typing import Mapping, Optional, Sequence

from stargazer.core.config.errors import ConfigValidationError
from stargazer.core.logging.logger import get_logger
from stargazer.domain.models.catalog import DiscoveryRecord, Rarity
from stargazer.modules.shared.exceptions import CatalogExhaustedError

logger = get_logger(__name__)


class SamplingPolicy:
    """
    Pick one record from a candidate list, weighted by rarity.

    Args:
        weights: Rarity name (e.g. "Common") to positive weight; every tier
            must be present
        rng: ``random.Random``-compatible source; defaults to
            ``secrets.SystemRandom()``

    Example:
        >>> policy = SamplingPolicy({"Common": 60, "Rare": 25, "Epic": 12, "Legendary": 3},
        ...                         rng=random.Random(7))
        >>> record = policy.select(state.undiscovered())
    """

    def __init__(
        self,
        weights: Mapping[str, int],
        rng: Optional[random.Random] = None,
    ) -> None:
        missing = [r.value for r in Rarity if r.value not in weights]
        if missing:
            raise ConfigValidationError(
                "exploration.rarity_weights", f"missing weights for {', '.join(missing)}"
            )
        self._weights = {rarity: weights[rarity.value] for rarity in Rarity}
        self._rng = rng if rng is not None else secrets.SystemRandom()

    def weight_of(self, rarity: Rarity) -> int:
        return self._weights[rarity]

    def select(self, candidates: Sequence[DiscoveryRecord]) -> DiscoveryRecord:
        """
        Select one candidate.

        Raises:
            CatalogExhaustedError: ``candidates`` is empty.
        """
        if not candidates:
            raise CatalogExhaustedError(catalog_size=0)

        total_weight = sum(self._weights[c.rarity] for c in candidates)
        remainder = self._rng.random() * total_weight

        for candidate in candidates:
            remainder -= self._weights[candidate.rarity]
            if remainder <= 0:
                return candidate

        # Float rounding can leave a sliver above zero after the last subtraction.
        logger.debug(
            "Sampling fell through to last candidate",
            extra={"candidate_count": len(candidates), "remainder": remainder},
        )
        return candidates[-1]
