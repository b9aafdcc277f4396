"""Energy regeneration policy and its background refill scheduler."""

from stargazer.modules.energy.regeneration import Accrual, RegenerationPolicy
from stargazer.modules.energy.scheduler import EnergyRefillScheduler

__all__ = ["Accrual", "EnergyRefillScheduler", "RegenerationPolicy"]
