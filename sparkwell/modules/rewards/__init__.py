from sparkwell.modules.rewards.catalog import RewardCatalog
from sparkwell.modules.rewards.redemption_service import RedemptionResult, RedemptionService

__all__ = ["RewardCatalog", "RedemptionResult", "RedemptionService"]
