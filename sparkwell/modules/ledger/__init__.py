from sparkwell.modules.ledger.service import PointsLedgerService, UserEconomy

__all__ = ["PointsLedgerService", "UserEconomy"]
