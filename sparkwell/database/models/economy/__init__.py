from .redemption import Redemption
from .transaction_log import TransactionLog

__all__ = ["Redemption", "TransactionLog"]
