from mondo.sessions.session import Session
from mondo.sessions.transaction import Transaction, TransactionState


__all__ = ["Session", "Transaction", "TransactionState"]
