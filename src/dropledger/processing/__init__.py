"""Event processing - mapping, transactional writes and handlers."""

from dropledger.processing.handlers import EventProcessor
from dropledger.processing.writer import IdempotencyGuard, TransactionalWriter

__all__ = ["EventProcessor", "IdempotencyGuard", "TransactionalWriter"]
