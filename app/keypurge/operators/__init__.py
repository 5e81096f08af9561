"""Store operators for deleting keys.

This module exports the key deletion operator.
"""

from keypurge.operators.delete import KeyDeleter

__all__ = ["KeyDeleter"]
