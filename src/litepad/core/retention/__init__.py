"""Retention management for backup archives.

Provides RetentionManager for pruning archives beyond the configured count.
"""

from litepad.core.retention.prune import RetentionManager

__all__ = ["RetentionManager"]
