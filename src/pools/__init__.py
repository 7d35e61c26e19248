"""
Distribution pool membership polling and connection.
"""

from .membership import PoolMembershipController

__all__ = ["PoolMembershipController"]
