"""Example models and custom fire semantics."""

from pypetri.examples.resource_pool import POOL_SEMANTICS, choose_pool
from pypetri.examples.two_place_cycle import drive

__all__ = ["POOL_SEMANTICS", "choose_pool", "drive"]
