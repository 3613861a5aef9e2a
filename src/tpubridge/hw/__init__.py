"""
Reference accelerator model.

This module contains a minimal model of the offload target:
- MacLane / MacArray: Amaranth description of the MAC lanes
- MacArraySimulator: runs one tile on the description
- tile_sim: artifact-driven simulator command built on either model
"""

from .mac_array import MacArray, MacLane
from .sim import MacArraySimulator

__all__ = ["MacLane", "MacArray", "MacArraySimulator"]
