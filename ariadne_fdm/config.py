"""Default tolerances used when callers omit them."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class NetworkDefaults:
    edge_tolerance: float = 0.01
    anchor_tolerance: float = 0.01


_NETWORK_DEFAULTS = NetworkDefaults()


def get_network_defaults() -> NetworkDefaults:
    return copy.deepcopy(_NETWORK_DEFAULTS)


def set_network_defaults(defaults: NetworkDefaults) -> None:
    global _NETWORK_DEFAULTS
    _NETWORK_DEFAULTS = copy.deepcopy(defaults)
