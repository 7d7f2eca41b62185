"""
Dynamical system implementations and registry
"""

from .base import DynamicalSystem, DiscreteSystem, ContinuousSystem, SystemConfig
from .henon import HenonMap
from .standard_map import StandardMap
from .henon_heiles import HenonHeiles

# available systems registry
AVAILABLE_SYSTEMS = {
    'henon': HenonMap,
    'standard': StandardMap,
    'henon_heiles': HenonHeiles,
}

__all__ = ['DynamicalSystem', 'DiscreteSystem', 'ContinuousSystem', 'SystemConfig',
           'HenonMap', 'StandardMap', 'HenonHeiles', 'AVAILABLE_SYSTEMS']
