"""
Canonical Wardley Map (CWM) Package

Turns Wardley Map DSL text into one typed, internally consistent map
model that renderers consume read-only.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - SVG or any other drawing format
    - Geometry and pixel layout
    - Themes, colours and fonts
    - Command line handling

This package defines MAP STRUCTURE only.

parse() never fails: a partially wrong map is always returned, and
problems are listed in WardleyMap.errors.
"""

from cwm.config import FeatureSwitches
from cwm.model import WardleyMap
from cwm.parser import parse, parse_file

__version__ = "0.1.0"

__all__ = ["FeatureSwitches", "WardleyMap", "parse", "parse_file"]
