"""
Feature switches gating optional grammar.

Switches are an explicit value passed into parse() and threaded to the
strategies that need them. There is no global switch bag.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict

import yaml


class ConfigError(Exception):
    """Raised when a feature switch document is invalid."""
    pass


@dataclass(frozen=True)
class FeatureSwitches:
    """
    Named boolean toggles for optional grammar.

    Properties:
        enable_new_pipelines:
            Read `pipeline Name { component Child [m] }` blocks. When off,
            only the `pipeline Name [m1, m2]` form is read.

        enable_link_context:
            Attach trailing `; text` of a link as its context. When off,
            the text is removed from the link and discarded.

        enable_accelerators:
            Read `accelerator` / `deaccelerator` lines.
    """

    enable_new_pipelines: bool = True
    enable_link_context: bool = True
    enable_accelerators: bool = True


def feature_switches_from_dict(d: Dict[str, Any] | None) -> FeatureSwitches:
    """
    Build FeatureSwitches from a mapping, defaulting missing keys.

    Raises:
        ConfigError: On unknown keys or non-boolean values
    """
    if d is None:
        return FeatureSwitches()
    if not isinstance(d, dict):
        raise ConfigError(f"Feature switches must be a mapping, got {type(d).__name__}")

    known = {f.name for f in fields(FeatureSwitches)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise ConfigError(f"Unknown feature switches: {unknown}")

    for key, value in d.items():
        if not isinstance(value, bool):
            raise ConfigError(f"Feature switch '{key}' must be true or false, got {value!r}")

    return FeatureSwitches(**d)


def feature_switches_to_dict(switches: FeatureSwitches) -> Dict[str, bool]:
    return {f.name: getattr(switches, f.name) for f in fields(FeatureSwitches)}


def feature_switches_from_yaml(s: str) -> FeatureSwitches:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid feature switch YAML: {e}")
    return feature_switches_from_dict(d)


def load_feature_switches(filepath: str) -> FeatureSwitches:
    """
    Load feature switches from a YAML file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ConfigError: If the document is invalid
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        content = f.read()
    return feature_switches_from_yaml(content)


__all__ = [
    "ConfigError",
    "FeatureSwitches",
    "feature_switches_from_dict",
    "feature_switches_to_dict",
    "feature_switches_from_yaml",
    "load_feature_switches",
]
