"""Configuration helpers for roster templates and generator defaults."""

from .roster import (
    ExclusionRule,
    RosterTemplate,
    Slot,
    StackRule,
    get_template,
    get_template_by_key,
    iter_templates,
    template_from_mapping,
)
from .settings import GeneratorSettings, admin_token, load_settings

__all__ = [
    "ExclusionRule",
    "GeneratorSettings",
    "RosterTemplate",
    "Slot",
    "StackRule",
    "admin_token",
    "get_template",
    "get_template_by_key",
    "iter_templates",
    "load_settings",
    "template_from_mapping",
]
