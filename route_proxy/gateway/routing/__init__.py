"""
Gateway routing package.

This package contains rule matching and path template components for the
route proxy.
"""

from .engine import find_matching_routing_rule, rule_matches
from .path_matcher import PathPattern, PathMatch, compile_path_pattern, replace_path_parameters

__all__ = [
    "find_matching_routing_rule",
    "rule_matches",
    "PathPattern",
    "PathMatch",
    "compile_path_pattern",
    "replace_path_parameters",
]
