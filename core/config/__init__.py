# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides the strategy policy table and cluster connection defaults.
"""

from core.config.defaults import (
    ClusterDefaults,
    StrategyPolicy,
    STRATEGY_POLICIES,
    get_strategy_policy,
    get_defaults,
)

__all__ = [
    "ClusterDefaults",
    "StrategyPolicy",
    "STRATEGY_POLICIES",
    "get_strategy_policy",
    "get_defaults",
]
