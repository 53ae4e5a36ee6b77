"""
Core module - Base abstractions and interfaces

Provides foundational components used across the package:
- Interfaces and protocols
- Base exception hierarchy
- Configuration management
"""

from ansible_step.core.config import (
    Settings,
    get_data_dir,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "get_data_dir",
]
