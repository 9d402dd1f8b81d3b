"""Workbrew agent installer for macOS (Python-first, step-driven).

Core design goals:
- Explicit configuration threaded through every step
- Idempotent toolchain check
- Scoped cleanup of temporary files and markers
- Centralized logging
"""

__all__ = []

__version__ = "1.0.0"
