"""
menubar_manager package.

Holds the process-wide helpers shared by the runtime and the engine.
"""

__all__ = [
    "logger",
]
