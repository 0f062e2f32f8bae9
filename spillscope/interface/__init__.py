"""
Interface package for the detection visualization engine.
Provides the command-line interface.
"""

from .cli import cli

__all__ = [
    'cli'
]
