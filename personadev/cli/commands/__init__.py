"""
FILE: personadev/cli/commands/__init__.py
PURPOSE: CLI command modules
NOTES:
  - Importing a module registers its commands on the apps in cli.main
"""

from . import planning, sync, system, tasks, tracking

__all__ = [
    "planning",
    "sync",
    "system",
    "tasks",
    "tracking",
]
