"""
FILE: personadev/relay/__init__.py
PURPOSE: Relay package - HTTP service storing snapshots in Google Sheets
EXPORTS:
  - create_app() (from relay.app)
DEPENDENCIES:
  - fastapi, gspread
"""

from .app import create_app

__all__ = ["create_app"]
