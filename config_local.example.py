# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for secrets. This file should contain only safe overrides.
"""

# Example: try the board without touching the SQLite file
# GATEWAY = "memory"
# SEED_DEMO = True

# Example: run headless (load once, then exit)
# CONSOLE_ENABLED = False
