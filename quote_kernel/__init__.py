"""
Quote Kernel - quote lifecycle workflow

A finite-state model for quote records with:
- Static status catalog and transition table
- Result-returning transition validation with opt-in role checks
- Append-only status change history
- Per-quote workflow instances
"""

__version__ = "0.1.0"
