"""
Coup - Rules engine for the card game Coup

A deterministic engine for playing Coup with human and automated players.
Each call takes a game snapshot and returns the next one. It provides:
- Game setup and turn flow
- Claim, challenge and block resolution
- Legal command generation
- Automated players backed by an advisory oracle
"""

__version__ = "0.1.0"
