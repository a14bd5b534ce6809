"""
Timesup - Party Game Turn Engine

A deterministic engine for the "Time's Up" style guessing game.
Teams take timed turns guessing terms from a shared pool over several
rounds with increasingly restrictive rules. The engine provides:
- Term pool and cursor management
- Turn, round and game transitions
- Scoring with per-difficulty penalties
- A session driver, a REST API and a simulation CLI
"""

__version__ = "0.1.0"
