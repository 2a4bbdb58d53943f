"""
Shared service utilities.

- http.py - requests sessions with retry/no-retry adapters and default timeouts
"""
