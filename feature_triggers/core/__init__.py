"""Core utilities and shared infrastructure.

- config: Run configuration built from CLI arguments and validated up front
- constants: Named constants, defaults, endpoints
- exceptions: Custom exception hierarchy
"""
