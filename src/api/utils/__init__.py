"""Utility modules for API-specific functionality.

- **responses**: orjson-backed response classes and outcome rendering
"""
