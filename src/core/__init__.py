"""Core infrastructure package for shared façade functionality.

- **config**: Centralized configuration with environment support
- **context**: Request context and correlation ID management
- **dates**: Canonical ISO 8601 formatting and parsing of dates and times
- **exceptions**: Structured exception hierarchy with error codes
- **logging**: Structured logging with Loguru
- **types**: Type aliases for loosely-typed payloads
"""
