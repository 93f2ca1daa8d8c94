"""Guidepost - a uniform REST API façade.

Guidepost turns handler results into a small closed set of outcomes, maps
each outcome to exactly one HTTP status, shapes every response body into
one predictable envelope, normalizes timestamps to ISO 8601 and routes
requests to resources by the API version in the URL.

Architecture Overview:
- **API Layer**: FastAPI application factory, dispatch and middleware
- **Core Layer**: Configuration, logging, exceptions and date normalization
- **Domain Layer**: Outcomes, status policy, envelopes and the version router
"""
