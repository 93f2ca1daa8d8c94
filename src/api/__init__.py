"""HTTP layer of the façade, built on FastAPI.

Key components:
- **main**: Application factory and lifecycle management
- **dispatch**: Catch-all endpoint that resolves requests through the
  version router and renders handler outcomes
- **middleware**: Security headers, correlation IDs and error handling
- **utils**: Envelope response rendering with orjson
"""
