"""Framework-independent façade logic.

- **outcomes**: The closed set of handler outcomes
- **status_policy**: One HTTP status per outcome kind
- **envelope**: Response body shapes
- **routing**: Versioned resource routing
"""
