"""Type aliases for dynamic data structures throughout the façade.

These aliases give names to the loosely-typed shapes that flow between
application handlers, the envelope builder and the JSON transport.
"""

from collections.abc import Mapping, Sequence
from typing import Any, TypeAlias

# Handler payload wrapped under a resource key; may hold dates and other
# values orjson serializes natively
Payload: TypeAlias = Any

# Field name -> ordered messages, as produced by a validation pass
FieldErrors: TypeAlias = dict[str, list[str]]

# Input accepted wherever field errors are built
FieldErrorsInput: TypeAlias = Mapping[str, Sequence[str]]
