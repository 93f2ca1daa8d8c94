"""URL-namespace version router.

Resources are registered under a namespace such as ``/api/v1`` together with
a capability object exposing any subset of the five conventional actions.
Requests are resolved by strict, segment-wise prefix match on the path.
Versions are only ever taken from the URL; request headers play no part.

| Method     | Path                               | Action  |
|------------|------------------------------------|---------|
| GET        | ``/{namespace}/{version}/{name}``      | index   |
| POST       | ``/{namespace}/{version}/{name}``      | create  |
| GET        | ``/{namespace}/{version}/{name}/{id}`` | show    |
| PUT, PATCH | ``/{namespace}/{version}/{name}/{id}`` | update  |
| DELETE     | ``/{namespace}/{version}/{name}/{id}`` | destroy |

Registration happens once at startup. ``freeze()`` then turns the route
table into a read-only snapshot that concurrent requests read without
locking; any later ``register`` call fails fast with ConfigurationError.
"""

from collections.abc import Awaitable, Callable, Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple, TypeAlias

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.core.exceptions import ConfigurationError, RouteNotFoundError

Handler: TypeAlias = Callable[..., Any | Awaitable[Any]]


class Action(Enum):
    """Conventional resource actions, in the order they are listed."""

    INDEX = "index"
    SHOW = "show"
    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"


# (method, addresses a member) -> action
_ACTIONS_BY_REQUEST: Mapping[tuple[str, bool], Action] = MappingProxyType(
    {
        ("GET", False): Action.INDEX,
        ("POST", False): Action.CREATE,
        ("GET", True): Action.SHOW,
        ("PUT", True): Action.UPDATE,
        ("PATCH", True): Action.UPDATE,
        ("DELETE", True): Action.DESTROY,
    }
)

ROUTABLE_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE")

_PREFIX_SEGMENTS = 2
_COLLECTION_SEGMENTS = 3
_MEMBER_SEGMENTS = 4


def _validate_segment(value: str, what: str) -> str:
    if not value or "/" in value or value != value.strip():
        msg = f"{what} must be a single non-empty path segment, got {value!r}"
        raise ValueError(msg)
    return value


class RouteNamespace(BaseModel):
    """Namespace and version segments that prefix a group of routes."""

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(..., description="Namespace segment", examples=["api"])
    version: str = Field(..., description="Version segment", examples=["v1"])

    def __init__(self, namespace: str, version: str, **data: Any) -> None:
        try:
            super().__init__(namespace=namespace, version=version, **data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid route namespace {namespace!r}/{version!r}",
                context={"namespace": namespace, "version": version},
                cause=e,
            ) from e

    @field_validator("namespace", "version")
    @classmethod
    def _single_segment(cls, v: str) -> str:
        return _validate_segment(v, "Namespace segments")

    @property
    def segments(self) -> tuple[str, str]:
        """The namespace as an ordered pair of path segments."""
        return (self.namespace, self.version)

    @property
    def prefix(self) -> str:
        """URL prefix, e.g. ``/api/v1``."""
        return f"/{self.namespace}/{self.version}"

    @classmethod
    def from_prefix(cls, prefix: str) -> "RouteNamespace":
        """Build a namespace from a prefix such as ``/api/v1`` or ``api/v1``."""
        segments = [segment for segment in prefix.strip("/").split("/") if segment]
        if len(segments) != _PREFIX_SEGMENTS:
            raise ConfigurationError(
                f"Route prefix {prefix!r} must have exactly two segments",
                context={"prefix": prefix},
            )
        return cls(*segments)

    def __str__(self) -> str:
        return self.prefix


class ResourceCapability:
    """The set of actions a resource supports.

    Each action is an independent, optional handler slot. A resource may
    expose any subset, e.g. only ``index`` or only ``show``.

    Args:
        index: Lists the collection.
        show: Returns one member.
        create: Creates a member.
        update: Updates a member.
        destroy: Deletes a member.
        resource_key: Top-level key for success envelopes. Defaults to the
            name the resource is registered under.
    """

    def __init__(
        self,
        *,
        index: Handler | None = None,
        show: Handler | None = None,
        create: Handler | None = None,
        update: Handler | None = None,
        destroy: Handler | None = None,
        resource_key: str | None = None,
    ) -> None:
        self.index = index
        self.show = show
        self.create = create
        self.update = update
        self.destroy = destroy
        self.resource_key = resource_key

    def handler_for(self, action: Action) -> Handler | None:
        """Return the handler registered for an action, if any."""
        return get_handler(self, action)

    @property
    def actions(self) -> tuple[Action, ...]:
        """Actions this capability exposes."""
        return tuple(action for action in Action if self.handler_for(action))

    def __repr__(self) -> str:
        names = ", ".join(action.value for action in self.actions)
        return f"ResourceCapability({names})"


def get_handler(capability: object, action: Action) -> Handler | None:
    """Look up an action handler on any capability-shaped object.

    Raises:
        ConfigurationError: If the attribute exists but is not callable.
    """
    handler = getattr(capability, action.value, None)
    if handler is not None and not callable(handler):
        raise ConfigurationError(
            f"Capability attribute '{action.value}' is not callable",
            context={"capability": type(capability).__name__},
        )
    return handler


class RouteEntry(NamedTuple):
    """One row of the route table."""

    namespace: RouteNamespace
    resource_name: str
    action: Action
    handler: Handler
    capability: object


class RouteMatch(NamedTuple):
    """Result of resolving a request against the route table."""

    namespace: RouteNamespace
    resource_name: str
    capability: object
    action: Action
    handler: Handler
    resource_id: str | None = None

    @property
    def resource_key(self) -> str:
        """Envelope key for this resource."""
        key = getattr(self.capability, "resource_key", None)
        return key if isinstance(key, str) and key else self.resource_name


RouteKey: TypeAlias = tuple[tuple[str, str], str, Action]


class VersionRouter:
    """Resolve versioned REST paths to capability handlers.

    Args:
        allow_trailing_slash: Resolve a path ending in ``/`` like the same
            path without it.
    """

    def __init__(self, *, allow_trailing_slash: bool = True) -> None:
        self.allow_trailing_slash = allow_trailing_slash
        self._routes: dict[RouteKey, RouteEntry] = {}
        self._table: Mapping[RouteKey, RouteEntry] = self._routes
        self._frozen = False

    @property
    def frozen(self) -> bool:
        """Whether the route table has been sealed."""
        return self._frozen

    def register(
        self,
        namespace: RouteNamespace,
        resource_name: str,
        capability: object,
    ) -> None:
        """Register the actions a capability exposes under a namespace.

        Re-registering an action for the same namespace and resource replaces
        the previous handler and logs a configuration warning.

        Raises:
            ConfigurationError: If the router is frozen, the resource name is
                not a single path segment, or the capability exposes no action.
        """
        if self._frozen:
            raise ConfigurationError(
                "Cannot register routes after the router has been frozen",
                context={"namespace": namespace.prefix, "resource": resource_name},
            )

        try:
            resource_name = _validate_segment(resource_name, "Resource names")
        except ValueError as e:
            raise ConfigurationError(
                str(e), context={"resource_name": resource_name}, cause=e
            ) from e

        handlers = {
            action: handler
            for action in Action
            if (handler := get_handler(capability, action)) is not None
        }
        if not handlers:
            raise ConfigurationError(
                f"Capability for '{resource_name}' exposes no actions",
                context={"namespace": namespace.prefix, "resource": resource_name},
            )

        for action, handler in handlers.items():
            key: RouteKey = (namespace.segments, resource_name, action)
            if key in self._routes:
                logger.warning(
                    "Route {} {}#{} registered twice; last registration wins",
                    namespace.prefix,
                    resource_name,
                    action.value,
                    namespace=namespace.prefix,
                    resource=resource_name,
                    action=action.value,
                )
            self._routes[key] = RouteEntry(
                namespace, resource_name, action, handler, capability
            )

        logger.debug(
            "Registered {}/{} with actions {}",
            namespace.prefix,
            resource_name,
            [action.value for action in handlers],
        )

    def register_many(
        self, routes: Iterable[tuple[RouteNamespace, str, object]]
    ) -> None:
        """Register a static list of (namespace, resource name, capability)."""
        for namespace, resource_name, capability in routes:
            self.register(namespace, resource_name, capability)

    def freeze(self) -> None:
        """Seal the route table. Further registrations raise ConfigurationError."""
        if self._frozen:
            return
        self._table = MappingProxyType(self._routes)
        self._frozen = True
        logger.info("Route table frozen with {} routes", len(self._routes))

    def routes(self) -> list[RouteEntry]:
        """Registered routes, in registration order."""
        return list(self._table.values())

    def _split(self, path: str) -> list[str] | None:
        if not path.startswith("/"):
            return None
        body = path[1:]
        if body.endswith("/"):
            if not self.allow_trailing_slash:
                return None
            body = body[:-1]
        segments = body.split("/")
        if any(segment == "" for segment in segments):
            return None
        return segments

    def resolve(self, path: str, method: str) -> RouteMatch:
        """Find the handler for a request path and method.

        Args:
            path: Request path, e.g. ``/api/v1/members/42``.
            method: HTTP method, case-insensitive.

        Returns:
            RouteMatch: The matched namespace, resource, capability and action.

        Raises:
            RouteNotFoundError: If no registered capability matches.
        """
        method = method.upper()
        segments = self._split(path)
        # namespace, version, resource[, id]
        if segments is None or len(segments) not in (
            _COLLECTION_SEGMENTS,
            _MEMBER_SEGMENTS,
        ):
            raise RouteNotFoundError(path, method)

        namespace_segments = (segments[0], segments[1])
        resource_name = segments[2]
        resource_id = segments[3] if len(segments) == _MEMBER_SEGMENTS else None

        action = _ACTIONS_BY_REQUEST.get((method, resource_id is not None))
        if action is None:
            raise RouteNotFoundError(path, method)

        entry = self._table.get((namespace_segments, resource_name, action))
        if entry is None:
            raise RouteNotFoundError(path, method)

        return RouteMatch(
            namespace=entry.namespace,
            resource_name=entry.resource_name,
            capability=entry.capability,
            action=action,
            handler=entry.handler,
            resource_id=resource_id,
        )

    def __len__(self) -> int:
        return len(self._table)
