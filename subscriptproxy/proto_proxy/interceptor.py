"""
Prototype Interceptor

Inserts an interception layer into an instance's inheritance chain.
The layer is a synthetic subclass of the instance's current class;
swapping ``__class__`` to it lets the layer answer attribute reads
before the original class does, while the instance's own attributes
and the original class stay untouched.
"""

import inspect
from types import MappingProxyType
from typing import Any, Callable, Iterator

from structlog import get_logger

from subscriptproxy.config import get_settings
from subscriptproxy.proto_proxy.classifier import classify_source, resolve_options
from subscriptproxy.proto_proxy.models import (
    ALL,
    GENFN,
    MARKERS,
    LayerOptions,
    RelevantKeys,
    SourceKind,
)

logger = get_logger(__name__)

# Class attribute linking an installation point back to its layer
LAYER_ATTR = "__subscript_layer__"


class InterceptInstallError(TypeError):
    """The target's class cannot host an interception layer."""
    pass


def _is_dunder(key: Any) -> bool:
    """A name of the form __name__."""
    return isinstance(key, str) and len(key) > 4 and key[:2] == key[-2:] == "__"


def _invoke(resolver: Callable, *args: Any) -> Any:
    """
    Call a resolver with as many positional arguments as it accepts.

    Resolvers are written against ``(prototype, key, receiver)`` but
    may declare fewer parameters, e.g. ``lambda: True``.
    """
    try:
        signature = inspect.signature(resolver)
    except (TypeError, ValueError):
        return resolver(*args)

    positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind is parameter.VAR_POSITIONAL:
            return resolver(*args)
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            positional += 1

    return resolver(*args[:positional])


class SubscriptProxy:
    """
    Interception layer over an instance's inheritance chain.

    Claims the keys of its source and resolves them ahead of the
    original class. Unclaimed names go to the wildcard handler, then
    to ordinary inherited lookup.

    Usage:
        drink = Drink(name="Cocacola")
        SubscriptProxy.apply_to(drink, [("type", "drink"), ("has_calories", lambda: True)])

        drink.type          # "drink"
        drink.has_calories  # True
        drink.name          # "Cocacola"
    """

    def __init__(
        self,
        target: object,
        entries: dict[Any, Any],
        options: LayerOptions,
        kind: SourceKind = SourceKind.UNRECOGNIZED,
    ):
        """
        Initialize a layer. Use ``apply_to`` to build and install one.

        Args:
            target: Instance whose inheritance chain is modified.
            entries: Normalized source, markers included.
            options: Resolved layer options.
            kind: How the original source was classified.
        """
        self.target = target
        self.options = options
        self.kind = kind
        self.proxy: type | None = None

        self._entries = dict(entries)
        self._inherited_getattribute: Callable[[object, str], Any] = object.__getattribute__
        self._inherited_dir: Callable[[object], Any] = object.__dir__

        if options.fallback:
            self._entries[ALL] = self._compose_fallback(self._entries.get(ALL))

        self.source = MappingProxyType(self._entries)

    def __repr__(self) -> str:
        return (
            f"<SubscriptProxy kind={self.kind.value} "
            f"target={type(self.target).__name__} keys={len(self.own_keys())}>"
        )

    # =========================================================================
    # Installation
    # =========================================================================

    @classmethod
    def apply_to(cls, target: object, source: Any = None, options: Any = None) -> "SubscriptProxy":
        """
        Insert an interception layer above the target's current class.

        Args:
            target: Instance to augment. Its own attributes are never modified.
            source: Pair sequence, wildcard callable, re-iterable source of
                pairs, or mapping.
            options: Mapping of layer options, a LayerOptions, or None.

        Returns:
            SubscriptProxy: The installed layer.

        Raises:
            InterceptInstallError: If the target's class cannot be
                subclassed, patched, or swapped.
        """
        classified = classify_source(source)
        layer = cls(target, classified.entries, resolve_options(options), classified.kind)
        layer._install()
        return layer

    def _install(self) -> None:
        """Build the installation point and point the target at it."""
        parent = type(self.target)

        try:
            self._inherited_getattribute = parent.__getattribute__
            self._inherited_dir = parent.__dir__

            if self.options.copy_parent_prototype:
                # __slots__ = () keeps the instance layout compatible
                # with the parent so __class__ can be reassigned
                point = type(parent)(
                    parent.__name__,
                    (parent,),
                    {
                        "__slots__": (),
                        "__module__": parent.__module__,
                        "__qualname__": parent.__qualname__,
                        "__doc__": parent.__doc__,
                        "__getattribute__": self._make_getattribute(),
                        "__dir__": self._make_dir(),
                        LAYER_ATTR: self,
                    },
                )
                object.__setattr__(self.target, "__class__", point)
            else:
                point = parent
                setattr(point, "__getattribute__", self._make_getattribute())
                setattr(point, "__dir__", self._make_dir())
                setattr(point, LAYER_ATTR, self)

        except TypeError as e:
            logger.error(
                "intercept_layer_install_failed",
                target=parent.__name__,
                error=str(e),
            )
            raise InterceptInstallError(
                f"Cannot install an interception layer on {parent.__name__!r}: {e}"
            ) from e

        self.proxy = point

        logger.info(
            "intercept_layer_installed",
            target=parent.__name__,
            source_kind=self.kind.value,
            literal_keys=len([key for key in self._entries if key not in MARKERS]),
            wildcard=ALL in self._entries,
            fallback=self.options.fallback,
            copy_parent_prototype=self.options.copy_parent_prototype,
        )

    def _make_getattribute(self) -> Callable[[object, str], Any]:
        """Build the get trap installed as __getattribute__."""
        layer = self

        def __getattribute__(receiver, name):
            return layer.get(name, receiver)

        return __getattribute__

    def _make_dir(self) -> Callable[[object], list[str]]:
        """Build the enumeration trap installed as __dir__."""
        layer = self

        def __dir__(receiver):
            names = set(layer._inherited_dir(receiver))
            names.update(key for key in layer.own_keys() if isinstance(key, str))
            return sorted(names)

        return __dir__

    # =========================================================================
    # Resolution Helpers
    # =========================================================================

    def _compose_fallback(self, handler: Callable | None) -> Callable:
        """Wrap a wildcard so that a None answer defers to inherited lookup."""
        if handler is None:
            return self._default_resolver

        def wildcard(prototype, key, receiver):
            response = _invoke(handler, prototype, key, receiver)
            if response is None:
                return self._inherited_lookup(receiver, key)
            return response

        return wildcard

    def _default_resolver(self, prototype: Any, key: Any, receiver: object) -> Any:
        """Ordinary inherited lookup past this layer."""
        return self._inherited_lookup(receiver, key)

    def _chain(self) -> Iterator[type]:
        """Classes consulted after this layer, nearest first."""
        mro = type(self.target).__mro__
        if self.proxy in mro:
            start = mro.index(self.proxy)
            if self.options.copy_parent_prototype:
                start += 1
            mro = mro[start:]
        return iter(mro)

    def _deeper_layer(self) -> "SubscriptProxy | None":
        for klass in self._chain():
            layer = klass.__dict__.get(LAYER_ATTR)
            if layer is not None and layer is not self:
                return layer
        return None

    def _inherited_lookup(self, receiver: object, key: Any) -> Any:
        if isinstance(key, str):
            return self._inherited_getattribute(receiver, key)

        # Only layers understand non-string keys
        deeper = self._deeper_layer()
        if deeper is not None:
            return deeper.get(key, receiver)
        raise AttributeError(f"{type(receiver).__name__!r} object has no key {key!r}")

    def _is_excluded(self, key: Any) -> bool:
        return any(key == exception for exception in self.options.excluded_keys)

    @staticmethod
    def _owns(receiver: object, key: Any) -> bool:
        if not isinstance(key, str):
            return False
        try:
            return key in object.__getattribute__(receiver, "__dict__")
        except AttributeError:
            return False

    # =========================================================================
    # Traps
    # =========================================================================

    def relevant_keys(self) -> RelevantKeys:
        """
        Compute the keys this layer claims right now.

        Literal keys come first, minus the excluded keys, followed by
        the keys of a fresh snapshot of the generator source.
        Generator keys are not filtered by ``excluded_keys``.

        Returns:
            RelevantKeys: Claimed keys and the generator snapshot.
        """
        generator = self._entries.get(GENFN)
        generated = dict(generator()) if generator is not None else {}

        keys = [
            key for key in self._entries
            if key not in MARKERS and not self._is_excluded(key)
        ]
        keys.extend(key for key in generated if key not in keys)

        return RelevantKeys(keys=keys, generated=generated)

    def get(self, key: Any, receiver: object | None = None) -> Any:
        """
        Resolve a key the way an attribute read on the target does.

        Args:
            key: Attribute name, or any hashable key.
            receiver: Object the read happens on; defaults to the target.

        Returns:
            The resolved value.

        Raises:
            AttributeError: If nothing along the chain resolves the key.
        """
        if receiver is None:
            receiver = self.target

        if self._owns(receiver, key):
            return self._inherited_getattribute(receiver, key)

        relevant = self.relevant_keys()
        claimed = key in relevant

        if get_settings().trace_access:
            logger.debug(
                "intercept_layer_get",
                target=type(receiver).__name__,
                key=repr(key),
                claimed=claimed,
            )

        if claimed:
            if key in self._entries:
                value = self._entries[key]
            else:
                value = relevant.generated.get(key)

            if self.options.evaluate_functions and callable(value) and not isinstance(value, type):
                value = _invoke(value, self.proxy, key, receiver)
            return value

        if _is_dunder(key) or self._is_excluded(key):
            return self._inherited_lookup(receiver, key)

        wildcard = self._entries.get(ALL)
        if wildcard is not None:
            return _invoke(wildcard, self.proxy, key, receiver)

        return self._inherited_lookup(receiver, key)

    def has(self, key: Any) -> bool:
        """
        Check whether the key exists as seen from the target.

        Claimed keys and the target's own attributes exist; otherwise
        the remaining chain is searched without invoking any resolver.
        """
        if key in self.relevant_keys() or self._owns(self.target, key):
            return True

        for klass in self._chain():
            layer = klass.__dict__.get(LAYER_ATTR)
            if layer is not None and layer is not self:
                return layer.has(key)
            if isinstance(key, str) and key != LAYER_ATTR and key in klass.__dict__:
                return True
        return False

    def own_keys(self) -> list[Any]:
        """Keys the layer enumerates: exactly the claimed keys."""
        return self.relevant_keys().keys


def install(target: object, source: Any = None, options: Any = None) -> SubscriptProxy:
    """Install an interception layer on ``target``. See ``SubscriptProxy.apply_to``."""
    return SubscriptProxy.apply_to(target, source, options)
