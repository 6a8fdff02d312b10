"""
Source Classifier

Normalizes the polymorphic input accepted by an interception layer.
Each source is classified once, at install time, into a SourceKind
and a normalized entry mapping; options are resolved the same way.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Callable

from structlog import get_logger

from subscriptproxy.config import get_settings
from subscriptproxy.proto_proxy.models import (
    ALL,
    GENFN,
    ClassifiedSource,
    LayerOptions,
    SourceKind,
)

logger = get_logger(__name__)


# =========================================================================
# Shape Predicates
# =========================================================================

def is_pair(value: Any) -> bool:
    """A 2-element list or tuple."""
    return isinstance(value, (list, tuple)) and len(value) == 2


def is_pairs(value: Any) -> bool:
    """A list or tuple made only of pairs."""
    return isinstance(value, (list, tuple)) and all(is_pair(entry) for entry in value)


def is_pair_iterable(value: Any) -> bool:
    """
    An iterable whose first element is a pair.

    Mappings and strings are rejected up front: iterating a mapping
    yields its keys, and a string yields characters. Lists and tuples
    are pair sequences or nothing; they are never read lazily.
    """
    if isinstance(value, (Mapping, str, bytes, list, tuple)) or not isinstance(value, Iterable):
        return False

    iterator = iter(value)
    if iterator is value:
        # Peeking would consume a one-shot iterator
        return False

    for first in iterator:
        return is_pair(first)
    return False


def is_one_shot_pairs(value: Any) -> bool:
    """An iterator that cannot be restarted."""
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes)) and iter(value) is value


# Ordered: the first matching predicate decides the kind
PREDICATES: list[tuple[SourceKind, Callable[[Any], bool]]] = [
    (SourceKind.PAIRS, is_pairs),
    (SourceKind.WILDCARD, callable),
    (SourceKind.ITERABLE, is_pair_iterable),
    (SourceKind.MAPPING, lambda value: isinstance(value, Mapping)),
]


# =========================================================================
# Normalization
# =========================================================================

def classify_source(source: Any) -> ClassifiedSource:
    """
    Classify a layer source and build its normalized entries.

    Args:
        source: Pair sequence, wildcard callable, re-iterable source
            of pairs, or mapping. Anything else is accepted and
            registers nothing.

    Returns:
        ClassifiedSource: The kind and the normalized entry mapping.
    """
    kind = next(
        (kind for kind, predicate in PREDICATES if predicate(source)),
        SourceKind.UNRECOGNIZED,
    )
    entries: dict[Any, Any] = {}

    if kind is SourceKind.PAIRS:
        entries.update(dict(source))
    elif kind is SourceKind.WILDCARD:
        entries[ALL] = source
    elif kind is SourceKind.ITERABLE:
        entries[GENFN] = lambda: iter(source)
    elif kind is SourceKind.MAPPING:
        entries.update(source)
    elif is_one_shot_pairs(source):
        # Snapshot once; the iterator cannot be replayed on later accesses
        pairs = list(source)
        if is_pairs(pairs):
            kind = SourceKind.PAIRS
            entries.update(dict(pairs))

    logger.debug(
        "source_classified",
        kind=kind.value,
        entry_count=sum(1 for key in entries if key is not ALL and key is not GENFN),
    )

    return ClassifiedSource(kind=kind, entries=entries)


def resolve_options(options: Any = None) -> LayerOptions:
    """
    Resolve layer options against the configured defaults.

    Args:
        options: None, a mapping of option names (original camelCase
            names are accepted), or a ready LayerOptions.

    Returns:
        LayerOptions: Frozen options. Wrong-shaped values fall back to
        the defaults from Settings.
    """
    if isinstance(options, LayerOptions):
        return options

    raw = dict(options) if isinstance(options, Mapping) else {}
    return LayerOptions.model_validate(
        raw,
        context={"defaults": get_settings().layer_defaults()},
    )
