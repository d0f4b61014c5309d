"""
Path matching for batch sub-requests.

A sub-request path is classified once into one of:

- NOT_COCART:   outside /{namespace}/{version}, the batch must be rejected
- COCART_OTHER: inside the API namespace but not the cart resource
- COCART_CART:  the cart resource (/{namespace}/{version}/cart/...)

Dot segments are resolved before matching, and the resolved path is the one
that gets dispatched.
"""
import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import unquote, urlsplit


CART_RESOURCE = "cart"


class PathKind(str, Enum):
    """Where a sub-request path points."""
    NOT_COCART = "not_cocart"
    COCART_OTHER = "cocart_other"
    COCART_CART = "cocart_cart"


@dataclass(frozen=True)
class PathMatch:
    """Result of classifying a path."""
    kind: PathKind
    path: str = ""

    @property
    def is_cart(self) -> bool:
        return self.kind is PathKind.COCART_CART

    @property
    def in_namespace(self) -> bool:
        return self.kind is not PathKind.NOT_COCART


def normalize_path(path: str) -> str:
    """Resolve "." and ".." segments and duplicate slashes; the query string is kept."""
    parts = urlsplit(path)
    resolved = posixpath.normpath("/" + unquote(parts.path))
    # normpath keeps a leading "//"
    resolved = "/" + resolved.lstrip("/")
    if parts.query:
        resolved = f"{resolved}?{parts.query}"
    return resolved


class PathMatcher:
    """Classifies paths against a fixed namespace and version."""

    def __init__(self, namespace: str, version: str):
        self.namespace = namespace.strip("/").lower()
        self.version = version.strip("/").lower()

    def classify(self, path: Optional[str]) -> PathMatch:
        if not path:
            return PathMatch(PathKind.NOT_COCART)

        resolved = normalize_path(path)
        segments = [s.lower() for s in urlsplit(resolved).path.split("/") if s]

        if segments[:2] != [self.namespace, self.version]:
            return PathMatch(PathKind.NOT_COCART, resolved)

        if segments[2:3] == [CART_RESOURCE]:
            return PathMatch(PathKind.COCART_CART, resolved)
        return PathMatch(PathKind.COCART_OTHER, resolved)
