"""reqbuilder: fluent construction of immutable HTTP request descriptions."""

from __future__ import annotations

# Semantic version for package consumers.
__version__ = "0.1.0"

from .builder import RequestBuilder, RequestBuilderBase, SignatureCalculator  # noqa: E402
from .cookies import Cookie  # noqa: E402
from .headers import FrozenHeaderMap, HeaderMap  # noqa: E402
from .params import Param  # noqa: E402
from .request import Request  # noqa: E402
from .uri import InvalidUriError, UnsupportedSchemeError, Uri  # noqa: E402

__all__ = [
    "__version__",
    "Cookie",
    "FrozenHeaderMap",
    "HeaderMap",
    "InvalidUriError",
    "Param",
    "Request",
    "RequestBuilder",
    "RequestBuilderBase",
    "SignatureCalculator",
    "UnsupportedSchemeError",
    "Uri",
]
