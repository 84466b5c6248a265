"""Ed25519 request signing built on PyNaCl."""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from nacl import exceptions as nacl_exceptions
from nacl.signing import SigningKey, VerifyKey

from .body import BodyKind
from .config import require_setting
from .request import Request

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .builder import RequestBuilderBase

LOGGER = logging.getLogger(__name__)

SIGNING_KEY_ENV = "REQBUILDER_SIGNING_KEY_PATH"
DEFAULT_SIGNATURE_HEADER = "X-Signature"
KEY_ID_HEADER = "X-Signature-Key-Id"
DEFAULT_SIGNED_HEADERS = ("content-type", "content-length", "date", "host")
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"


class SignatureError(ValueError):
    """Raised when a signing key cannot be loaded or a signature is unusable."""


def _body_digest(request: Request) -> str:
    data = request.data
    if data is None:
        if request.form_params:
            rendered = "&".join(param.render() for param in request.form_params)
            return hashlib.sha256(rendered.encode("utf-8")).hexdigest()
        if request.body_generator is not None or request.parts or request.file:
            return UNSIGNED_PAYLOAD
        return hashlib.sha256(b"").hexdigest()
    if data.kind is BodyKind.STREAM:
        return UNSIGNED_PAYLOAD
    digest = hashlib.sha256()
    if data.kind is BodyKind.TEXT:
        digest.update(data.value.encode(request.body_charset or "utf-8"))
    elif data.kind is BodyKind.COMPOSITE_BYTES:
        for chunk in data.value:
            digest.update(chunk)
    else:
        digest.update(bytes(data.value))
    return digest.hexdigest()


def signature_base(request: Request, signed_headers: Iterable[str] = DEFAULT_SIGNED_HEADERS) -> bytes:
    """Canonical bytes covered by the signature.

    One line each for the method, the final URL, every allow-listed header
    present on the request (lower-cased, sorted) and the body digest.
    """

    lines = [request.method.upper(), request.url]
    for name in sorted({header.lower() for header in signed_headers}):
        value = request.headers.get_joined_value(name, ",")
        if value is not None:
            lines.append(f"{name}:{value.strip()}")
    lines.append(_body_digest(request))
    return "\n".join(lines).encode("utf-8")


class Ed25519SignatureCalculator:
    """Sign requests and attach the base64 signature as a header."""

    def __init__(
        self,
        signing_key: SigningKey,
        *,
        header_name: str = DEFAULT_SIGNATURE_HEADER,
        key_id: Optional[str] = None,
        signed_headers: Iterable[str] = DEFAULT_SIGNED_HEADERS,
    ) -> None:
        self.signing_key = signing_key
        self.header_name = header_name
        self.key_id = key_id
        self.signed_headers = tuple(signed_headers)
        if header_name.lower() in {name.lower() for name in self.signed_headers}:
            raise SignatureError("The signature header cannot sign itself.")

    @classmethod
    def from_path(cls, path: Optional[Path] = None, **kwargs) -> "Ed25519SignatureCalculator":
        return cls(load_signing_key(path), **kwargs)

    @property
    def verify_key(self) -> VerifyKey:
        return self.signing_key.verify_key

    def calculate_and_add_signature(self, request: Request, builder: "RequestBuilderBase") -> None:
        signed = self.signing_key.sign(signature_base(request, self.signed_headers))
        builder.set_header(self.header_name, base64.b64encode(signed.signature).decode("ascii"))
        if self.key_id:
            builder.set_header(KEY_ID_HEADER, self.key_id)
        LOGGER.debug(
            "Signed %s %s",
            request.method,
            request.url,
            extra={"event": "signature.applied", "key_id": self.key_id},
        )


def verify_signature(
    request: Request,
    verify_key: VerifyKey,
    *,
    header_name: str = DEFAULT_SIGNATURE_HEADER,
    signed_headers: Iterable[str] = DEFAULT_SIGNED_HEADERS,
) -> bool:
    """Return ``True`` when ``request`` carries a valid signature header."""

    encoded = request.headers.get_first_value(header_name)
    if not encoded:
        return False
    try:
        signature = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureError("Signature header is not valid base64.") from exc
    try:
        verify_key.verify(signature_base(request, signed_headers), signature)
    except (nacl_exceptions.BadSignatureError, ValueError):
        return False
    return True


def load_signing_key(path: Optional[Path | str] = None) -> SigningKey:
    """Load a raw 32 byte Ed25519 seed from ``path`` or ``$REQBUILDER_SIGNING_KEY_PATH``."""

    if path is None:
        try:
            path = require_setting(SIGNING_KEY_ENV)
        except RuntimeError as exc:
            raise SignatureError(f"{SIGNING_KEY_ENV} must be set to the path of the signing key.") from exc
    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise SignatureError(f"Signing key path must point to an existing file (got {resolved}).")
    try:
        raw = resolved.read_bytes()
    except OSError as exc:
        raise SignatureError(f"Unable to read signing key: {exc}") from exc
    try:
        return SigningKey(raw)
    except (nacl_exceptions.CryptoError, TypeError, ValueError) as exc:
        raise SignatureError(f"Invalid Ed25519 signing key in {resolved}.") from exc


__all__ = [
    "DEFAULT_SIGNATURE_HEADER",
    "DEFAULT_SIGNED_HEADERS",
    "Ed25519SignatureCalculator",
    "KEY_ID_HEADER",
    "SIGNING_KEY_ENV",
    "SignatureError",
    "load_signing_key",
    "signature_base",
    "verify_signature",
]
