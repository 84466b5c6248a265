"""Authentication realm descriptor carried on requests."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AuthScheme(Enum):
    BASIC = "basic"
    DIGEST = "digest"
    NTLM = "ntlm"
    SPNEGO = "spnego"
    KERBEROS = "kerberos"


@dataclass(frozen=True)
class Realm:
    """Credentials and challenge state the transport uses to authenticate.

    The builder only records the realm; computing authorization headers is the
    transport's job.
    """

    principal: str
    password: str
    scheme: AuthScheme = AuthScheme.BASIC
    realm_name: Optional[str] = None
    nonce: Optional[str] = None
    opaque: Optional[str] = None
    algorithm: str = "MD5"
    qop: Optional[str] = None
    use_preemptive_auth: bool = True
    charset: str = "UTF-8"
    omit_query: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.scheme, AuthScheme):
            object.__setattr__(self, "scheme", AuthScheme(str(self.scheme).lower()))

    def __repr__(self) -> str:
        return (
            f"Realm(principal={self.principal!r}, password='[redacted]', "
            f"scheme={self.scheme.name}, realm_name={self.realm_name!r})"
        )


__all__ = ["AuthScheme", "Realm"]
