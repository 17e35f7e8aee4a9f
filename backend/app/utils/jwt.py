"""
Session token issue/verify.

Tokens are HS256 JWTs carrying ``{userId, name, role, iat, exp}``. Verification is
split in two layers:

* a backend (python-jose or PyJWT) that only parses the compact form and checks the
  signature, and
* ``TokenService`` which validates the header, claim shape and expiry against an
  explicit ``now``.

The route gate and the resource endpoints each hold their own ``TokenService`` built
on different backends; keeping claim/expiry logic here means both reach the same
accept/reject decision for any token.
"""
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import jwt as pyjwt
from jose import jws
from jose import jwt as jose_jwt
from jose.exceptions import JWSError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_LIFETIME_SECONDS = 24 * 60 * 60
ROLES = ("candidate", "hr")


class ConfigurationError(RuntimeError):
    pass


class TokenError(Exception):
    kind = "invalid"


class TokenMalformed(TokenError):
    kind = "malformed"


class TokenInvalidSignature(TokenError):
    kind = "invalid_signature"


class TokenExpired(TokenError):
    kind = "expired"


@dataclass(frozen=True)
class Identity:
    user_id: str
    name: str
    role: str


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    name: str
    role: str
    iat: int
    exp: int

    @property
    def identity(self) -> Identity:
        return Identity(user_id=self.user_id, name=self.name, role=self.role)


class TokenBackend(Protocol):
    name: str

    def encode(self, claims: dict, secret: str) -> str: ...

    def decode(self, token: str, secret: str) -> Any:
        """Return the decoded payload; raise TokenMalformed / TokenInvalidSignature."""
        ...


class JoseBackend:
    name = "jose"

    def encode(self, claims: dict, secret: str) -> str:
        return jose_jwt.encode(claims, secret, algorithm=ALGORITHM)

    def decode(self, token: str, secret: str) -> Any:
        try:
            jws.get_unverified_claims(token)
        except JWSError as e:
            raise TokenMalformed(str(e)) from e
        try:
            payload = jws.verify(token, secret, algorithms=[ALGORITHM])
        except JWSError as e:
            raise TokenInvalidSignature(str(e)) from e
        try:
            return json.loads(payload)
        except ValueError as e:
            raise TokenMalformed("Invalid payload string") from e


class PyJWTBackend:
    name = "pyjwt"

    # Time-based claims are checked by TokenService against its own clock.
    _options = {
        "verify_signature": True,
        "verify_exp": False,
        "verify_iat": False,
        "verify_nbf": False,
        "verify_aud": False,
        "verify_iss": False,
        "verify_sub": False,
        "verify_jti": False,
    }

    def encode(self, claims: dict, secret: str) -> str:
        return pyjwt.encode(claims, secret, algorithm=ALGORITHM)

    def decode(self, token: str, secret: str) -> Any:
        try:
            return pyjwt.decode(token, secret, algorithms=[ALGORITHM], options=self._options)
        except (pyjwt.InvalidSignatureError, pyjwt.InvalidAlgorithmError) as e:
            raise TokenInvalidSignature(str(e)) from e
        except pyjwt.InvalidTokenError as e:
            # DecodeError and friends: the token is not a parseable JWS/JWT.
            raise TokenMalformed(str(e)) from e


_BACKENDS: dict[str, Callable[[], TokenBackend]] = {
    "jose": JoseBackend,
    "pyjwt": PyJWTBackend,
}


def get_backend(name: str) -> TokenBackend:
    try:
        return _BACKENDS[(name or "").strip().lower()]()
    except KeyError:
        raise ConfigurationError(f"Unknown JWT backend: {name!r} (expected one of {sorted(_BACKENDS)})")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


ALLOWED_HEADER_KEYS = frozenset({"alg", "typ"})


def _check_header(token: str) -> None:
    """Reject headers beyond {alg, typ} before either backend sees the token."""
    try:
        header = jws.get_unverified_header(token)
    except JWSError as e:
        raise TokenMalformed(str(e)) from e
    if not isinstance(header, dict) or not set(header) <= ALLOWED_HEADER_KEYS:
        raise TokenMalformed("Unexpected token header")
    if not isinstance(header.get("alg"), str) or not isinstance(header.get("typ", ""), str):
        raise TokenMalformed("Invalid token header")


def _claims_from_payload(payload: Any) -> TokenClaims:
    if not isinstance(payload, dict):
        raise TokenMalformed("Token payload must be a JSON object")

    user_id = payload.get("userId")
    name = payload.get("name")
    role = payload.get("role")
    iat = payload.get("iat")
    exp = payload.get("exp")

    if not isinstance(user_id, str) or not user_id:
        raise TokenMalformed("Missing userId claim")
    if not isinstance(name, str):
        raise TokenMalformed("Missing name claim")
    if role not in ROLES:
        raise TokenMalformed("Missing or unknown role claim")
    if not _is_number(iat) or not _is_number(exp):
        raise TokenMalformed("Missing iat/exp claims")

    return TokenClaims(user_id=user_id, name=name, role=role, iat=int(iat), exp=int(exp))


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        lifetime_seconds: int = DEFAULT_LIFETIME_SECONDS,
        backend: TokenBackend | str = "jose",
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ConfigurationError("JWT_SECRET is not configured")
        if lifetime_seconds <= 0:
            raise ConfigurationError("JWT lifetime must be positive")
        self._secret = secret
        self.lifetime_seconds = int(lifetime_seconds)
        self.backend = get_backend(backend) if isinstance(backend, str) else backend
        self._clock = clock

    def issue(self, identity: Identity, now: float | None = None) -> str:
        iat = int(self._clock() if now is None else now)
        claims = {
            "userId": str(identity.user_id),
            "name": identity.name,
            "role": identity.role,
            "iat": iat,
            "exp": iat + self.lifetime_seconds,
        }
        return self.backend.encode(claims, self._secret)

    def verify(self, token: str, now: float | None = None) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise TokenMalformed("Empty token")

        _check_header(token)
        payload = self.backend.decode(token, self._secret)
        claims = _claims_from_payload(payload)

        current = self._clock() if now is None else now
        if current >= claims.exp:
            raise TokenExpired("Token has expired")
        return claims
