"""
Invitation Token Codec

Signed envelope (JWS, python-jose) with an encrypted identity claim
(Fernet, cryptography). Verification order is fixed:

    signature -> expiry -> revocation by lookup hash -> decrypt

Nothing is decrypted until every earlier check has passed.
"""

import base64
import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Callable, Dict, Optional
from uuid import UUID

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from jose import JWTError, jwt

from src.app.repositories.invitation_repository import IInvitationRepository
from src.domain.entities import InvitationStatus
from src.domain.invitation_claims import IdentityClaims, InvitationClaims, TokenRestrictions
from src.domain.privacy import hash_prefix, lookup_hash

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
IDENTITY_KEY_SALT = b"flows-invitation-identity"

REQUIRED_CLAIMS = ("jti", "tenant_id", "role", "scope", "restrictions", "lkh", "pii", "exp")


class TokenError(Exception):
    """Base class for token verification failures"""

    code = "TOKEN_INVALID"
    message = "Invitation token is invalid"

    def __init__(self, message: Optional[str] = None, invitation_id: Optional[UUID] = None):
        super().__init__(message or self.message)
        # Only set once the signature has been verified
        self.invitation_id = invitation_id


class TokenInvalid(TokenError):
    code = "TOKEN_INVALID"
    message = "Invitation token is invalid"


class TokenExpired(TokenError):
    code = "TOKEN_EXPIRED"
    message = "Invitation token has expired"


class TokenRevoked(TokenError):
    code = "TOKEN_REVOKED"
    message = "Invitation has been revoked"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    lookup_hash: str
    expires_at: datetime  # naive UTC, as stored


def _utc_clock() -> datetime:
    return datetime.now(UTC)


def _parse_uuid(value) -> Optional[UUID]:
    try:
        return UUID(value)
    except (TypeError, ValueError, AttributeError):
        return None


class TokenCodec:
    """
    Encodes and verifies invitation tokens.

    Args:
        signing_keys: key id -> HMAC secret; every listed key verifies
        active_key_id: key id used for new tokens
        encryption_key: deployment master secret for identity encryption
        issuer: `iss` claim written and required
        clock: returns the current time as an aware UTC datetime
    """

    def __init__(
        self,
        signing_keys: Dict[str, str],
        active_key_id: str,
        encryption_key: str,
        issuer: str,
        clock: Callable[[], datetime] = _utc_clock,
    ):
        if active_key_id not in signing_keys:
            raise ValueError(f"Active key id {active_key_id!r} has no signing key")
        if not encryption_key or len(encryption_key) < 16:
            raise ValueError("Identity encryption key is not configured or too short")
        self._signing_keys = dict(signing_keys)
        self._active_key_id = active_key_id
        self._master_key = encryption_key.encode("utf-8")
        self._issuer = issuer
        self._clock = clock
        self._ciphers: Dict[UUID, Fernet] = {}

    def now(self) -> datetime:
        """Current time on the codec clock, used for every token time check"""
        return self._clock()

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def issue(self, claims: InvitationClaims, ttl: timedelta) -> IssuedToken:
        """Encode `claims` and return the token with its storage metadata."""
        if ttl <= timedelta(0):
            raise ValueError("Token ttl must be positive")

        now = self._clock()
        exp = int((now + ttl).timestamp())
        identity_hash = lookup_hash(claims.identity.email)

        payload = {
            "iss": self._issuer,
            "jti": str(claims.invitation_id),
            "tenant_id": str(claims.tenant_id),
            "role": claims.role.value,
            "scope": list(claims.scope),
            "restrictions": claims.restrictions.model_dump(mode="json"),
            "lkh": identity_hash,
            "pii": self._encrypt_identity(claims.tenant_id, claims.identity),
            "iat": int(now.timestamp()),
            "exp": exp,
        }
        token = jwt.encode(
            payload,
            self._signing_keys[self._active_key_id],
            algorithm=ALGORITHM,
            headers={"kid": self._active_key_id},
        )
        return IssuedToken(
            token=token,
            lookup_hash=identity_hash,
            expires_at=datetime.fromtimestamp(exp, UTC).replace(tzinfo=None),
        )

    def encode(self, claims: InvitationClaims, ttl: timedelta) -> str:
        return self.issue(claims, ttl).token

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def verify_envelope(self, token: str) -> dict:
        """
        Check signature, then expiry. Returns the cleartext payload.

        Raises:
            TokenInvalid: malformed token, unknown key id, bad signature or issuer
            TokenExpired: signature valid but `exp` has passed
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise TokenInvalid()

        kid = header.get("kid")
        if header.get("alg") != ALGORITHM or kid not in self._signing_keys:
            raise TokenInvalid()

        try:
            payload = jwt.decode(
                token,
                self._signing_keys[kid],
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                options={"verify_exp": False},
            )
        except JWTError:
            raise TokenInvalid()

        if any(claim not in payload for claim in REQUIRED_CLAIMS):
            raise TokenInvalid()

        exp = payload["exp"]
        if not isinstance(exp, int):
            raise TokenInvalid()
        if int(self._clock().timestamp()) >= exp:
            raise TokenExpired(invitation_id=_parse_uuid(payload["jti"]))

        return payload

    async def decode(self, token: str, invitations: IInvitationRepository) -> InvitationClaims:
        """
        Fully verify `token` and return its claims.

        The backing record is found by invitation id and lookup hash; a record
        that no longer exists (retention sweep) is reported as revoked.
        """
        payload = self.verify_envelope(token)

        try:
            invitation_id = UUID(payload["jti"])
            tenant_id = UUID(payload["tenant_id"])
        except (TypeError, ValueError):
            raise TokenInvalid()

        record = await invitations.get_for_verification(invitation_id, payload["lkh"])
        if record is None:
            logger.info(f"Token for missing invitation lkh={hash_prefix(payload['lkh'])}")
            raise TokenRevoked()
        if record.tenant_id != tenant_id:
            raise TokenInvalid()
        if record.status == InvitationStatus.revoked:
            raise TokenRevoked()
        if record.status == InvitationStatus.expired:
            raise TokenExpired(invitation_id=record.id)

        identity = self._decrypt_identity(tenant_id, payload["pii"])

        try:
            return InvitationClaims(
                invitation_id=invitation_id,
                tenant_id=tenant_id,
                role=payload["role"],
                scope=payload["scope"],
                restrictions=TokenRestrictions.model_validate(payload["restrictions"]),
                identity=identity,
            )
        except ValueError:
            raise TokenInvalid()

    # ------------------------------------------------------------------
    # Identity encryption
    # ------------------------------------------------------------------

    def _cipher_for(self, tenant_id: UUID) -> Fernet:
        cipher = self._ciphers.get(tenant_id)
        if cipher is None:
            hkdf = HKDF(
                algorithm=hashes.SHA256(),
                length=32,
                salt=IDENTITY_KEY_SALT,
                info=b"tenant:" + tenant_id.bytes,
            )
            key = base64.urlsafe_b64encode(hkdf.derive(self._master_key))
            cipher = Fernet(key)
            self._ciphers[tenant_id] = cipher
        return cipher

    def _encrypt_identity(self, tenant_id: UUID, identity: IdentityClaims) -> str:
        plaintext = json.dumps(identity.model_dump(mode="json"), sort_keys=True)
        return self._cipher_for(tenant_id).encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def _decrypt_identity(self, tenant_id: UUID, ciphertext: str) -> IdentityClaims:
        if not isinstance(ciphertext, str):
            raise TokenInvalid()
        try:
            plaintext = self._cipher_for(tenant_id).decrypt(ciphertext.encode("utf-8"))
            return IdentityClaims.model_validate(json.loads(plaintext))
        except (InvalidToken, ValueError):
            raise TokenInvalid()
