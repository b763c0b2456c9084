from dataclasses import dataclass, field
from typing import Optional


@dataclass
class AuthUser:
    """A signed-in identity as reported by the identity provider."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    # Provider tokens stay server-side; to_json() leaves them out.
    id_token: Optional[str] = field(default=None, repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_payload(cls, payload):
        return cls(
            uid=payload["localId"],
            email=payload.get("email"),
            display_name=payload.get("displayName") or None,
            id_token=payload.get("idToken"),
            refresh_token=payload.get("refreshToken"),
        )

    def to_json(self):
        return {"id": self.uid, "email": self.email, "name": self.display_name}
