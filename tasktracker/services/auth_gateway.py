"""Identity provider adapter.

Talks to the Firebase Authentication REST API (Identity Toolkit) for
email/password accounts and password resets, and to Google's OAuth 2.0
endpoints for the interactive Google sign-in.
"""
import logging
import threading
from urllib.parse import urlencode

import requests

from tasktracker.errors import AuthError, TransportError
from tasktracker.models.user_model import AuthUser

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{method}"

GOOGLE_AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"


class AuthGateway:
    """One client session against the identity provider.

    Tracks the user signed in through this gateway and notifies auth-state
    subscribers whenever that changes.
    """

    def __init__(
        self,
        api_key,
        google_client_id=None,
        google_client_secret=None,
        google_redirect_uri=None,
        timeout=10,
        session=None,
    ):
        self.api_key = api_key
        self.google_client_id = google_client_id
        self.google_client_secret = google_client_secret
        self.google_redirect_uri = google_redirect_uri
        self.timeout = timeout
        self.session = session or requests.Session()
        self.current_user = None
        self._listeners = []
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config["FIREBASE_API_KEY"],
            google_client_id=config.get("GOOGLE_CLIENT_ID"),
            google_client_secret=config.get("GOOGLE_CLIENT_SECRET"),
            google_redirect_uri=config.get("GOOGLE_REDIRECT_URI"),
            timeout=config.get("AUTH_HTTP_TIMEOUT", 10),
        )

    @property
    def google_configured(self):
        return bool(self.google_client_id and self.google_client_secret)

    # --- HTTP plumbing ---

    def _post(self, url, *, params=None, json=None, data=None):
        try:
            resp = self.session.post(url, params=params, json=json, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Identity provider unreachable: %s", exc)
            raise TransportError(f"Identity provider unreachable: {exc}") from exc

        if resp.status_code >= 500:
            raise TransportError(f"Identity provider returned {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError:
            raise TransportError("Identity provider returned a non-JSON response") from None
        if resp.status_code >= 400:
            raise AuthError(*_error_reason(payload))
        return payload

    def _call(self, method, body):
        return self._post(
            IDENTITY_TOOLKIT_URL.format(method=method),
            params={"key": self.api_key},
            json=body,
        )

    # --- auth state ---

    def _set_user(self, user):
        with self._lock:
            self.current_user = user
            listeners = list(self._listeners)
        for callback in listeners:
            callback(user)

    def subscribe_to_auth_state(self, callback):
        """Call ``callback(user_or_none)`` now and on every sign-in/out.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._listeners.append(callback)
            user = self.current_user
        callback(user)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    # --- operations ---

    def sign_up(self, email, password, display_name):
        payload = self._call(
            "signUp", {"email": email, "password": password, "returnSecureToken": True}
        )
        profile = self._call(
            "update",
            {"idToken": payload["idToken"], "displayName": display_name, "returnSecureToken": True},
        )
        payload.update({k: v for k, v in profile.items() if k in ("displayName", "idToken", "refreshToken")})
        user = AuthUser.from_payload(payload)
        logger.info("Signed up %s", user.uid)
        self._set_user(user)
        return user

    def sign_in(self, email, password):
        payload = self._call(
            "signInWithPassword", {"email": email, "password": password, "returnSecureToken": True}
        )
        user = AuthUser.from_payload(payload)
        self._set_user(user)
        return user

    def google_authorization_url(self, state):
        """Consent-screen URL that starts the Google sign-in flow."""
        if not self.google_configured:
            raise AuthError("GOOGLE_NOT_CONFIGURED", "Google OAuth not configured")
        params = {
            "client_id": self.google_client_id,
            "redirect_uri": self.google_redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "include_granted_scopes": "true",
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_ENDPOINT}?{urlencode(params)}"

    def sign_in_with_google(self, code):
        """Finish the Google flow: trade the authorization code for an ID
        token, then sign in to the identity provider with it."""
        if not self.google_configured:
            raise AuthError("GOOGLE_NOT_CONFIGURED", "Google OAuth not configured")
        tokens = self._post(
            GOOGLE_TOKEN_ENDPOINT,
            data={
                "code": code,
                "client_id": self.google_client_id,
                "client_secret": self.google_client_secret,
                "redirect_uri": self.google_redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        google_id_token = tokens.get("id_token")
        if not google_id_token:
            raise AuthError("MISSING_ID_TOKEN", "Missing ID token from Google")

        payload = self._call(
            "signInWithIdp",
            {
                "postBody": urlencode({"id_token": google_id_token, "providerId": "google.com"}),
                "requestUri": self.google_redirect_uri,
                "returnIdpCredential": True,
                "returnSecureToken": True,
            },
        )
        user = AuthUser.from_payload(payload)
        self._set_user(user)
        return user

    def sign_out(self):
        self._set_user(None)

    def request_password_reset(self, email):
        self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})


def _error_reason(payload):
    """Return ``(reason, message)`` from a provider error body.

    Identity Toolkit: {"error": {"message": "WEAK_PASSWORD : Password should be ..."}}
    Google OAuth:     {"error": "invalid_grant", "error_description": "..."}
    """
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        message = error.get("message") or "UNKNOWN"
        return message.split(" : ")[0], message
    if isinstance(error, str):
        return error, payload.get("error_description") or error
    return "UNKNOWN", "Authentication failed"
