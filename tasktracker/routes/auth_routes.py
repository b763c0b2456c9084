import secrets

from flask import Blueprint, current_app, jsonify, redirect, request, session
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, jwt_required

from tasktracker.errors import AuthError, ValidationError

auth_bp = Blueprint("auth", __name__)
google_bp = Blueprint("google_auth", __name__)


def _gateway():
    # One gateway per request: each holds a single signed-in session.
    return current_app.extensions["auth_gateway_factory"]()


def _token_response(user, status=200):
    token = create_access_token(
        identity=user.uid,
        additional_claims={"email": user.email, "name": user.display_name},
    )
    return jsonify(access_token=token, user=user.to_json()), status


def _text(payload, field):
    value = payload.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value


def _credentials(payload):
    email = _text(payload, "email").strip().lower()
    password = _text(payload, "password")
    if not email or not password:
        raise ValidationError("Email and password are required")
    return email, password


@auth_bp.post("/register")
def register():
    payload = request.get_json(silent=True) or {}
    email, password = _credentials(payload)
    name = _text(payload, "name").strip()
    if not name:
        raise ValidationError("Name is required")
    user = _gateway().sign_up(email, password, name)
    current_app.logger.info("Registered user %s", user.uid)
    return _token_response(user, 201)


@auth_bp.post("/login")
def login():
    payload = request.get_json(silent=True) or {}
    email, password = _credentials(payload)
    user = _gateway().sign_in(email, password)
    return _token_response(user)


@auth_bp.post("/logout")
@jwt_required()
def logout():
    # Access tokens are stateless; the client discards its token.
    return jsonify(status="signed_out"), 200


@auth_bp.post("/reset-password")
def reset_password():
    payload = request.get_json(silent=True) or {}
    email = _text(payload, "email").strip().lower()
    if not email:
        raise ValidationError("Please enter your email address first")
    _gateway().request_password_reset(email)
    return jsonify(status="sent"), 200


@auth_bp.get("/me")
@jwt_required()
def me():
    claims = get_jwt()
    return jsonify(user={"id": get_jwt_identity(), "email": claims.get("email"), "name": claims.get("name")}), 200


@google_bp.route("/auth/google")
def google_login():
    """Initiate Google OAuth 2.0 Authorization Code flow.

    Redirects the user to Google's OAuth consent screen.
    """
    gateway = _gateway()
    if not gateway.google_configured:
        return jsonify(error="Google OAuth not configured"), 500

    state = secrets.token_urlsafe(32)
    session["oauth_state"] = state
    return redirect(gateway.google_authorization_url(state))


@google_bp.route("/auth/google/callback")
def google_callback():
    """Handle Google's OAuth 2.0 callback.

    Checks the state round-trip, then signs in to the identity provider with
    the authorization code and returns an access token.
    """
    error = request.args.get("error")
    if error:
        raise AuthError(error, f"Google OAuth error: {error}")

    state = request.args.get("state")
    if not state or state != session.pop("oauth_state", None):
        return jsonify(error="Invalid OAuth state"), 400

    code = request.args.get("code")
    if not code:
        return jsonify(error="Missing authorization code"), 400

    user = _gateway().sign_in_with_google(code)
    current_app.logger.info("Google sign-in for %s", user.uid)
    return _token_response(user)
