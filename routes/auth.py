"""Login, registration and the signed-in user accessor."""

from __future__ import annotations

from typing import Dict, Optional

from flask import (
    Blueprint,
    current_app,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from common.services.auth_service import home_path_for_role


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

SESSION_TOKEN_KEY = "access_token"


def _components() -> dict:
    return current_app.extensions["market_components"]


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


def current_user() -> Dict:
    """Profile of the signed-in user, or ``{}``; cached for the request."""
    if "current_user" not in g:
        auth = _components()["auth"]
        user_id = auth.decode_token(session.get(SESSION_TOKEN_KEY) or _bearer_token())
        g.current_user = auth.get_profile(user_id) if user_id else {}
    return g.current_user


def _start_session(profile: Dict) -> None:
    session[SESSION_TOKEN_KEY] = _components()["auth"].issue_token(profile)
    g.pop("current_user", None)


@auth_bp.get("/login")
def login_form():
    return render_template("auth/login.html")


@auth_bp.post("/login")
def login_submit():
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    auth = _components()["auth"]
    try:
        profile = auth.sign_in_with_password(email=email, password=password)
    except ValueError as exc:
        return render_template("auth/login.html", error_message=str(exc), email=email), 401

    _start_session(profile)
    role = auth.get_role(profile["id"])
    return redirect(home_path_for_role(role))


@auth_bp.post("/token")
def issue_token():
    """Password grant for API callers that send ``Authorization: Bearer``."""
    payload = request.get_json(silent=True) or {}
    auth = _components()["auth"]
    try:
        profile = auth.sign_in_with_password(email=payload.get("email", ""), password=payload.get("password", ""))
    except ValueError as exc:
        return jsonify({"status": "error", "message": str(exc)}), 401
    return jsonify({"status": "ok", "access_token": auth.issue_token(profile), "role": profile["role"]})


@auth_bp.get("/register")
def register_form():
    return render_template("auth/register.html")


@auth_bp.post("/register")
def register_submit():
    email = request.form.get("email", "").strip()
    name = request.form.get("name", "").strip()
    password = request.form.get("password", "")
    try:
        profile = _components()["auth"].sign_up(email=email, password=password, name=name, role="client")
    except ValueError as exc:
        return render_template("auth/register.html", error_message=str(exc), email=email, name=name), 400

    _start_session(profile)
    return redirect(url_for("client.catalog"))


@auth_bp.get("/logout")
def logout():
    session.clear()
    return redirect(url_for("auth.login_form"))
