import logging

from flask import Blueprint, current_app, g, make_response, redirect, render_template, request
from marshmallow import ValidationError

from kvnotes.auth.schemas import LoginSchema
from kvnotes.auth.service import compare_secret
from kvnotes.common.authz import get_session_manager, session_token
from kvnotes.extensions import limiter

bp = Blueprint("auth", __name__)
log = logging.getLogger("kvnotes.auth")

login_schema = LoginSchema()


def _set_session_cookie(resp, token: str):
    cfg = current_app.config
    resp.set_cookie(
        cfg["ADMIN_COOKIE_NAME"],
        token,
        max_age=cfg["SESSION_TTL_SECONDS"],
        path="/",
        secure=cfg["ADMIN_COOKIE_SECURE"],
        httponly=True,
        samesite="Strict",
    )


def _clear_session_cookie(resp):
    cfg = current_app.config
    resp.set_cookie(
        cfg["ADMIN_COOKIE_NAME"],
        "",
        max_age=0,
        path="/",
        secure=cfg["ADMIN_COOKIE_SECURE"],
        httponly=True,
        samesite="Strict",
    )


@bp.get("/login")
def login_form():
    return render_template("admin/login.html")


@bp.post("/login")
@limiter.limit(lambda: current_app.config.get("RATELIMIT_AUTH_LOGIN", "5/minute"))
def login():
    try:
        data = login_schema.load(request.form.to_dict())
    except ValidationError:
        data = {"password": ""}

    expected = current_app.config.get("ADMIN_PASSWORD") or ""
    # mot de passe admin vide: aucune connexion possible
    if not compare_secret(data["password"], expected) or not expected:
        g.admin_session = "rejected"
        log.warning("login_failed", extra={"remote_addr": request.remote_addr})
        return render_template("admin/login.html", error="Invalid password"), 401

    token = get_session_manager().issue()
    g.admin_session = "issued"
    log.info("login_succeeded")
    resp = make_response(redirect("/admin", code=302))
    _set_session_cookie(resp, token)
    return resp


@bp.route("/logout", methods=["GET", "POST"])
def logout():
    # pas de contrôle d'auth: révoquer un jeton inconnu est un no-op
    get_session_manager().revoke(session_token())
    g.admin_session = "revoked"
    resp = make_response(redirect("/", code=302))
    _clear_session_cookie(resp)
    return resp
