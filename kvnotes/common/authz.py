from functools import wraps

from flask import current_app, g, redirect, request

from kvnotes.auth.service import SessionManager
from kvnotes.store import get_store


def get_session_manager() -> SessionManager:
    return SessionManager(get_store(), ttl=current_app.config["SESSION_TTL_SECONDS"])


def session_token():
    """Jeton de session lu dans les cookies déjà parsés par Werkzeug."""
    return request.cookies.get(current_app.config["ADMIN_COOKIE_NAME"])


def admin_required(fn):
    """
    Ex: @bp.get("/")
        @admin_required
    Redirige vers la page de login si la session est absente/expirée.
    """
    @wraps(fn)
    def inner(*args, **kwargs):
        token = session_token()
        decision = get_session_manager().authorize(token)
        g.admin_session = "granted" if decision.allowed else "denied"
        if not decision.allowed:
            return redirect(decision.login_url, code=302)
        return fn(*args, **kwargs)
    return inner
