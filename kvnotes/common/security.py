from flask import request

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' https: data:; "
        "script-src 'none'"
    ),
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


def register_security_headers(app, env: str):
    @app.after_request
    def set_security_headers(resp):
        for name, value in SECURITY_HEADERS.items():
            resp.headers[name] = value

        # HSTS uniquement si HTTPS (prod / reverse-proxy)
        if (env == "production" or app.config.get("ENFORCE_HTTPS")) and (
            request.is_secure or request.headers.get("X-Forwarded-Proto", "") == "https"
        ):
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"

        return resp
