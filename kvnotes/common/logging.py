# kvnotes/common/logging.py
import logging, sys, time, uuid
from pythonjsonlogger import jsonlogger
from flask import g, request


def setup_json_logging(app):
    level = logging.DEBUG if app.debug else logging.INFO
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    fmt = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s "
        "%(request_id)s %(method)s %(path)s %(status)s %(latency_ms)s "
        "%(note_id)s %(admin_session)s"
    )
    handler.setFormatter(fmt)
    root.addHandler(handler)


def get_request_id() -> str:
    return getattr(g, "request_id", "-")


def register_request_logging(app):
    @app.before_request
    def _assign_request_id_and_start_timer():
        # X-Request-Id entrant (borné) ou généré
        rid = (request.headers.get("X-Request-Id") or "")[:64] or uuid.uuid4().hex
        g.request_id = rid
        g._start_time = time.perf_counter()

    @app.after_request
    def _log_request(resp):
        started = getattr(g, "_start_time", None)
        latency = int((time.perf_counter() - started) * 1000) if started is not None else -1

        resp.headers.setdefault("X-Request-Id", get_request_id())

        logging.getLogger("kvnotes.request").info(
            "http_request",
            extra={
                "request_id": get_request_id(),
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "latency_ms": latency,
                "note_id": (request.view_args or {}).get("note_id"),
                # granted | denied | issued | rejected | revoked
                "admin_session": getattr(g, "admin_session", "-"),
            },
        )
        return resp

