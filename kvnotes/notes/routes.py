import logging
from datetime import datetime, timezone

from flask import Blueprint, abort, redirect, render_template, request, url_for
from marshmallow import ValidationError

from kvnotes.common.authz import admin_required
from kvnotes.notes.schemas import NoteIn
from kvnotes.notes.service import NoteStore
from kvnotes.store import get_store

bp = Blueprint("notes", __name__)
admin_bp = Blueprint("admin", __name__)
log = logging.getLogger("kvnotes.notes")

note_in = NoteIn()


def get_note_store() -> NoteStore:
    return NoteStore(get_store())


@bp.app_template_filter("ms_date")
def ms_date(value) -> str:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).strftime("%Y-%m-%d")


def _form_values():
    return {
        "title": request.form.get("title", ""),
        "content": request.form.get("content", ""),
    }


# --- Public ---

@bp.get("/")
def home():
    latest = get_note_store().latest()
    if latest is None:
        return render_template("empty.html")
    return redirect(url_for("notes.show_note", note_id=latest.id), code=302)


@bp.get("/<note_id>")
def show_note(note_id):
    notes = get_note_store()
    note = notes.get(note_id)
    if note is None:
        abort(404)
    return render_template(
        "note.html",
        note=note,
        previous_id=notes.previous_of(note_id),
        next_id=notes.next_of(note_id),
    )


# --- Admin ---

@admin_bp.get("/", strict_slashes=False)
@admin_required
def dashboard():
    return render_template("admin/dashboard.html", notes=get_note_store().list_all())


@admin_bp.get("/new")
@admin_required
def new_note_form():
    return render_template("admin/editor.html", note=None, form={}, errors={})


@admin_bp.post("/new")
@admin_required
def create_note():
    form = _form_values()
    try:
        data = note_in.load(form)
        note = get_note_store().create(data["title"], data["content"])
    except ValidationError as e:
        return render_template("admin/editor.html", note=None, form=form, errors=e.messages), 400

    log.info("note_created", extra={"note_id": note.id})
    return redirect(url_for("admin.dashboard"), code=302)


@admin_bp.get("/edit/<note_id>")
@admin_required
def edit_note_form(note_id):
    note = get_note_store().get(note_id)
    if note is None:
        abort(404)
    form = {"title": note.title, "content": note.content}
    return render_template("admin/editor.html", note=note, form=form, errors={})


@admin_bp.post("/edit/<note_id>")
@admin_required
def update_note(note_id):
    form = _form_values()
    notes = get_note_store()
    try:
        data = note_in.load(form)
        # upsert: un id inconnu crée la note
        note = notes.update(note_id, data["title"], data["content"])
    except ValidationError as e:
        return render_template(
            "admin/editor.html", note=notes.get(note_id), form=form, errors=e.messages
        ), 400

    log.info("note_updated", extra={"note_id": note.id})
    return redirect(url_for("admin.dashboard"), code=302)


@admin_bp.get("/delete/<note_id>")
@admin_required
def delete_note_confirm(note_id):
    note = get_note_store().get(note_id)
    if note is None:
        abort(404)
    return render_template("admin/delete.html", note=note)


@admin_bp.post("/delete/<note_id>")
@admin_required
def delete_note(note_id):
    if get_note_store().delete(note_id):
        log.info("note_deleted", extra={"note_id": note_id})
    else:
        log.debug("note_delete_missing", extra={"note_id": note_id})
    return redirect(url_for("admin.dashboard"), code=302)
