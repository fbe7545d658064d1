"""
BookLog web front end.

Flask application rendering the navigation shell and the book/chapter
screens. All data comes from the external book API on every request;
nothing is cached between pages.

Usage:
    python explorer.py serve --port 5000
"""
from typing import Optional
import logging

import httpx
from flask import Blueprint, Flask, current_app, g, redirect, render_template, request

from booklog.async_client import AsyncBookLogClient
from booklog.config import Config
from booklog.controllers import (
    DELETE_PROMPT,
    BookDetailController,
    BookListController,
    RecordForm,
    book_form,
    chapter_form,
)
from booklog.parse import ALL_TAGS
from booklog.render import format_chapter_date, render_markdown
from booklog.routes import (
    BOOK_DETAIL,
    BOOK_EDIT,
    BOOK_LIST,
    BOOK_NEW,
    CHAPTER_EDIT,
    CHAPTER_NEW,
    ROUTES,
    path_for,
)
from booklog.theme import THEME_KEY, ThemeStore

logger = logging.getLogger(__name__)

COLOR_SCHEME_HINT = "Sec-CH-Prefers-Color-Scheme"

bp = Blueprint("booklog", __name__)


def create_app(config=None, transport: Optional[httpx.AsyncBaseTransport] = None) -> Flask:
    """
    Create and configure the Flask app.
    
    Args:
        config: Settings object (defaults to Config)
        transport: httpx transport for API calls; tests pass a MockTransport
    """
    app = Flask(__name__)
    app.config.from_object(config or Config)
    app.extensions["booklog_transport"] = transport
    
    app.jinja_env.filters["markdown"] = render_markdown
    app.jinja_env.filters["chapter_date"] = format_chapter_date
    
    app.register_blueprint(bp)
    
    logger.info(f"BookLog front end using API at {app.config['API_BASE_URL']}")
    return app


def api_client() -> AsyncBookLogClient:
    return AsyncBookLogClient(
        current_app.config["API_BASE_URL"],
        timeout=current_app.config["REQUEST_TIMEOUT"],
        transport=current_app.extensions.get("booklog_transport")
    )


class Navigator:
    """Records where a controller asked to go."""
    
    def __init__(self):
        self.location: Optional[str] = None
    
    def __call__(self, path: str):
        self.location = path


def _local_path(target: Optional[str]) -> str:
    """Only same-site paths are valid redirect targets."""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return path_for(BOOK_LIST)


@bp.before_app_request
def load_theme():
    storage = {}
    if THEME_KEY in request.cookies:
        storage[THEME_KEY] = request.cookies[THEME_KEY]
    g.theme = ThemeStore.from_environment(storage, request.headers.get(COLOR_SCHEME_HINT))


@bp.after_app_request
def persist_theme(response):
    theme = g.get("theme")
    if theme is not None and request.cookies.get(THEME_KEY) != theme.storage[THEME_KEY]:
        response.set_cookie(
            THEME_KEY,
            theme.storage[THEME_KEY],
            max_age=current_app.config["THEME_COOKIE_MAX_AGE"],
            samesite="Lax"
        )
    response.headers["Accept-CH"] = COLOR_SCHEME_HINT
    response.vary.add(COLOR_SCHEME_HINT)
    return response


@bp.app_context_processor
def shell_context():
    return {
        "theme": g.get("theme"),
        "current_path": request.full_path.rstrip("?"),
    }


@bp.route("/theme", methods=["POST"])
def toggle_theme():
    g.theme.toggle()
    return redirect(_local_path(request.form.get("next")))


@bp.route(ROUTES[BOOK_LIST], endpoint=BOOK_LIST)
async def book_list():
    async with api_client() as api:
        view = BookListController(api)
        await view.apply_filters(request.args.get("title", ""), request.args.get("tag", ALL_TAGS))
    return render_template("book_list.html", view=view)


@bp.route(ROUTES[BOOK_DETAIL], endpoint=BOOK_DETAIL)
async def book_detail(book_id):
    async with api_client() as api:
        view = BookDetailController(api, book_id)
        await view.activate()
    return render_template("book_detail.html", view=view, alert=None)


@bp.route("/books/<book_id>/delete", methods=["GET", "POST"])
async def book_delete(book_id):
    """Confirmation page for GET; the answer is POSTed back."""
    if request.method == "GET":
        return render_template("confirm_delete.html", book_id=book_id, prompt=DELETE_PROMPT)
    
    navigator = Navigator()
    alerts = []
    async with api_client() as api:
        view = BookDetailController(api, book_id)
        deleted = await view.delete(
            confirm=lambda _prompt: request.form.get("confirm") == "yes",
            alert=alerts.append,
            navigate=navigator
        )
        if deleted:
            return redirect(navigator.location)
        if not alerts:
            return redirect(path_for(BOOK_DETAIL, book_id=book_id))
        
        # Failure is reported as a blocking alert over the detail page
        await view.activate()
    return render_template("book_detail.html", view=view, alert=alerts[-1])


async def _run_form(form: RecordForm, template: str, **context):
    if request.method == "GET":
        await form.activate()
        return render_template(template, form=form, **context)
    
    if request.form.get("action") == "preview":
        form.update(request.form.to_dict())
        return render_template(template, form=form, **context)
    
    navigator = Navigator()
    if await form.submit(request.form.to_dict(), navigator):
        return redirect(navigator.location)
    return render_template(template, form=form, **context)


@bp.route(ROUTES[BOOK_NEW], endpoint=BOOK_NEW, methods=["GET", "POST"])
@bp.route(ROUTES[BOOK_EDIT], endpoint=BOOK_EDIT, methods=["GET", "POST"])
async def book_edit(book_id=None):
    async with api_client() as api:
        return await _run_form(book_form(api, book_id), "book_form.html", book_id=book_id)


@bp.route(ROUTES[CHAPTER_NEW], endpoint=CHAPTER_NEW, methods=["GET", "POST"])
@bp.route(ROUTES[CHAPTER_EDIT], endpoint=CHAPTER_EDIT, methods=["GET", "POST"])
async def chapter_edit(book_id, chapter_id=None):
    async with api_client() as api:
        return await _run_form(
            chapter_form(api, book_id, chapter_id),
            "chapter_form.html",
            book_id=book_id,
            chapter_id=chapter_id
        )
