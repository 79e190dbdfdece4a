#!/usr/bin/env python3
"""
FastAPI DUECh Web Application
Public dictionary browsing plus the editor-mode workflow for lexicographers
"""

from fastapi import FastAPI, HTTPException, Request, Form, Depends, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional, Dict, Any
from pathlib import Path
import logging
from urllib.parse import quote, urlencode

from duech.auth import (
    AuthenticationError, clear_session_cookie, set_session_cookie, user_manager
)
from duech.config import get_site_config
from duech.database_manager import close_database_manager
from duech.definitions import (
    DEFAULT_NEW_STATUS, GRAMMATICAL_CATEGORIES, LETTERS, PUBLISHED_STATUS,
    STATUS_OPTIONS, STATUS_VALUES, USAGE_STYLES, Meaning, SearchFilters, SessionUser, Word,
    resolve_user_id
)
from duech.editor_mode import AccessContext, EditorModeMiddleware, get_access_context
from duech.filter_cookie import (
    AdvancedSearchFilters, clear_filters, filters_changed, read_filters, write_filters
)
from duech.rate_limiting import apply_rate_limit, rate_limiter
from duech.repository import (
    UNSET, DictionaryRepository, DuplicateLemmaError, DuplicateUserError,
    InvalidWordError, WordNotFoundError, get_repository
)
from duech.search import (
    SearchValidationError, collect_metadata, dictionary_stats, letter_counts,
    paginate, parse_list_param, parse_search_request, search_words
)
from duech.word_of_the_day import WordOfTheDayError, get_word_of_the_day
from duech_web.dependencies import get_optional_session_user, require_admin, require_editor

logging.basicConfig(level=get_site_config().log_level.upper())
logger = logging.getLogger(__name__)

MAX_LEMMA_LENGTH = 100
PENDING_DEFINITION = "Definición pendiente"

BASE_DIR = Path(__file__).resolve().parent

app = FastAPI(title="DUECh", description="Diccionario de uso del español de Chile")
app.add_middleware(EditorModeMiddleware)

# Setup templates
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

# Mount static files
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")


@app.on_event("shutdown")
async def shutdown_event():
    close_database_manager()


@app.exception_handler(StarletteHTTPException)
async def api_error_handler(request: Request, exc: StarletteHTTPException):
    """API errors use the {"error": ...} envelope; pages keep the default handler"""
    if request.url.path.startswith("/api/"):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code,
                            headers=getattr(exc, "headers", None))
    return await http_exception_handler(request, exc)


def too_many_requests() -> JSONResponse:
    return JSONResponse({"error": "Too Many Requests"}, status_code=status.HTTP_429_TOO_MANY_REQUESTS)


def editor_session(request: Request, user: Optional[SessionUser]) -> bool:
    """Editorial data is only served in editor mode to users with an editor role"""
    return get_access_context(request).editor_mode and user is not None and user.is_editor


def known_user_id(repository: DictionaryRepository, raw_value: Any) -> Optional[int]:
    user_id = resolve_user_id(raw_value)
    if user_id is None or repository.get_user_by_id(user_id) is None:
        return None
    return user_id


async def read_json_body(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    return payload


def safe_redirect_target(target: Optional[str], access: AccessContext) -> str:
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return access.url_for("/")


def page_context(request: Request, user: Optional[SessionUser], **extra) -> Dict[str, Any]:
    access = get_access_context(request)
    context = {
        "access": access,
        "user": user,
        "editor_mode": access.editor_mode,
        "letters": LETTERS,
        "category_labels": GRAMMATICAL_CATEGORIES,
        "style_labels": USAGE_STYLES,
    }
    context.update(extra)
    return context


# ---------------------------------------------------------------------------
# JSON API
# ---------------------------------------------------------------------------

@app.get("/api/search")
async def api_search(request: Request,
                     current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    """Search entries; public requests only ever see published words"""
    if not apply_rate_limit(request, rate_limiter):
        return too_many_requests()

    try:
        search_request = parse_search_request(request.query_params)
    except SearchValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    editor = editor_session(request, current_user)
    filters = search_request.filters
    if not editor:
        filters.status = PUBLISHED_STATUS
        filters.assigned_to = []

    try:
        words = get_repository().list_words(status=filters.status or None)
    except Exception as e:
        logger.error(f"Error loading words for search: {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor")

    metadata = collect_metadata(words)
    if search_request.meta_only:
        return {"success": True, "data": {"metadata": metadata.to_dict()}}

    results = search_words(words, filters)
    page_items, pagination = paginate(results, search_request.page, search_request.limit)
    return {
        "success": True,
        "data": {
            "results": [result.to_dict(include_editorial=editor) for result in page_items],
            "metadata": metadata.to_dict(),
            "pagination": pagination.to_dict(),
        },
    }


@app.get("/api/metadata")
async def api_metadata(request: Request,
                       current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    editor = editor_session(request, current_user)
    try:
        words = get_repository().list_words(status=None if editor else PUBLISHED_STATUS)
    except Exception as e:
        logger.error(f"Error loading dictionary metadata: {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor")

    data = collect_metadata(words).to_dict()
    data["letters"] = letter_counts(words)
    data["stats"] = dictionary_stats(words)
    if editor:
        data["statusOptions"] = STATUS_OPTIONS
    return {"success": True, "data": data}


def normalize_status(value: Any) -> Optional[str]:
    """Known status, or None when absent or blank; ValueError for anything else"""
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    if value not in STATUS_VALUES:
        raise ValueError(f"Invalid status: {value}")
    return value


def requested_status(payload: Dict[str, Any]) -> Optional[str]:
    try:
        return normalize_status(payload.get("status"))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid status")


def _validated_lemma(lemma: str) -> str:
    lemma = (lemma or "").strip()
    if not lemma or len(lemma) > MAX_LEMMA_LENGTH:
        raise HTTPException(status_code=400, detail="Invalid lemma")
    return lemma


@app.get("/api/words/{lemma}")
async def api_get_word(lemma: str, request: Request,
                       current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    if not apply_rate_limit(request, rate_limiter):
        return too_many_requests()
    lemma = _validated_lemma(lemma)
    editor = editor_session(request, current_user)

    repository = get_repository()
    word = repository.get_word(lemma, include_drafts=editor)
    if not word:
        raise HTTPException(status_code=404, detail="Word not found")

    data = {"word": word.to_dict(include_editorial=editor), "letter": word.letter}
    if editor:
        data.update({
            "status": word.status,
            "assignedTo": word.assigned_to,
            "createdBy": word.created_by,
            "comments": [note.to_dict() for note in repository.list_notes(word.lemma)],
        })
    return {"success": True, "data": data}


@app.post("/api/words", status_code=201)
@app.post("/api/words/{lemma}", status_code=201)
async def api_create_word(request: Request, lemma: Optional[str] = None,
                          current_user: SessionUser = Depends(require_editor)):
    """Create an entry; the body lemma wins over the path segment"""
    if not apply_rate_limit(request, rate_limiter):
        return too_many_requests()
    payload = await read_json_body(request)
    repository = get_repository()

    if not isinstance(payload.get("lemma"), str) or not payload["lemma"].strip():
        payload["lemma"] = lemma or ""
    word = Word.from_dict(payload)
    if not word.meanings:
        word.meanings = [Meaning(number=1, meaning=PENDING_DEFINITION)]
    word.status = requested_status(payload) or DEFAULT_NEW_STATUS
    word.assigned_to = known_user_id(repository, payload.get("assignedTo"))

    try:
        created = repository.create_word(word, created_by=known_user_id(repository, current_user.id))
    except InvalidWordError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DuplicateLemmaError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating word '{word.lemma}': {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor")

    logger.info(f"User {current_user.email} created word '{created.lemma}'")
    return {"success": True, "data": {"lemma": created.lemma, "word": created.to_dict()}}


@app.put("/api/words/{lemma}")
async def api_update_word(lemma: str, request: Request,
                          current_user: SessionUser = Depends(require_editor)):
    """Update the entry, its status or assignee, and/or add an editorial comment"""
    lemma = _validated_lemma(lemma)
    payload = await read_json_body(request)
    repository = get_repository()

    existing = repository.get_word(lemma, include_drafts=True)
    if not existing:
        raise HTTPException(status_code=404, detail="Word not found")

    word_payload = payload.get("word") if isinstance(payload.get("word"), dict) else None
    status_value = requested_status(payload)
    has_status = status_value is not None
    has_assignee = "assignedTo" in payload
    comment = payload.get("comment")
    comment = comment.strip() if isinstance(comment, str) else ""

    if word_payload is None and not has_status and not has_assignee and not comment:
        raise HTTPException(status_code=400, detail="No changes provided")

    assigned_to = UNSET
    if has_assignee:
        assigned_to = resolve_user_id(payload["assignedTo"])
        if assigned_to is not None and repository.get_user_by_id(assigned_to) is None:
            raise HTTPException(status_code=400, detail="Unknown user")

    updated = existing
    try:
        if word_payload is not None or has_status or has_assignee:
            word = Word.from_dict(word_payload) if word_payload is not None else existing
            updated = repository.update_word(lemma, word, status=status_value if has_status else UNSET,
                                             assigned_to=assigned_to)
        note = None
        if comment:
            note = repository.add_note(updated.lemma, comment, known_user_id(repository, current_user.id))
    except WordNotFoundError:
        raise HTTPException(status_code=404, detail="Word not found")
    except DuplicateLemmaError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating word '{lemma}': {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor")

    logger.info(f"User {current_user.email} updated word '{updated.lemma}'")
    return {
        "success": True,
        "data": {
            "word": updated.to_dict(),
            "comment": note.to_dict() if note else None,
        },
    }


@app.delete("/api/words/{lemma}")
async def api_delete_word(lemma: str, current_user: SessionUser = Depends(require_editor)):
    lemma = _validated_lemma(lemma)
    try:
        get_repository().delete_word(lemma)
    except WordNotFoundError:
        raise HTTPException(status_code=404, detail="Word not found")
    except Exception as e:
        logger.error(f"Error deleting word '{lemma}': {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor")
    logger.info(f"User {current_user.email} deleted word '{lemma}'")
    return {"success": True}


@app.get("/api/word-of-the-day")
async def api_word_of_the_day():
    try:
        word = get_word_of_the_day(get_repository())
    except WordOfTheDayError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "data": {"word": word.to_dict(include_editorial=False), "letter": word.letter}}


@app.get("/api/random")
async def api_random_word():
    """Get a random published word"""
    word = get_repository().random_word()
    if not word:
        raise HTTPException(status_code=404, detail="No words found")
    return {"success": True, "data": {"word": word.to_dict(include_editorial=False), "letter": word.letter}}


def _user_summary(user) -> Dict[str, Any]:
    return {"id": user.id, "username": user.username, "email": user.email, "role": user.role}


@app.get("/api/users")
async def api_list_users(current_user: SessionUser = Depends(require_editor)):
    users = get_repository().list_users()
    return {"success": True, "data": [_user_summary(user) for user in users]}


@app.post("/api/users", status_code=201)
async def api_create_user(request: Request, current_user: SessionUser = Depends(require_admin)):
    payload = await read_json_body(request)
    try:
        user = user_manager.create_user(
            username=payload.get("username") or "",
            email=payload.get("email"),
            password=payload.get("password") or "",
            role=payload.get("role") or "lexicographer",
        )
    except AuthenticationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DuplicateUserError as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info(f"User {current_user.email} created user '{user.username}'")
    return {"success": True, "data": _user_summary(user)}


@app.get("/api/auth/me")
async def api_me(current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    return {"user": current_user.to_dict() if current_user else None}


@app.post("/api/auth/login")
async def api_login(request: Request):
    payload = await read_json_body(request)
    identifier = payload.get("email") or payload.get("username") or ""
    user = user_manager.authenticate(identifier, payload.get("password") or "")
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    response = JSONResponse({"success": True, "user": user.to_dict()})
    set_session_cookie(response, user)
    return response


@app.post("/api/auth/logout")
async def api_logout(request: Request):
    access = get_access_context(request)
    target = safe_redirect_target(request.query_params.get("redirect"), access)
    response = JSONResponse({"success": True, "redirectTo": target})
    clear_session_cookie(response)
    return response


# ---------------------------------------------------------------------------
# HTML pages
# ---------------------------------------------------------------------------

@app.get("/", response_class=HTMLResponse)
async def home(request: Request, current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    """Home page with the word of the day"""
    try:
        word = get_word_of_the_day(get_repository())
    except WordOfTheDayError as e:
        logger.warning(f"Word of the day unavailable: {e}")
        word = None
    return templates.TemplateResponse(request, "index.html", page_context(request, current_user, word=word))


_FILTER_PARAMS = ("q", "categories", "styles", "origins", "letters")


def _filters_from_params(params) -> AdvancedSearchFilters:
    return AdvancedSearchFilters(
        query=(params.get("q") or "").strip(),
        selectedCategories=parse_list_param(params.get("categories")),
        selectedStyles=parse_list_param(params.get("styles")),
        selectedOrigins=parse_list_param(params.get("origins")),
        selectedLetters=parse_list_param(params.get("letters")),
    )


def search_page_url(access: AccessContext, query_params: Dict[str, str], page: int) -> str:
    """Link to another page of the same search, keeping every active filter"""
    link_params = {"q": query_params.get("q", "")}
    link_params.update({
        name: value for name, value in query_params.items()
        if value and name not in ("q", "page")
    })
    link_params["page"] = page
    return f"{access.url_for('/buscar')}?{urlencode(link_params)}"


@app.get("/buscar", response_class=HTMLResponse)
async def search_page(request: Request,
                      current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    """Search page; without explicit filters the last saved filters are restored"""
    params = request.query_params
    saved = read_filters(request)
    clear = params.get("clear") == "1"
    explicit = any(name in params for name in _FILTER_PARAMS)

    if clear:
        current = AdvancedSearchFilters()
    elif explicit:
        current = _filters_from_params(params)
    else:
        current = saved

    editor = editor_session(request, current_user)
    context = page_context(
        request, current_user,
        filters=current,
        results=[],
        pagination=None,
        metadata=None,
        error=None,
        status_options=STATUS_OPTIONS,
        selected_status=params.get("status", ""),
    )
    query_params = {
        "q": current.query,
        "categories": ",".join(current.selectedCategories),
        "styles": ",".join(current.selectedStyles),
        "origins": ",".join(current.selectedOrigins),
        "letters": ",".join(current.selectedLetters),
        "page": params.get("page", ""),
        "limit": params.get("limit", ""),
    }
    if editor:
        query_params["status"] = params.get("status", "")
        query_params["assignedTo"] = params.get("assignedTo", "")
    access = get_access_context(request)
    context["page_url"] = lambda page: search_page_url(access, query_params, page)

    status_code = 200
    try:
        search_request = parse_search_request(query_params)
        filters: SearchFilters = search_request.filters
        if not editor:
            filters.status = PUBLISHED_STATUS
        words = get_repository().list_words(status=filters.status or None)
        results = search_words(words, filters) if not current.is_empty or editor else []
        page_items, pagination = paginate(results, search_request.page, search_request.limit)
        context.update(results=page_items, pagination=pagination, metadata=collect_metadata(words))
    except SearchValidationError as e:
        context["error"] = str(e)
        status_code = 400

    response = templates.TemplateResponse(request, "search.html", context, status_code=status_code)
    if clear:
        clear_filters(response)
    elif explicit and (filters_changed(saved, current) or saved.query != current.query):
        write_filters(response, current)
    return response


def render_word_page(request: Request, current_user: Optional[SessionUser], word: Word,
                     error: Optional[str] = None, status_code: int = 200):
    editor = editor_session(request, current_user)
    repository = get_repository()
    context = page_context(
        request, current_user,
        word=word,
        lemma=word.lemma,
        notes=repository.list_notes(word.lemma) if editor else [],
        users=repository.list_users() if editor else [],
        status_options=STATUS_OPTIONS,
        error=error,
    )
    return templates.TemplateResponse(request, "word.html", context, status_code=status_code)


def word_page_url(request: Request, lemma: str) -> str:
    return get_access_context(request).url_for(f"/palabra/{quote(lemma, safe='')}")


@app.get("/palabra/{lemma}", response_class=HTMLResponse)
async def word_page(lemma: str, request: Request,
                    current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    editor = editor_session(request, current_user)
    word = get_repository().get_word(lemma.strip(), include_drafts=editor)
    if not word:
        return templates.TemplateResponse(
            request, "word.html", page_context(request, current_user, word=None, lemma=lemma),
            status_code=404,
        )
    return render_word_page(request, current_user, word)


def _editable_word(lemma: str) -> Word:
    word = get_repository().get_word(_validated_lemma(lemma), include_drafts=True)
    if not word:
        raise HTTPException(status_code=404, detail="Word not found")
    return word


@app.post("/palabra/{lemma}/comentario")
async def word_comment_form(lemma: str, request: Request, comment: str = Form(""),
                            current_user: SessionUser = Depends(require_editor)):
    """Add an editorial comment from the entry page"""
    word = _editable_word(lemma)
    comment = comment.strip()
    if not comment:
        return render_word_page(request, current_user, word,
                                error="El comentario no puede estar vacío", status_code=400)

    repository = get_repository()
    repository.add_note(word.lemma, comment, known_user_id(repository, current_user.id))
    logger.info(f"User {current_user.email} commented on '{word.lemma}'")
    return RedirectResponse(url=word_page_url(request, word.lemma), status_code=status.HTTP_303_SEE_OTHER)


@app.post("/palabra/{lemma}/estado")
async def word_status_form(lemma: str, request: Request, status_value: str = Form("", alias="status"),
                           assignedTo: str = Form(""),
                           current_user: SessionUser = Depends(require_editor)):
    """Change status and assignee from the entry page; a blank status keeps the current one"""
    word = _editable_word(lemma)
    repository = get_repository()
    try:
        new_status = normalize_status(status_value)
    except ValueError:
        return render_word_page(request, current_user, word, error="Estado desconocido", status_code=400)

    assigned_to = resolve_user_id(assignedTo)
    if assigned_to is not None and repository.get_user_by_id(assigned_to) is None:
        return render_word_page(request, current_user, word, error="Usuario desconocido", status_code=400)

    updated = repository.update_word(word.lemma, word, status=new_status or UNSET, assigned_to=assigned_to)
    logger.info(f"User {current_user.email} set '{updated.lemma}' to {updated.status}")
    return RedirectResponse(url=word_page_url(request, updated.lemma), status_code=status.HTTP_303_SEE_OTHER)


def _new_word_context(request: Request, current_user: SessionUser, form: Dict[str, str],
                      error: Optional[str] = None) -> Dict[str, Any]:
    return page_context(request, current_user, form=form, error=error, status_options=STATUS_OPTIONS,
                        default_status=DEFAULT_NEW_STATUS)


_NEW_WORD_FIELDS = ("lemma", "meaning", "categories", "styles", "origin", "status")


@app.get("/nuevo", response_class=HTMLResponse)
async def new_word_page(request: Request, current_user: SessionUser = Depends(require_editor)):
    form = {name: "" for name in _NEW_WORD_FIELDS}
    return templates.TemplateResponse(request, "new_word.html", _new_word_context(request, current_user, form))


@app.post("/nuevo")
async def new_word_form(request: Request, lemma: str = Form(""), meaning: str = Form(""),
                        categories: str = Form(""), styles: str = Form(""), origin: str = Form(""),
                        status_value: str = Form("", alias="status"),
                        current_user: SessionUser = Depends(require_editor)):
    """Create an entry with a single meaning from the editor form"""
    form = {"lemma": lemma, "meaning": meaning, "categories": categories, "styles": styles,
            "origin": origin, "status": status_value}

    def form_error(message: str, code: int):
        return templates.TemplateResponse(
            request, "new_word.html", _new_word_context(request, current_user, form, error=message),
            status_code=code,
        )

    try:
        word_status = normalize_status(status_value) or DEFAULT_NEW_STATUS
    except ValueError:
        return form_error("Estado desconocido", 400)

    repository = get_repository()
    word = Word.from_dict({
        "lemma": lemma,
        "values": [{
            "number": 1,
            "meaning": meaning.strip() or PENDING_DEFINITION,
            "categories": parse_list_param(categories),
            "styles": parse_list_param(styles),
            "origin": origin.strip() or None,
        }],
    })
    word.status = word_status

    try:
        created = repository.create_word(word, created_by=known_user_id(repository, current_user.id))
    except InvalidWordError:
        return form_error("El lema es obligatorio", 400)
    except DuplicateLemmaError as e:
        return form_error(str(e), 409)

    logger.info(f"User {current_user.email} created word '{created.lemma}'")
    return RedirectResponse(url=word_page_url(request, created.lemma), status_code=status.HTTP_303_SEE_OTHER)


@app.get("/acerca", response_class=HTMLResponse)
async def about_page(request: Request,
                     current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    return templates.TemplateResponse(request, "about.html", page_context(request, current_user))


@app.get("/recursos", response_class=HTMLResponse)
async def resources_page(request: Request,
                         current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    return templates.TemplateResponse(request, "resources.html", page_context(request, current_user))


@app.get("/login", response_class=HTMLResponse)
async def login_form(request: Request,
                     current_user: Optional[SessionUser] = Depends(get_optional_session_user)):
    """Login form"""
    access = get_access_context(request)
    redirect_to = safe_redirect_target(request.query_params.get("redirectTo"), access)
    if current_user and current_user.is_editor:
        return RedirectResponse(url=redirect_to, status_code=status.HTTP_302_FOUND)
    return templates.TemplateResponse(
        request, "login.html", page_context(request, None, redirect_to=redirect_to, error=None, email="")
    )


@app.post("/login")
async def login(request: Request, email: str = Form(...), password: str = Form(...),
                redirectTo: str = Form("")):
    """Process user login"""
    access = get_access_context(request)
    redirect_to = safe_redirect_target(redirectTo, access)
    user = user_manager.authenticate(email, password)

    if not user:
        return templates.TemplateResponse(
            request, "login.html",
            page_context(request, None, redirect_to=redirect_to, email=email,
                         error="Credenciales inválidas"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    response = RedirectResponse(url=redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, user)
    return response


@app.get("/logout")
async def logout(request: Request):
    """User logout"""
    access = get_access_context(request)
    response = RedirectResponse(url=access.url_for("/"), status_code=status.HTTP_302_FOUND)
    clear_session_cookie(response)
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
