"""
Composer API Endpoints.

Paste conversion, toolbar formatting and post previews.
"""

from typing import Any, Literal, get_args

from fastapi import APIRouter, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

from forumlite.core.config import settings
from forumlite.modules.composer import ComposerError, convert_paste, parse_mentions, render_post
from forumlite.modules.composer import editor
from forumlite.modules.composer.editor import EditResult

router = APIRouter()


# ==================== Schemas ====================


class SelectionMixin(BaseModel):
    """Buffer content with the active selection."""

    content: str = ""
    selection_start: int = Field(0, ge=0)
    selection_end: int = Field(0, ge=0)


class PasteRequest(SelectionMixin):
    """Clipboard payload to splice into the composer."""

    html: str = ""
    text: str = ""


class FormatRequest(SelectionMixin):
    """Toolbar action applied to the composer buffer."""

    action: str
    value: str | None = None


class ContentRequest(BaseModel):
    """Post markdown."""

    content: str


FormatAction = Literal[
    "list", "numbered_list", "emoji", "link", "image", "video", "table",
    "align", "color", "font_size",
]


def _edit_response(result: EditResult) -> dict[str, Any]:
    return {
        "content": result.content,
        "selection_start": result.selection_start,
        "selection_end": result.selection_end,
    }


def _require_value(request: FormatRequest) -> str:
    if not request.value or not request.value.strip():
        raise HTTPException(status_code=400, detail=f"Action '{request.action}' requires a value")
    return request.value


def _check_size(*payloads: str) -> None:
    size = sum(len(p.encode("utf-8")) for p in payloads)
    if size > settings.composer_max_paste_bytes:
        raise HTTPException(status_code=413, detail="Payload too large")


# ==================== Paste ====================


@router.post("/paste")
async def paste(request: PasteRequest) -> dict[str, Any]:
    """Convert clipboard HTML to markdown and splice it over the selection."""
    _check_size(request.html, request.text, request.content)

    result = convert_paste(request.html, request.text)
    edit = editor.splice(
        request.content,
        request.selection_start,
        request.selection_end,
        result.markdown,
    )

    return {
        "markdown": result.markdown,
        "used_fallback": result.used_fallback,
        **_edit_response(edit),
    }


# ==================== Formatting ====================


@router.post("/format")
async def format_content(request: FormatRequest) -> dict[str, Any]:
    """Apply a toolbar action to the composer buffer."""
    _check_size(request.content)

    args = (request.content, request.selection_start, request.selection_end)
    action = request.action

    try:
        if action in editor.FORMATS:
            result = editor.apply_format(action, *args)
        elif action == "list":
            result = editor.insert_list(*args, marker=request.value or "-")
        elif action == "numbered_list":
            result = editor.insert_list(*args, marker="1.")
        elif action == "emoji":
            result = editor.insert_emoji(*args, _require_value(request))
        elif action == "link":
            result = editor.insert_link(*args, _require_value(request))
        elif action == "image":
            result = editor.insert_image(*args, _require_value(request))
        elif action == "video":
            result = editor.insert_video(*args, _require_value(request))
        elif action == "table":
            result = editor.insert_table(*args)
        elif action == "align":
            result = editor.align(*args, _require_value(request))
        elif action == "color":
            result = editor.color(*args, _require_value(request))
        elif action == "font_size":
            result = editor.font_size(*args, _require_value(request))
        else:
            raise ComposerError(f"Unknown format action: {action}")
    except ComposerError as e:
        logger.info(f"Rejected format action {action!r}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return _edit_response(result)


@router.get("/format/actions")
async def get_format_actions() -> dict[str, Any]:
    """List supported toolbar actions."""
    return {
        "presets": sorted(editor.FORMATS),
        "actions": list(get_args(FormatAction)),
        "alignments": list(editor.ALIGNMENTS),
    }


# ==================== Preview ====================


@router.post("/preview")
async def preview(request: ContentRequest) -> dict[str, Any]:
    """Render post markdown to sanitized HTML."""
    _check_size(request.content)

    return {
        "html": render_post(request.content),
        "mentions": parse_mentions(request.content),
    }


@router.post("/mentions")
async def mentions(request: ContentRequest) -> dict[str, Any]:
    """Extract mentioned usernames from post markdown."""
    _check_size(request.content)

    return {"mentions": parse_mentions(request.content)}
