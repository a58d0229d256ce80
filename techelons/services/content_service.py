"""
Site content service — the editable public content document.

The document is a single JSON object (banner, about, council, past events,
workshop configuration...). Admin edits never mutate the loaded document in
place: every helper below returns a new structure and the result is written
back as a whole.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.models.models import SiteContent
from techelons.validators import ContentEditData

logger = logging.getLogger(__name__)


# ── Immutable helpers ─────────────────────────────────────────────────────────

def replace_in_list(items: Sequence[Any], index: int, value: Any) -> List[Any]:
    if not 0 <= index < len(items):
        raise IndexError(f"List index {index} out of range")
    return [value if i == index else item for i, item in enumerate(items)]


def remove_from_list(items: Sequence[Any], index: int) -> List[Any]:
    if not 0 <= index < len(items):
        raise IndexError(f"List index {index} out of range")
    return [item for i, item in enumerate(items) if i != index]


def set_in(document: Any, path: Sequence[Any], value: Any) -> Any:
    """
    Copy of ``document`` with the value at ``path`` replaced.
    Only the containers along the path are copied; missing dict keys are
    created.
    """
    if not path:
        return value
    head, rest = path[0], path[1:]
    if isinstance(document, list):
        if not isinstance(head, int):
            raise KeyError(f"List index expected, got {head!r}")
        return replace_in_list(document, head, set_in(document[head], rest, value))
    if document is not None and not isinstance(document, dict):
        raise KeyError(f"Cannot descend into {type(document).__name__} at {head!r}")
    current = dict(document or {})
    current[head] = set_in(current.get(head), rest, value)
    return current


def get_in(document: Any, path: Sequence[Any]) -> Any:
    for key in path:
        if isinstance(document, list):
            if not isinstance(key, int):
                raise KeyError(f"List index expected, got {key!r}")
            document = document[key]
        elif document is None or isinstance(document, dict):
            document = (document or {}).get(key)
        else:
            raise KeyError(f"Cannot descend into {type(document).__name__} at {key!r}")
    return document


def apply_edit(document: Dict[str, Any], edit: ContentEditData) -> Dict[str, Any]:
    """New document with one admin edit applied."""
    if edit.index is None:
        return set_in(document, edit.path, edit.value)

    items = get_in(document, edit.path)
    if not isinstance(items, list):
        raise KeyError(f"No list at {'.'.join(map(str, edit.path))}")
    if edit.remove:
        updated = remove_from_list(items, edit.index)
    else:
        updated = replace_in_list(items, edit.index, edit.value)
    return set_in(document, edit.path, updated)


# ── Persistence ───────────────────────────────────────────────────────────────

async def _get_row(session: AsyncSession) -> Optional[SiteContent]:
    result = await session.execute(select(SiteContent).order_by(SiteContent.id).limit(1))
    return result.scalar_one_or_none()


async def get_site_content(session: AsyncSession) -> Optional[Dict[str, Any]]:
    row = await _get_row(session)
    return dict(row.document) if row else None


async def replace_site_content(session: AsyncSession, document: Dict[str, Any]) -> Dict[str, Any]:
    row = await _get_row(session)
    if row is None:
        row = SiteContent(document=document)
        session.add(row)
    else:
        row.document = document
    await session.flush()
    logger.info("Site content replaced (%d sections)", len(document))
    return document


async def edit_site_content(session: AsyncSession, edit: ContentEditData) -> Dict[str, Any]:
    current = await get_site_content(session) or {}
    return await replace_site_content(session, apply_edit(current, edit))


async def get_workshop_config(session: AsyncSession) -> Dict[str, Any]:
    content = await get_site_content(session) or {}
    return dict(content.get("workshop") or {})
