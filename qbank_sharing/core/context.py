"""
Context tree helpers.

Every permission check and every question category is scoped to a context.
Contexts form a tree (system > category > course > module) recorded in the
``path`` column as ``/<id>/<id>/...``.
"""
import enum
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from qbank_sharing.models.orm import Context, Course

logger = logging.getLogger(__name__)


class ContextLevel(int, enum.Enum):
    SYSTEM = 10
    COURSECAT = 40
    COURSE = 50
    MODULE = 70


def instance_by_id(db: Session, context_id) -> Optional[Context]:
    """Return the context with this id, or None when it is missing or malformed."""
    try:
        context_id = int(context_id)
    except (TypeError, ValueError):
        return None
    if context_id <= 0:
        return None
    return db.get(Context, context_id)


def instance(db: Session, level: ContextLevel, instanceid: int) -> Optional[Context]:
    return db.scalar(select(Context).where(Context.contextlevel == int(level), Context.instanceid == instanceid))


def system_context(db: Session) -> Context:
    ctx = instance(db, ContextLevel.SYSTEM, 0)
    if ctx is None:
        ctx = create(db, ContextLevel.SYSTEM, 0, None)
    return ctx


def create(db: Session, level: ContextLevel, instanceid: int, parent: Optional[Context]) -> Context:
    """Insert a context below ``parent`` and fill in its path and depth."""
    ctx = Context(contextlevel=int(level), instanceid=instanceid, path=None, depth=0)
    db.add(ctx); db.flush()
    if parent is None:
        ctx.path, ctx.depth = f"/{ctx.id}", 1
    else:
        ctx.path, ctx.depth = f"{parent.path}/{ctx.id}", parent.depth + 1
    db.flush()
    return ctx


def coursecat_context(db: Session, category_id: int) -> Context:
    ctx = instance(db, ContextLevel.COURSECAT, category_id)
    if ctx is None:
        ctx = create(db, ContextLevel.COURSECAT, category_id, system_context(db))
    return ctx


def course_context(db: Session, course: Course) -> Context:
    ctx = instance(db, ContextLevel.COURSE, course.id)
    if ctx is None:
        parent = coursecat_context(db, course.category) if course.category else system_context(db)
        ctx = create(db, ContextLevel.COURSE, course.id, parent)
    return ctx


def module_context(db: Session, cmid: int, course: Optional[Course] = None) -> Optional[Context]:
    ctx = instance(db, ContextLevel.MODULE, cmid)
    if ctx is None and course is not None:
        ctx = create(db, ContextLevel.MODULE, cmid, course_context(db, course))
    return ctx


def parent_context_ids(ctx: Context) -> List[int]:
    """Ids of the context and all of its ancestors, nearest first."""
    if not ctx.path:
        return [ctx.id]
    return [int(part) for part in reversed(ctx.path.strip("/").split("/")) if part]
