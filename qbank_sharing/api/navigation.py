from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import List, Optional
from qbank_sharing.api.deps import get_helper
from qbank_sharing.core.access import Actor
from qbank_sharing.core.auth import get_actor
from qbank_sharing.models.orm import Course
from qbank_sharing.services.navigation import (
    BeforeNavbarPrepareNodes, BreadcrumbNode, NodeType, Page, PageContext, PageCourse, PageModule, default_hooks,
)
from qbank_sharing.services.question_bank_helper import QuestionBankHelper
from qbank_sharing.core import context as contexts

router = APIRouter()
hooks = default_hooks()


class NodeOut(BaseModel):
    text: str
    action: Optional[str] = None


@router.get("/breadcrumbs", response_model=List[NodeOut])
def module_breadcrumbs(cmid: int, actor: Actor = Depends(get_actor), helper: QuestionBankHelper = Depends(get_helper)):
    """Navbar of a module page after hook callbacks have run."""
    cm = helper.modinfo.get_cm(cmid)
    course = helper.db.get(Course, cm.course)
    ctx = contexts.instance_by_id(helper.db, cm.context_id)
    page = Page(
        course=PageCourse(id=course.id),
        context=PageContext(id=ctx.id, contextlevel=ctx.contextlevel, instanceid=ctx.instanceid),
        cm=PageModule(id=cm.id, modname=cm.modname, sectionid=cm.section),
    )
    items = [
        BreadcrumbNode(text=course.shortname, action=f"/course/view?id={course.id}", key=course.id, type=NodeType.COURSE),
        BreadcrumbNode(text=f"Section {cm.section}", action=f"/course/section?id={cm.section}", key=cm.section, type=NodeType.SECTION),
        BreadcrumbNode(text=cm.name, action=f"/mod/{cm.modname}/view?id={cm.id}", key=cm.id, type=NodeType.ACTIVITY),
    ]
    hook = hooks.dispatch(BeforeNavbarPrepareNodes(items=items, page=page))
    return [NodeOut(text=n.text, action=n.action) for n in hook.items]
