"""
Capability checks.

The acting user is always passed in explicitly as an :class:`Actor`; nothing
here reads a "current user" from ambient state.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from qbank_sharing.core import context as contexts
from qbank_sharing.core.exceptions import RequiredCapabilityError
from qbank_sharing.models.orm import Context, Course, Module, RoleAssignment, RoleCapability

logger = logging.getLogger(__name__)

# Capabilities granted to the built-in roles at install time.
EDITING_CAPABILITIES = (
    "moodle/course:manageactivities",
    "moodle/question:add",
    "moodle/question:editall",
    "moodle/question:useall",
    "moodle/question:viewall",
    "moodle/question:managecategory",
    "mod/qbank:addinstance",
    "mod/quiz:addinstance",
    "mod/quiz:manage",
)
DEFAULT_ROLES = {
    "manager": EDITING_CAPABILITIES,
    "editingteacher": EDITING_CAPABILITIES,
    "teacher": ("moodle/question:viewall", "moodle/question:useall"),
    "student": (),
}


@dataclass(frozen=True)
class Actor:
    """The user on whose behalf an operation runs."""
    user_id: int
    is_site_admin: bool = False


class AccessService:
    def __init__(self, db: Session):
        self.db = db

    def has_capability(self, actor: Optional[Actor], capability: str, ctx: Context) -> bool:
        if actor is None:
            return False
        if actor.is_site_admin:
            return True
        stmt = (
            select(RoleCapability.id)
            .join(RoleAssignment, RoleAssignment.roleid == RoleCapability.roleid)
            .where(
                RoleAssignment.userid == actor.user_id,
                RoleAssignment.contextid.in_(contexts.parent_context_ids(ctx)),
                RoleCapability.capability == capability,
                RoleCapability.permission > 0,
            )
            .limit(1)
        )
        return self.db.scalar(stmt) is not None

    def has_any_capability(self, actor: Optional[Actor], capabilities: Iterable[str], ctx: Context) -> bool:
        return any(self.has_capability(actor, cap, ctx) for cap in capabilities)

    def require_capability(self, actor: Optional[Actor], capability: str, ctx: Context) -> None:
        if not self.has_capability(actor, capability, ctx):
            raise RequiredCapabilityError(capability, ctx.id)

    def course_allowed_module(self, actor: Optional[Actor], course: Course, modname: str) -> bool:
        """Whether ``modname`` is enabled on the site and may be added to ``course`` by the actor."""
        module = self.db.scalar(select(Module).where(Module.name == modname))
        if module is None or not module.visible:
            return False
        return self.has_capability(actor, f"mod/{modname}:addinstance", contexts.course_context(self.db, course))
