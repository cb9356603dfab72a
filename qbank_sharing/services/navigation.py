"""
Breadcrumb navigation hook.

The theme dispatches :class:`BeforeNavbarPrepareNodes` before it renders the
navbar. Question bank modules are never shown on the course page, so their
section breadcrumb is swapped for a link to the course's bank list.
"""
import enum
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, List, Optional, Type

from qbank_sharing.core.context import ContextLevel
from qbank_sharing.core.strings import get_string
from qbank_sharing.services.question_bank_helper import url_for_bank_list

logger = logging.getLogger(__name__)


class NodeType(int, enum.Enum):
    ROOTNODE = 0
    SYSTEM = 1
    CATEGORY = 10
    COURSE = 20
    SECTION = 30
    ACTIVITY = 40
    RESOURCE = 50
    CUSTOM = 60


@dataclass
class BreadcrumbNode:
    text: str
    action: Optional[str] = None
    key: Any = None
    type: NodeType = NodeType.CUSTOM


@dataclass(frozen=True)
class PageContext:
    id: int
    contextlevel: int
    instanceid: int


@dataclass(frozen=True)
class PageModule:
    id: int
    modname: str
    sectionid: int


@dataclass(frozen=True)
class PageCourse:
    id: int


@dataclass(frozen=True)
class Page:
    """The page being rendered."""
    course: PageCourse
    context: Optional[PageContext] = None
    cm: Optional[PageModule] = None


@dataclass
class BeforeNavbarPrepareNodes:
    """Hook payload: callbacks may replace ``items``; ``page`` is read-only."""
    items: List[BreadcrumbNode]
    page: Page


def before_prepare_nodes_for_boost(hook: BeforeNavbarPrepareNodes) -> None:
    page = hook.page
    if page.context is None or page.context.contextlevel != ContextLevel.MODULE:
        return
    if page.cm is None or page.cm.modname != "qbank":
        return

    newitems = []
    for item in hook.items:
        if item.key == page.cm.sectionid and item.type == NodeType.SECTION:
            item = BreadcrumbNode(
                text=get_string("questionbank_plural", "core_question"),
                action=url_for_bank_list(page.course.id),
            )
        newitems.append(item)
    hook.items = newitems


class HookManager:
    """Calls registered callbacks for a hook class in registration order."""

    def __init__(self):
        self._callbacks: DefaultDict[Type, List[Callable[[Any], None]]] = defaultdict(list)

    def register(self, hook_class: Type, callback: Callable[[Any], None]) -> None:
        self._callbacks[hook_class].append(callback)

    def dispatch(self, hook: Any) -> Any:
        for callback in self._callbacks[type(hook)]:
            logger.debug("Dispatching %s to %s", type(hook).__name__, getattr(callback, "__name__", callback))
            callback(hook)
        return hook


def default_hooks() -> HookManager:
    manager = HookManager()
    manager.register(BeforeNavbarPrepareNodes, before_prepare_nodes_for_boost)
    return manager
