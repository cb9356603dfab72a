"""
Course module records and module creation.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from qbank_sharing.core import context as contexts
from qbank_sharing.core.exceptions import NotFoundError
from qbank_sharing.models.orm import Course, CourseModule
from qbank_sharing.services.plugins import PluginTypeRegistry

logger = logging.getLogger(__name__)

DOWNLOAD_COURSE_CONTENT_ENABLED = 1
FORMAT_HTML = 1


@dataclass
class CourseModuleInfo:
    """Read-only view of a course module joined with its instance row, course and context."""
    id: int
    course: int
    module: int
    modname: str
    instance: int
    name: str
    section: int
    idnumber: Optional[str]
    visible: int
    context_id: int
    course_shortname: str
    intro: Optional[str] = None
    content: Optional[str] = None

    def get_formatted_name(self) -> str:
        return (self.name or "").strip()


@dataclass
class ModuleData:
    """Form data for a new module instance."""
    course: int
    modulename: str
    name: str
    section: int = 0
    visible: int = 1
    visibleoncoursepage: int = 1
    groupmode: int = 0
    groupingid: int = 0
    downloadcontent: int = DOWNLOAD_COURSE_CONTENT_ENABLED
    showdescription: int = 0
    intro: str = ""
    introformat: int = FORMAT_HTML
    type: Optional[str] = None


class ModInfo:
    def __init__(self, db: Session, registry: PluginTypeRegistry):
        self.db = db
        self.registry = registry

    def create(self, cm: CourseModule) -> CourseModuleInfo:
        """Build the info record for a course module row."""
        modname = self.registry.name_for_module_id(cm.module)
        if modname is None:
            raise NotFoundError(f"Unknown module id {cm.module}")
        instance = self.db.get(self.registry.instance_model(modname), cm.instance)
        if instance is None:
            raise NotFoundError(f"Missing {modname} instance {cm.instance}")
        course = self.db.get(Course, cm.course)
        ctx = contexts.module_context(self.db, cm.id)
        if ctx is None:
            raise NotFoundError(f"Course module {cm.id} has no context")
        return CourseModuleInfo(
            id=cm.id,
            course=cm.course,
            module=cm.module,
            modname=modname,
            instance=cm.instance,
            name=instance.name,
            section=cm.section,
            idnumber=cm.idnumber,
            visible=cm.visible,
            context_id=ctx.id,
            course_shortname=course.shortname if course else "",
            intro=getattr(instance, "intro", None),
            content=getattr(instance, "content", None),
        )

    def get_cm(self, cmid: int) -> CourseModuleInfo:
        cm = self.db.get(CourseModule, cmid)
        if cm is None or cm.deletioninprogress:
            raise NotFoundError(f"Course module {cmid} not found")
        return self.create(cm)

    def instances_of(self, course_id: int, modname: str) -> List[CourseModuleInfo]:
        stmt = (
            select(CourseModule)
            .where(
                CourseModule.course == course_id,
                CourseModule.module == self.registry.module_id(modname),
                CourseModule.deletioninprogress == 0,
            )
            .order_by(CourseModule.id)
        )
        return [self.create(cm) for cm in self.db.scalars(stmt).all()]

    def add_module_instance(self, data: ModuleData, course: Course) -> CourseModuleInfo:
        """Create the plugin instance, its course module and its module context."""
        model = self.registry.instance_model(data.modulename)
        fields = {"course": course.id, "name": data.name, "intro": data.intro, "introformat": data.introformat}
        if data.type is not None:
            fields["type"] = data.type
        instance = model(**fields)
        self.db.add(instance); self.db.flush()
        cm = CourseModule(
            course=course.id,
            module=self.registry.module_id(data.modulename),
            instance=instance.id,
            section=data.section,
            visible=data.visible,
            visibleoncoursepage=data.visibleoncoursepage,
            groupmode=data.groupmode,
            groupingid=data.groupingid,
            downloadcontent=data.downloadcontent,
            showdescription=data.showdescription,
            deletioninprogress=0,
        )
        self.db.add(cm); self.db.flush()
        contexts.module_context(self.db, cm.id, course)
        logger.info("Added %s instance %s (cmid %s) to course %s", data.modulename, instance.id, cm.id, course.id)
        return self.create(cm)
