"""
Question bank discovery, formatting and creation.

Banks are course modules whose activity type publishes its questions for
reuse (shared) or keeps them to itself (private). ``qbank`` modules also
have a subtype: ``standard`` banks are created by users, while exactly one
``system`` bank per course and one ``preview`` bank per site are created by
the platform on demand.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.datastructures import URL

from qbank_sharing.core import context as contexts
from qbank_sharing.core.access import AccessService, Actor
from qbank_sharing.core.config import get_settings
from qbank_sharing.core.context import ContextLevel
from qbank_sharing.core.exceptions import InvalidBankTypeError, InvalidContextLevelError, ModuleDisabledError, NotFoundError
from qbank_sharing.core.strings import get_string
from qbank_sharing.models.orm import Course, CourseModule, Qbank, UserPreference
from qbank_sharing.services.bank_query import (
    CATEGORY_DELIMITER,
    CATEGORY_SEPARATOR,
    BankQuery,
    InCourses,
    NotInCourses,
    PreferredFirst,
    WithCategories,
)
from qbank_sharing.services.modinfo import (
    DOWNLOAD_COURSE_CONTENT_ENABLED, FORMAT_HTML, CourseModuleInfo, ModInfo, ModuleData,
)
from qbank_sharing.services.plugins import PluginType, PluginTypeRegistry

logger = logging.getLogger(__name__)

# qbank subtypes
STANDARD = "standard"
SYSTEM = "system"
PREVIEW = "preview"
SHARED_TYPES = (STANDARD, SYSTEM, PREVIEW)

# User preference holding recently viewed bank context ids, most recent first.
RECENTLY_VIEWED = "recently_viewed_open_banks"

BANK_LIST_PATH = "/question/banks"


@dataclass
class CategoryDescriptor:
    id: int
    name: str
    contextid: int
    enabled: str = "disabled"


@dataclass
class BankDescriptor:
    name: str
    modid: int
    contextid: int
    coursenamebankname: str
    cminfo: CourseModuleInfo
    questioncategories: List[CategoryDescriptor] = field(default_factory=list)


def url_for_bank_list(course_id: int, create_default: bool = False) -> str:
    """URL of the page listing the banks of a course."""
    url = URL(BANK_LIST_PATH).include_query_params(courseid=course_id)
    if create_default:
        url = url.include_query_params(createdefault=1)
    return str(url)


class QuestionBankHelper:
    def __init__(self, db: Session, registry: PluginTypeRegistry, access: Optional[AccessService] = None):
        self.db = db
        self.registry = registry
        self.access = access or AccessService(db)
        self.modinfo = ModInfo(db, registry)

    # ---- plugin types

    def list_shareable_plugin_types(self) -> List[str]:
        return self.registry.shareable_types()

    def list_private_plugin_types(self) -> List[str]:
        return self.registry.private_types()

    # ---- listing

    def list_shareable_instances(self, actor: Optional[Actor] = None, include_course_ids: Sequence[int] = (),
                                 exclude_course_ids: Sequence[int] = (), required_capabilities: Sequence[str] = (),
                                 include_categories: bool = False, preferred_bank_id: int = 0) -> List[BankDescriptor]:
        return self.list_bank_instances(PluginType.SHARED, actor, include_course_ids, exclude_course_ids,
                                        include_categories, preferred_bank_id, required_capabilities)

    def list_private_instances(self, actor: Optional[Actor] = None, include_course_ids: Sequence[int] = (),
                               exclude_course_ids: Sequence[int] = (), required_capabilities: Sequence[str] = (),
                               include_categories: bool = False, preferred_bank_id: int = 0) -> List[BankDescriptor]:
        return self.list_bank_instances(PluginType.PRIVATE, actor, include_course_ids, exclude_course_ids,
                                        include_categories, preferred_bank_id, required_capabilities)

    def list_bank_instances(self, type: str, actor: Optional[Actor] = None, include_course_ids: Sequence[int] = (),
                            exclude_course_ids: Sequence[int] = (), include_categories: bool = False,
                            preferred_bank_id: int = 0,
                            required_capabilities: Sequence[str] = ()) -> List[BankDescriptor]:
        """
        Bank modules of every activity type of ``type``.

        Empty filters are unconstrained. When ``required_capabilities`` is given
        the actor must hold at least one of them on each bank's context, banks
        failing that are left out. ``preferred_bank_id`` is returned first when
        the other filters let it through.
        """
        query = BankQuery(self.registry, self.registry.types_of(type))
        if include_categories:
            query.where(WithCategories())
        if exclude_course_ids:
            query.where(NotInCourses(exclude_course_ids))
        if include_course_ids:
            query.where(InCourses(include_course_ids))
        if preferred_bank_id:
            query.where(PreferredFirst(preferred_bank_id))

        banks = []
        for row in self.db.execute(query.statement()).all():
            cm = row[0]
            cats = row[1] if include_categories else None
            if required_capabilities:
                ctx = contexts.module_context(self.db, cm.id)
                if ctx is None or not self.access.has_any_capability(actor, required_capabilities, ctx):
                    logger.debug("Skipping bank %s: actor lacks %s", cm.id, list(required_capabilities))
                    continue
            banks.append(self.format_bank(cm, preferred_bank_id, cats))
        return banks

    def format_bank(self, cm, preferred_bank_id: int = 0, cats: Optional[str] = None) -> BankDescriptor:
        """Descriptor for a course module row or info record, decoding aggregated categories."""
        cminfo = cm if isinstance(cm, CourseModuleInfo) else self.modinfo.create(cm)
        enabled = "enabled" if cminfo.id == preferred_bank_id else "disabled"
        categories = []
        for entry in cats.split(CATEGORY_SEPARATOR) if cats else []:
            catid, rest = entry.split(CATEGORY_DELIMITER, 1)
            name, contextid = rest.rsplit(CATEGORY_DELIMITER, 1)
            categories.append(CategoryDescriptor(id=int(catid), name=name, contextid=int(contextid), enabled=enabled))
        name = cminfo.get_formatted_name()
        return BankDescriptor(
            name=name,
            modid=cminfo.id,
            contextid=cminfo.context_id,
            coursenamebankname=f"{cminfo.course_shortname} - {name}",
            cminfo=cminfo,
            questioncategories=categories,
        )

    # ---- recently viewed

    def _preference(self, user_id: int) -> Optional[UserPreference]:
        return self.db.scalar(select(UserPreference).where(
            UserPreference.userid == user_id, UserPreference.name == RECENTLY_VIEWED))

    def _store_preference(self, user_id: int, value: str) -> None:
        pref = self._preference(user_id)
        if pref is None:
            self.db.add(UserPreference(userid=user_id, name=RECENTLY_VIEWED, value=value))
        else:
            pref.value = value
        self.db.flush()

    def get_recently_viewed(self, user_id: int, exclude_course_id: int = 0) -> List[BankDescriptor]:
        """
        Banks the user viewed recently, most recent first.

        Stored ids that no longer resolve to a context are dropped and the
        preference is rewritten without them.
        """
        pref = self._preference(user_id)
        contextids = [c for c in pref.value.split(",") if c] if pref and pref.value else []
        if not contextids:
            return []

        valid, banks = [], []
        for contextid in contextids:
            ctx = contexts.instance_by_id(self.db, contextid)
            if ctx is None:
                continue
            if ctx.contextlevel != ContextLevel.MODULE:
                raise InvalidContextLevelError(ctx.contextlevel)
            try:
                cminfo = self.modinfo.get_cm(ctx.instanceid)
            except NotFoundError:
                continue
            valid.append(contextid)
            if exclude_course_id and exclude_course_id == cminfo.course:
                continue
            banks.append(self.format_bank(cminfo))

        if len(valid) != len(contextids):
            logger.info("Pruning %d stale recently viewed banks for user %s", len(contextids) - len(valid), user_id)
            self._store_preference(user_id, ",".join(valid))
        return banks

    def add_recently_viewed(self, user_id: int, context_id: int) -> List[str]:
        """
        Put ``context_id`` at the front of the user's recently viewed banks.

        Only the context of an existing course module is accepted.
        """
        ctx = contexts.instance_by_id(self.db, context_id)
        if ctx is None:
            raise NotFoundError(f"Context {context_id} not found")
        if ctx.contextlevel != ContextLevel.MODULE:
            raise InvalidContextLevelError(ctx.contextlevel)
        self.modinfo.get_cm(ctx.instanceid)

        pref = self._preference(user_id)
        current = [c for c in pref.value.split(",") if c] if pref and pref.value else []
        limit = get_settings().RECENTLY_VIEWED_LIMIT
        stored = ([str(context_id)] + [c for c in current if c != str(context_id)])[:limit]
        self._store_preference(user_id, ",".join(stored))
        return stored

    # ---- singleton banks

    def _qbank_ids_of_type_in_course(self, course: Course, subtype: str) -> List[int]:
        if subtype not in SHARED_TYPES:
            raise InvalidBankTypeError(subtype)
        stmt = (
            select(CourseModule.id)
            .join(Qbank, Qbank.id == CourseModule.instance)
            .where(
                CourseModule.module == self.registry.module_id("qbank"),
                CourseModule.course == course.id,
                CourseModule.deletioninprogress == 0,
                Qbank.type == subtype,
            )
            .order_by(CourseModule.id)
        )
        return list(self.db.scalars(stmt).all())

    def _singleton_bank(self, course: Course, subtype: str) -> Optional[CourseModuleInfo]:
        ids = self._qbank_ids_of_type_in_course(course, subtype)
        # There should only ever be one of these.
        return self.modinfo.get_cm(ids[0]) if ids else None

    def site_course(self) -> Course:
        site = self.db.get(Course, get_settings().SITE_ID)
        if site is None:
            raise NotFoundError("Site course is not installed")
        return site

    def get_or_create_system_bank(self, course: Course, create_if_missing: bool = False) -> Optional[CourseModuleInfo]:
        bank = self._singleton_bank(course, SYSTEM)
        if bank is None and create_if_missing:
            bank = self.create_default_instance(None, course, get_string("systembank", "mod_qbank"), SYSTEM)
        return bank

    def get_or_create_preview_bank(self, create_if_missing: bool = False) -> Optional[CourseModuleInfo]:
        site = self.site_course()
        bank = self._singleton_bank(site, PREVIEW)
        if bank is None and create_if_missing:
            bank = self.create_default_instance(None, site, get_string("previewbank", "mod_qbank"), PREVIEW)
        return bank

    def create_default_instance(self, actor: Optional[Actor], course: Course, name: str,
                                type: str = STANDARD) -> CourseModuleInfo:
        """
        Create a qbank module on ``course`` with default settings.

        ``system`` and ``preview`` banks are returned as-is when they already
        exist, and preview banks always live on the site course. Standard banks
        need ``moodle/course:manageactivities`` and the qbank module being
        allowed in the course.
        """
        if type not in SHARED_TYPES:
            raise InvalidBankTypeError(type)

        if type == PREVIEW:
            existing = self.get_or_create_preview_bank()
            if existing is not None:
                return existing
            course = self.site_course()

        if type == SYSTEM:
            existing = self.get_or_create_system_bank(course)
            if existing is not None:
                return existing

        if type == STANDARD:
            self.access.require_capability(actor, "moodle/course:manageactivities",
                                           contexts.course_context(self.db, course))
            if not self.access.course_allowed_module(actor, course, "qbank"):
                raise ModuleDisabledError("qbank")

        data = ModuleData(
            course=course.id,
            modulename="qbank",
            name=name,
            section=0,
            visible=0,
            visibleoncoursepage=0,
            groupmode=course.groupmode,
            groupingid=course.defaultgroupingid,
            downloadcontent=DOWNLOAD_COURSE_CONTENT_ENABLED,
            showdescription=0 if type == STANDARD else 1,
            type=type,
        )
        if type == SYSTEM:
            # System banks carry a fixed description.
            data.intro = get_string("systembankdescription", "mod_qbank")
            data.introformat = FORMAT_HTML
        cminfo = self.modinfo.add_module_instance(data, course)
        logger.info("Created %s question bank %s in course %s", type, cminfo.id, course.id)
        return cminfo
