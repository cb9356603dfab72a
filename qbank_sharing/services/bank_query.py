"""
Composable query over course modules that act as question banks.

A :class:`BankQuery` joins ``course_modules`` to the instance table of every
requested activity type and then applies predicate objects, each of which
knows how to narrow or order a SQLAlchemy ``Select``.
"""
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence

from sqlalchemy import Select, String, and_, case, cast, false, func, literal, or_, select
from sqlalchemy.orm import aliased

from qbank_sharing.core.context import ContextLevel
from qbank_sharing.models.orm import Context, CourseModule, QuestionCategory
from qbank_sharing.services.plugins import PluginTypeRegistry

# Separates id, name and context id inside one aggregated category entry.
CATEGORY_DELIMITER = "<->"
# Separates category entries in the aggregated column.
CATEGORY_SEPARATOR = ","
PREVIEW = "preview"


class Predicate(Protocol):
    def apply(self, stmt: Select) -> Select: ...


@dataclass(frozen=True)
class InCourses:
    course_ids: Sequence[int]

    def apply(self, stmt: Select) -> Select:
        return stmt.where(CourseModule.course.in_(list(self.course_ids)))


@dataclass(frozen=True)
class NotInCourses:
    course_ids: Sequence[int]

    def apply(self, stmt: Select) -> Select:
        return stmt.where(CourseModule.course.not_in(list(self.course_ids)))


@dataclass(frozen=True)
class PreferredFirst:
    bank_id: int

    def apply(self, stmt: Select) -> Select:
        return stmt.order_by(None).order_by(
            case((CourseModule.id == self.bank_id, 0), else_=1).asc(),
            CourseModule.id.desc(),
        )


class WithCategories:
    """Aggregate each bank's non-top question categories into a ``cats`` column."""

    def apply(self, stmt: Select) -> Select:
        entry = (
            cast(QuestionCategory.id, String)
            .concat(literal(CATEGORY_DELIMITER))
            .concat(QuestionCategory.name)
            .concat(literal(CATEGORY_DELIMITER))
            .concat(cast(QuestionCategory.contextid, String))
        )
        return (
            stmt.add_columns(func.aggregate_strings(entry, CATEGORY_SEPARATOR).label("cats"))
            .outerjoin(
                Context,
                and_(Context.instanceid == CourseModule.id, Context.contextlevel == int(ContextLevel.MODULE)),
            )
            .outerjoin(
                QuestionCategory,
                and_(QuestionCategory.contextid == Context.id, QuestionCategory.parent != 0),
            )
        )


@dataclass
class BankQuery:
    registry: PluginTypeRegistry
    modnames: Sequence[str]
    predicates: List[Predicate] = field(default_factory=list)

    def where(self, predicate: Predicate) -> "BankQuery":
        self.predicates.append(predicate)
        return self

    def statement(self) -> Select:
        stmt = select(CourseModule).where(CourseModule.deletioninprogress == 0)
        if not self.modnames:
            return stmt.where(false())
        matched = []
        for key, modname in enumerate(self.modnames):
            model = self.registry.instance_model(modname)
            plugin = aliased(model, name=f"p{key}")
            onclause = and_(plugin.id == CourseModule.instance, CourseModule.module == self.registry.module_id(modname))
            if modname == "qbank":
                onclause = and_(onclause, plugin.type != PREVIEW)
            stmt = stmt.outerjoin(plugin, onclause)
            matched.append(plugin.id.is_not(None))
        stmt = stmt.where(or_(*matched)).group_by(CourseModule.id).order_by(CourseModule.id)
        for predicate in self.predicates:
            stmt = predicate.apply(stmt)
        return stmt
