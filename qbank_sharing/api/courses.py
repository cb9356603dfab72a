from fastapi import APIRouter, Depends
from pydantic import BaseModel, constr
from typing import List, Optional
from qbank_sharing.api.deps import get_helper
from qbank_sharing.api.schemas import BankOut, ModuleOut
from qbank_sharing.core import context as contexts
from qbank_sharing.core.access import Actor
from qbank_sharing.core.auth import get_actor
from qbank_sharing.core.exceptions import NotFoundError
from qbank_sharing.core.strings import get_string
from qbank_sharing.models.orm import Course
from qbank_sharing.services.question_bank_helper import STANDARD, QuestionBankHelper

router = APIRouter()
question_router = APIRouter()

VIEW_CAPABILITIES = ("moodle/question:viewall", "moodle/question:viewmine")


def _course(helper: QuestionBankHelper, course_id: int) -> Course:
    course = helper.db.get(Course, course_id)
    if course is None:
        raise NotFoundError(f"Course {course_id} not found")
    return course


class BankCreate(BaseModel):
    name: constr(min_length=1, max_length=1333)


@router.post("/{course_id}/banks", response_model=ModuleOut, status_code=201)
def create_bank(course_id: int, payload: BankCreate, actor: Actor = Depends(get_actor),
                helper: QuestionBankHelper = Depends(get_helper)):
    bank = helper.create_default_instance(actor, _course(helper, course_id), payload.name, STANDARD)
    helper.db.commit()
    return ModuleOut.from_info(bank)


@router.get("/{course_id}/banks/system", response_model=Optional[ModuleOut])
def system_bank(course_id: int, create: bool = False, actor: Actor = Depends(get_actor),
                helper: QuestionBankHelper = Depends(get_helper)):
    course = _course(helper, course_id)
    if create:
        helper.access.require_capability(actor, "moodle/course:manageactivities", contexts.course_context(helper.db, course))
    bank = helper.get_or_create_system_bank(course, create_if_missing=create)
    helper.db.commit()
    return ModuleOut.from_info(bank) if bank else None


@question_router.get("/banks", response_model=List[BankOut])
def course_banks(courseid: int, createdefault: bool = False, actor: Actor = Depends(get_actor),
                 helper: QuestionBankHelper = Depends(get_helper)):
    """Bank list page of a course, optionally creating the default bank on first visit."""
    course = _course(helper, courseid)
    if createdefault and not helper.list_shareable_instances(actor, include_course_ids=[course.id]):
        name = get_string("defaultbankname", "mod_qbank", fullname=course.fullname)
        helper.create_default_instance(actor, course, name, STANDARD)
        helper.db.commit()
    banks = helper.list_shareable_instances(actor, include_course_ids=[course.id], required_capabilities=VIEW_CAPABILITIES)
    return [BankOut.from_descriptor(b) for b in banks]
