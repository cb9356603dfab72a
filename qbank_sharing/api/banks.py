from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from typing import List, Optional
from qbank_sharing.api.deps import get_helper
from qbank_sharing.api.schemas import BankOut, ModuleOut
from qbank_sharing.core.access import Actor
from qbank_sharing.core.auth import get_actor
from qbank_sharing.core.exceptions import RequiredCapabilityError
from qbank_sharing.services.plugins import PluginType
from qbank_sharing.services.question_bank_helper import QuestionBankHelper

router = APIRouter()


def _list(helper: QuestionBankHelper, type: str, actor: Actor, incourse: List[int], notincourse: List[int],
          cap: List[str], categories: bool, current: int) -> List[BankOut]:
    banks = helper.list_bank_instances(type, actor, include_course_ids=incourse, exclude_course_ids=notincourse,
                                       include_categories=categories, preferred_bank_id=current,
                                       required_capabilities=cap)
    return [BankOut.from_descriptor(b) for b in banks]


@router.get("/shared", response_model=List[BankOut])
def list_shared(incourse: List[int] = Query(default=[]), notincourse: List[int] = Query(default=[]),
                cap: List[str] = Query(default=[]), categories: bool = False, current: int = 0,
                actor: Actor = Depends(get_actor), helper: QuestionBankHelper = Depends(get_helper)):
    return _list(helper, PluginType.SHARED, actor, incourse, notincourse, cap, categories, current)


@router.get("/private", response_model=List[BankOut])
def list_private(incourse: List[int] = Query(default=[]), notincourse: List[int] = Query(default=[]),
                 cap: List[str] = Query(default=[]), categories: bool = False, current: int = 0,
                 actor: Actor = Depends(get_actor), helper: QuestionBankHelper = Depends(get_helper)):
    return _list(helper, PluginType.PRIVATE, actor, incourse, notincourse, cap, categories, current)


@router.get("/recent", response_model=List[BankOut])
def recently_viewed(notincourse: int = 0, actor: Actor = Depends(get_actor), helper: QuestionBankHelper = Depends(get_helper)):
    banks = helper.get_recently_viewed(actor.user_id, exclude_course_id=notincourse)
    helper.db.commit()
    return [BankOut.from_descriptor(b) for b in banks]


class ViewedIn(BaseModel):
    contextid: int


@router.post("/recent")
def record_viewed(payload: ViewedIn, actor: Actor = Depends(get_actor), helper: QuestionBankHelper = Depends(get_helper)):
    stored = helper.add_recently_viewed(actor.user_id, payload.contextid)
    helper.db.commit()
    return {"contextids": [int(c) for c in stored]}


@router.get("/preview", response_model=Optional[ModuleOut])
def preview_bank(create: bool = False, actor: Actor = Depends(get_actor), helper: QuestionBankHelper = Depends(get_helper)):
    if create and not actor.is_site_admin:
        raise RequiredCapabilityError("moodle/site:config")
    bank = helper.get_or_create_preview_bank(create_if_missing=create)
    helper.db.commit()
    return ModuleOut.from_info(bank) if bank else None
