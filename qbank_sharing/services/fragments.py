"""
Server-rendered content fragments loaded by client widgets.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from qbank_sharing.core.access import Actor
from qbank_sharing.core.context import ContextLevel
from qbank_sharing.core.exceptions import InvalidContextLevelError, NotFoundError
from qbank_sharing.core import context as contexts
from qbank_sharing.core.strings import STRINGS
from qbank_sharing.services.question_bank_helper import BankDescriptor, QuestionBankHelper

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
USE_CAPABILITIES = ("moodle/question:useall", "moodle/question:usemine")

_env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=select_autoescape(["html"]))


def _dedupe(banks: List[BankDescriptor], seen: set) -> List[BankDescriptor]:
    out = []
    for bank in banks:
        if bank.modid not in seen:
            seen.add(bank.modid)
            out.append(bank)
    return out


def switch_question_bank(helper: QuestionBankHelper, actor: Actor, context_id: int, quizcmid: int,
                         bankmodid: int) -> Dict[str, Any]:
    """Markup of the form used to pick another bank for a quiz."""
    ctx = contexts.instance_by_id(helper.db, context_id)
    if ctx is None:
        raise NotFoundError(f"Context {context_id} not found")
    if ctx.contextlevel != ContextLevel.MODULE:
        raise InvalidContextLevelError(ctx.contextlevel)
    quiz = helper.modinfo.get_cm(quizcmid)
    if ctx.instanceid != quiz.id:
        raise NotFoundError(f"Context {context_id} does not belong to course module {quizcmid}")
    helper.access.require_capability(actor, "mod/quiz:manage", ctx)

    seen: set = set()
    course_banks = _dedupe(helper.list_shareable_instances(
        actor, include_course_ids=[quiz.course], required_capabilities=USE_CAPABILITIES,
        preferred_bank_id=bankmodid), seen)
    recent = _dedupe(helper.get_recently_viewed(actor.user_id, exclude_course_id=quiz.course), seen)
    others = _dedupe(helper.list_shareable_instances(
        actor, exclude_course_ids=[quiz.course], required_capabilities=USE_CAPABILITIES), seen)

    strings = STRINGS["mod_quiz"]
    html = _env.get_template("switch_question_bank.html").render(
        action=f"/mod/quiz/edit?cmid={quiz.id}",
        quizcmid=quiz.id,
        bankmodid=bankmodid,
        strings=strings,
        groups=[
            {"label": strings["banksincourse"], "banks": course_banks},
            {"label": strings["recentlyviewedbanks"], "banks": recent},
            {"label": strings["otherbanks"], "banks": others},
        ],
    )
    logger.debug("Rendered switch bank form for quiz %s with %d banks", quiz.id, len(seen))
    return {"html": html, "js": ""}
