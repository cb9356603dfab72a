from fastapi import APIRouter, Depends
from qbank_sharing.api.deps import get_helper
from qbank_sharing.core.access import Actor
from qbank_sharing.core.auth import get_actor
from qbank_sharing.services import fragments
from qbank_sharing.services.question_bank_helper import QuestionBankHelper

router = APIRouter()


@router.get("/mod_quiz/switch_question_bank")
def switch_question_bank(contextid: int, quizcmid: int, bankmodid: int = 0, actor: Actor = Depends(get_actor),
                         helper: QuestionBankHelper = Depends(get_helper)):
    result = fragments.switch_question_bank(helper, actor, contextid, quizcmid, bankmodid)
    # reading recently viewed banks may prune the stored list
    helper.db.commit()
    return result
