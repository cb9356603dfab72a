from fastapi import Depends, Request
from sqlalchemy.orm import Session

from qbank_sharing.core.access import AccessService
from qbank_sharing.core.database import get_db
from qbank_sharing.services.plugins import PluginTypeRegistry
from qbank_sharing.services.question_bank_helper import QuestionBankHelper


def get_registry(request: Request) -> PluginTypeRegistry:
    return request.app.state.plugin_registry


def get_helper(db: Session = Depends(get_db), registry: PluginTypeRegistry = Depends(get_registry)) -> QuestionBankHelper:
    return QuestionBankHelper(db, registry, AccessService(db))
