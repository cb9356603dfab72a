"""
Modal used on the quiz edit page to add questions from a question bank, and
to switch to a different bank.
"""
import logging
from typing import Any, Dict, List, Optional

from qbank_sharing.client import autocomplete
from qbank_sharing.client.autocomplete import AutocompleteField
from qbank_sharing.client.modal import Button, FragmentClient, Modal
from qbank_sharing.core.strings import get_string

logger = logging.getLogger(__name__)

SELECTION_ELEMENT = ".search-banks .form-autocomplete-selection"


class AddQuestionModal(Modal):
    def __init__(self, fragments: FragmentClient):
        super().__init__()
        self.fragments = fragments
        self.context_id: Optional[int] = None
        self.add_on_page_id: Optional[int] = None
        self.quiz_mod_id: Optional[int] = None
        self.bank_mod_id: Optional[int] = None
        self.original_title: Optional[str] = None
        self.course_open_banks: List[Any] = []
        self.all_open_banks: List[Any] = []
        self.recently_viewed_banks: List[Any] = []
        self.search_field: Optional[AutocompleteField] = None

    def configure(self, config: Dict[str, Any]) -> None:
        # Add question modals are always large and shown on creation.
        config = dict(config, large=True, show=True, removeOnClose=True)

        self.set_context_id(config.get("contextId"))
        self.set_add_on_page_id(config.get("addOnPage"))

        # Quiz cmid, unlike the page cmid, stays fixed while other banks are browsed.
        self.quiz_mod_id = config.get("quizModId")
        self.bank_mod_id = config.get("bankModId")

        # Restored after switching back from another bank.
        self.original_title = config.get("title")

        super().configure(config)

    def set_context_id(self, context_id: Optional[int]) -> None:
        self.context_id = context_id

    def get_context_id(self) -> Optional[int]:
        return self.context_id

    def set_add_on_page_id(self, page_id: Optional[int]) -> None:
        """Page of the quiz that picked questions are added to."""
        self.add_on_page_id = page_id

    def get_add_on_page_id(self) -> Optional[int]:
        return self.add_on_page_id

    def set_quiz_mod_id(self, quiz_mod_id: Optional[int]) -> None:
        self.quiz_mod_id = quiz_mod_id

    def get_quiz_mod_id(self) -> Optional[int]:
        return self.quiz_mod_id

    def set_course_open_banks(self, banks: List[Any]) -> None:
        self.course_open_banks = banks

    def get_course_open_banks(self) -> List[Any]:
        return self.course_open_banks

    def set_all_open_banks(self, banks: List[Any]) -> None:
        self.all_open_banks = banks

    def get_all_open_banks(self) -> List[Any]:
        return self.all_open_banks

    def set_recently_viewed_banks(self, banks: List[Any]) -> None:
        self.recently_viewed_banks = banks

    def get_recently_viewed_banks(self) -> List[Any]:
        return self.recently_viewed_banks

    def restore_original_title(self) -> None:
        if self.original_title is not None:
            self.set_title(self.original_title)

    async def handle_switch_bank_content_reload(self, selector: str) -> "AddQuestionModal":
        """
        Show the list of banks to switch to, with the bank select turned into
        a searchable autocomplete.
        """
        self.set_title(get_string("selectquestionbank", "mod_quiz"))

        go_back = Button(text=get_string("gobacktoquiz", "mod_quiz"), classes={"btn", "btn-primary"})
        go_back.set_attribute("data-action", "go-back")
        go_back.set_attribute("value", self.bank_mod_id)
        self.set_footer(go_back)

        self.set_body(self.fragments.load_fragment(
            "mod_quiz",
            "switch_question_bank",
            self.get_context_id(),
            {"quizcmid": self.quiz_mod_id, "bankmodid": self.bank_mod_id},
        ))
        placeholder = get_string("searchbyname", "mod_quiz")
        body = await self.get_body_promise()
        self.search_field = autocomplete.enhance(
            body,
            selector,
            tags=False,
            ajax="",
            placeholder=placeholder,
            case_sensitive=False,
            show_suggestions=True,
            no_selection_string="",
            close_suggestions_on_select=True,
        )

        # Single-choice picker, the selection pills are not shown.
        self.hide_element(SELECTION_ELEMENT)
        logger.debug("Switch bank list loaded with %d banks", len(self.search_field.options))
        return self
