from pydantic import BaseModel
from typing import List, Optional
from qbank_sharing.services.modinfo import CourseModuleInfo
from qbank_sharing.services.question_bank_helper import BankDescriptor


class CategoryOut(BaseModel):
    id: int
    name: str
    contextid: int
    enabled: str


class BankOut(BaseModel):
    name: str
    modid: int
    contextid: int
    coursenamebankname: str
    modname: str
    course: int
    questioncategories: List[CategoryOut] = []

    @classmethod
    def from_descriptor(cls, bank: BankDescriptor) -> "BankOut":
        return cls(
            name=bank.name, modid=bank.modid, contextid=bank.contextid,
            coursenamebankname=bank.coursenamebankname, modname=bank.cminfo.modname, course=bank.cminfo.course,
            questioncategories=[CategoryOut(id=c.id, name=c.name, contextid=c.contextid, enabled=c.enabled)
                                for c in bank.questioncategories],
        )


class ModuleOut(BaseModel):
    id: int
    course: int
    modname: str
    name: str
    section: int
    visible: int
    contextid: int
    intro: Optional[str] = None

    @classmethod
    def from_info(cls, cm: CourseModuleInfo) -> "ModuleOut":
        return cls(id=cm.id, course=cm.course, modname=cm.modname, name=cm.name, section=cm.section,
                   visible=cm.visible, contextid=cm.context_id, intro=cm.intro)
