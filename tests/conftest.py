import os

# Settings are read at import time by the database module.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")

from itertools import count  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, select  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from qbank_sharing.core import context as contexts  # noqa: E402
from qbank_sharing.core.access import AccessService, Actor  # noqa: E402
from qbank_sharing.core.auth import create_token  # noqa: E402
from qbank_sharing.core.config import get_settings  # noqa: E402
from qbank_sharing.core.database import get_db, install_defaults  # noqa: E402
from qbank_sharing.models.orm import (  # noqa: E402
    Base, Course, CourseCategory, QuestionCategory, Role, RoleAssignment, User,
)
from qbank_sharing.services.modinfo import CourseModuleInfo, ModInfo, ModuleData  # noqa: E402
from qbank_sharing.services.plugins import PluginTypeRegistry  # noqa: E402
from qbank_sharing.services.question_bank_helper import QuestionBankHelper  # noqa: E402


class DataGenerator:
    """Creates LMS records for tests."""

    def __init__(self, db: Session, registry: PluginTypeRegistry):
        self.db = db
        self.modinfo = ModInfo(db, registry)
        self._seq = count(1)

    def create_category(self, name: Optional[str] = None) -> CourseCategory:
        cat = CourseCategory(name=name or f"Category {next(self._seq)}", parent=0)
        self.db.add(cat); self.db.flush()
        contexts.coursecat_context(self.db, cat.id)
        return cat

    def create_course(self, category: Optional[CourseCategory] = None, **fields) -> Course:
        n = next(self._seq)
        course = Course(
            category=category.id if category else 0,
            fullname=fields.get("fullname", f"Test course {n}"),
            shortname=fields.get("shortname", f"tc_{n}"),
            groupmode=fields.get("groupmode", 0),
            defaultgroupingid=fields.get("defaultgroupingid", 0),
        )
        self.db.add(course); self.db.flush()
        contexts.course_context(self.db, course)
        return course

    def create_user(self, username: Optional[str] = None) -> User:
        user = User(username=username or f"user{next(self._seq)}", firstname="Test", lastname="User")
        self.db.add(user); self.db.flush()
        return user

    def create_module(self, modname: str, course: Course, name: Optional[str] = None, **fields) -> CourseModuleInfo:
        data = ModuleData(course=course.id, modulename=modname, name=name or f"{modname} {next(self._seq)}", **fields)
        if modname == "qbank" and data.type is None:
            data.type = "standard"
        return self.modinfo.add_module_instance(data, course)

    def create_question_category(self, contextid: int, name: Optional[str] = None) -> QuestionCategory:
        top = self.db.scalar(select(QuestionCategory).where(
            QuestionCategory.contextid == contextid, QuestionCategory.parent == 0))
        if top is None:
            top = QuestionCategory(name="top", contextid=contextid, parent=0, info="")
            self.db.add(top); self.db.flush()
        cat = QuestionCategory(name=name or f"Question category {next(self._seq)}", contextid=contextid,
                               parent=top.id, info="")
        self.db.add(cat); self.db.flush()
        return cat

    def role_assign(self, shortname: str, user: User, contextid: int) -> None:
        role = self.db.scalar(select(Role).where(Role.shortname == shortname))
        self.db.add(RoleAssignment(roleid=role.id, userid=user.id, contextid=contextid)); self.db.flush()

    def enrol(self, user: User, course: Course, shortname: str = "student") -> None:
        self.role_assign(shortname, user, contexts.course_context(self.db, course).id)


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool, future=True)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    with Session(engine) as session:
        install_defaults(session)
        yield session


@pytest.fixture()
def registry(db) -> PluginTypeRegistry:
    return PluginTypeRegistry.build(db)


@pytest.fixture()
def helper(db, registry) -> QuestionBankHelper:
    return QuestionBankHelper(db, registry, AccessService(db))


@pytest.fixture()
def gen(db, registry) -> DataGenerator:
    return DataGenerator(db, registry)


@pytest.fixture()
def admin() -> Actor:
    return Actor(user_id=2, is_site_admin=True)


@pytest.fixture()
def app(db, registry):
    from qbank_sharing.main import create_app

    app = create_app(registry)

    def _db():
        yield db

    app.dependency_overrides[get_db] = _db
    return app


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def auth_header():
    def _header(user_id: int, roles=()) -> dict:
        return {"Authorization": f"Bearer {create_token(str(user_id), list(roles))}"}
    return _header
