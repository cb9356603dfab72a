import pytest

from qbank_sharing.core import context as contexts
from qbank_sharing.core.access import AccessService, Actor
from qbank_sharing.core.exceptions import RequiredCapabilityError
from qbank_sharing.models.orm import Module


def test_context_paths(db, gen):
    category = gen.create_category()
    course = gen.create_course(category)
    bank = gen.create_module("qbank", course)

    modctx = contexts.instance(db, contexts.ContextLevel.MODULE, bank.id)
    coursectx = contexts.course_context(db, course)
    catctx = contexts.coursecat_context(db, category.id)
    sysctx = contexts.system_context(db)

    assert modctx.depth == 4
    assert contexts.parent_context_ids(modctx) == [modctx.id, coursectx.id, catctx.id, sysctx.id]
    assert contexts.instance_by_id(db, str(modctx.id)).id == modctx.id
    assert contexts.instance_by_id(db, "x") is None
    assert contexts.instance_by_id(db, -3) is None


def test_capability_inherited_from_course(db, gen):
    access = AccessService(db)
    course, other = gen.create_course(), gen.create_course()
    bank = gen.create_module("qbank", course)
    elsewhere = gen.create_module("qbank", other)
    user = gen.create_user()
    gen.enrol(user, course, "editingteacher")
    actor = Actor(user.id)

    modctx = contexts.instance(db, contexts.ContextLevel.MODULE, bank.id)
    otherctx = contexts.instance(db, contexts.ContextLevel.MODULE, elsewhere.id)
    assert access.has_capability(actor, "moodle/question:add", modctx)
    assert not access.has_capability(actor, "moodle/question:add", otherctx)
    assert not access.has_capability(actor, "moodle/site:config", modctx)
    assert access.has_any_capability(actor, ["moodle/site:config", "moodle/question:add"], modctx)
    assert not access.has_capability(None, "moodle/question:add", modctx)

    with pytest.raises(RequiredCapabilityError):
        access.require_capability(actor, "moodle/question:add", otherctx)


def test_site_admin_has_everything(db, gen):
    access = AccessService(db)
    course = gen.create_course()
    admin = Actor(user_id=99, is_site_admin=True)
    assert access.has_capability(admin, "anything:at_all", contexts.course_context(db, course))
    assert access.course_allowed_module(admin, course, "qbank")
    assert not access.course_allowed_module(admin, course, "forum")

    db.query(Module).filter(Module.name == "qbank").update({"visible": 0})
    assert not access.course_allowed_module(admin, course, "qbank")
