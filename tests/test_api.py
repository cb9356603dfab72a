import httpx
import pytest

from qbank_sharing.client.add_question_modal import AddQuestionModal
from qbank_sharing.client.modal import FragmentClient
from qbank_sharing.core import context as contexts


def _ctx(db, cmid):
    return contexts.instance(db, contexts.ContextLevel.MODULE, cmid).id


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_mock_login_token_works(client):
    r = client.post("/v1/auth/mock-login", json={"user_id": 7, "roles": ["admin"]})
    assert r.status_code == 200
    hdr = {"Authorization": f"Bearer {r.json()['access_token']}"}
    assert client.get("/v1/banks/shared", headers=hdr).status_code == 200


def test_requires_token(client):
    assert client.get("/v1/banks/shared").status_code in (401, 403)
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/v1/banks/shared", headers=bad).status_code == 401


def test_list_shared_and_private(db, gen, client, auth_header):
    c1, c2 = gen.create_course(shortname="C1"), gen.create_course(shortname="C2")
    bank = gen.create_module("qbank", c1, name="Bank 1")
    gen.create_question_category(_ctx(db, bank.id), name="Default")
    gen.create_module("qbank", c2, name="Bank 2")
    gen.create_module("quiz", c1, name="Quiz 1")
    db.commit()
    hdr = auth_header(2, ["admin"])

    r = client.get("/v1/banks/shared", params={"notincourse": [c2.id], "categories": True}, headers=hdr)
    assert r.status_code == 200
    [out] = r.json()
    assert out["coursenamebankname"] == "C1 - Bank 1"
    assert out["modname"] == "qbank"
    assert [c["name"] for c in out["questioncategories"]] == ["Default"]

    r = client.get("/v1/banks/private", params={"incourse": [c1.id]}, headers=hdr)
    assert [b["name"] for b in r.json()] == ["Quiz 1"]


def test_list_filters_by_capability(db, gen, client, auth_header):
    course = gen.create_course()
    gen.create_module("qbank", course)
    user = gen.create_user()
    gen.enrol(user, course, "student")
    db.commit()

    r = client.get("/v1/banks/shared", params={"cap": ["moodle/question:add"]}, headers=auth_header(user.id))
    assert r.status_code == 200
    assert r.json() == []


def test_create_bank(db, gen, client, auth_header):
    course = gen.create_course()
    user = gen.create_user()
    gen.enrol(user, course, "editingteacher")
    db.commit()

    r = client.post(f"/v1/courses/{course.id}/banks", json={"name": "My bank"}, headers=auth_header(user.id))
    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "My bank"
    assert body["course"] == course.id
    assert body["visible"] == 0


def test_create_bank_errors(db, gen, client, auth_header):
    course = gen.create_course()
    student = gen.create_user()
    gen.enrol(student, course, "student")
    db.commit()

    r = client.post(f"/v1/courses/{course.id}/banks", json={"name": "Nope"}, headers=auth_header(student.id))
    assert r.status_code == 403
    assert "moodle/course:manageactivities" in r.json()["detail"]

    r = client.post("/v1/courses/999/banks", json={"name": "Nope"}, headers=auth_header(2, ["admin"]))
    assert r.status_code == 404


def test_system_and_preview_banks(db, gen, client, auth_header):
    course = gen.create_course()
    db.commit()
    hdr = auth_header(2, ["admin"])

    assert client.get(f"/v1/courses/{course.id}/banks/system", headers=hdr).json() is None
    created = client.get(f"/v1/courses/{course.id}/banks/system", params={"create": True}, headers=hdr).json()
    again = client.get(f"/v1/courses/{course.id}/banks/system", params={"create": True}, headers=hdr).json()
    assert created["id"] == again["id"]
    assert created["name"] == "System shared question bank"

    preview = client.get("/v1/banks/preview", params={"create": True}, headers=hdr).json()
    assert preview["course"] == 1

    user = gen.create_user()
    db.commit()
    r = client.get("/v1/banks/preview", params={"create": True}, headers=auth_header(user.id))
    assert r.status_code == 403


def test_course_bank_list_creates_default(db, gen, client, auth_header):
    course = gen.create_course(fullname="Chemistry")
    db.commit()
    hdr = auth_header(2, ["admin"])

    assert client.get("/question/banks", params={"courseid": course.id}, headers=hdr).json() == []
    r = client.get("/question/banks", params={"courseid": course.id, "createdefault": 1}, headers=hdr)
    assert [b["name"] for b in r.json()] == ["Chemistry course question bank"]
    # A second visit does not create another bank.
    r = client.get("/question/banks", params={"courseid": course.id, "createdefault": 1}, headers=hdr)
    assert len(r.json()) == 1


def test_recently_viewed_endpoints(db, gen, client, auth_header):
    user = gen.create_user()
    course = gen.create_course()
    bank = gen.create_module("qbank", course)
    db.commit()
    hdr = auth_header(user.id)

    r = client.post("/v1/banks/recent", json={"contextid": _ctx(db, bank.id)}, headers=hdr)
    assert r.json() == {"contextids": [_ctx(db, bank.id)]}
    assert client.post("/v1/banks/recent", json={"contextid": 424242}, headers=hdr).status_code == 404

    r = client.get("/v1/banks/recent", headers=hdr)
    assert [b["modid"] for b in r.json()] == [bank.id]
    assert client.get("/v1/banks/recent", params={"notincourse": course.id}, headers=hdr).json() == []


def test_record_viewed_rejects_course_context(db, gen, client, auth_header):
    user = gen.create_user()
    course = gen.create_course()
    quiz = gen.create_module("quiz", course)
    bank = gen.create_module("qbank", course)
    db.commit()
    hdr = auth_header(user.id)
    client.post("/v1/banks/recent", json={"contextid": _ctx(db, bank.id)}, headers=hdr)

    r = client.post("/v1/banks/recent", json={"contextid": contexts.course_context(db, course).id}, headers=hdr)
    assert r.status_code == 400

    r = client.get("/v1/banks/recent", headers=hdr)
    assert r.status_code == 200
    assert [b["modid"] for b in r.json()] == [bank.id]

    gen.enrol(user, course, "editingteacher")
    db.commit()
    r = client.get("/fragment/mod_quiz/switch_question_bank",
                   params={"contextid": _ctx(db, quiz.id), "quizcmid": quiz.id}, headers=hdr)
    assert r.status_code == 200


def test_switch_bank_fragment_requires_quiz_manage(db, gen, client, auth_header):
    course = gen.create_course()
    quiz = gen.create_module("quiz", course)
    student = gen.create_user()
    gen.enrol(student, course, "student")
    db.commit()

    r = client.get("/fragment/mod_quiz/switch_question_bank",
                   params={"contextid": _ctx(db, quiz.id), "quizcmid": quiz.id}, headers=auth_header(student.id))
    assert r.status_code == 403
    assert "mod/quiz:manage" in r.json()["detail"]


def test_switch_bank_fragment_context_must_match_quiz(db, gen, client, auth_header):
    course = gen.create_course()
    quiz = gen.create_module("quiz", course)
    bank = gen.create_module("qbank", course)
    db.commit()

    r = client.get("/fragment/mod_quiz/switch_question_bank",
                   params={"contextid": _ctx(db, bank.id), "quizcmid": quiz.id}, headers=auth_header(2, ["admin"]))
    assert r.status_code == 404


def test_breadcrumbs(db, gen, client, auth_header):
    course = gen.create_course(shortname="C1")
    bank = gen.create_module("qbank", course, name="Bank", section=3)
    quiz = gen.create_module("quiz", course, name="Quiz", section=3)
    db.commit()
    hdr = auth_header(2, ["admin"])

    r = client.get("/v1/navigation/breadcrumbs", params={"cmid": bank.id}, headers=hdr)
    assert r.json()[1] == {"text": "Question banks", "action": f"/question/banks?courseid={course.id}"}

    r = client.get("/v1/navigation/breadcrumbs", params={"cmid": quiz.id}, headers=hdr)
    assert r.json()[1]["text"] == "Section 3"


def test_switch_bank_fragment(db, gen, client, auth_header):
    c1, c2 = gen.create_course(shortname="C1"), gen.create_course(shortname="C2")
    quiz = gen.create_module("quiz", c1, name="Quiz")
    local = gen.create_module("qbank", c1, name="Local bank")
    gen.create_module("qbank", c2, name="Remote bank")
    db.commit()

    r = client.get("/fragment/mod_quiz/switch_question_bank",
                   params={"contextid": _ctx(db, quiz.id), "quizcmid": quiz.id, "bankmodid": local.id},
                   headers=auth_header(2, ["admin"]))

    assert r.status_code == 200
    html = r.json()["html"]
    assert "C1 - Local bank" in html
    assert "C2 - Remote bank" in html
    assert f'value="{local.id}" data-contextid="{_ctx(db, local.id)}" selected' in html


def test_switch_bank_fragment_requires_module_context(db, gen, client, auth_header):
    course = gen.create_course()
    quiz = gen.create_module("quiz", course)
    db.commit()

    r = client.get("/fragment/mod_quiz/switch_question_bank",
                   params={"contextid": contexts.course_context(db, course).id, "quizcmid": quiz.id},
                   headers=auth_header(2, ["admin"]))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_modal_against_app(db, gen, app, auth_header):
    course = gen.create_course(shortname="C1")
    quiz = gen.create_module("quiz", course, name="Quiz")
    bank = gen.create_module("qbank", course, name="Bank")
    db.commit()

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://lms.test",
                                 headers=auth_header(2, ["admin"])) as http:
        modal = AddQuestionModal(FragmentClient(http))
        modal.configure({"contextId": _ctx(db, quiz.id), "quizModId": quiz.id, "bankModId": bank.id,
                         "addOnPage": 1, "title": "Add"})
        await modal.handle_switch_bank_content_reload("#id_searchbanks")

    assert [o.label for o in modal.search_field.options] == ["C1 - Bank"]
    assert modal.search_field.selected.value == str(bank.id)
