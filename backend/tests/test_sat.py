"""
Tests for SAT test submission, review and removal endpoints.
"""

from datetime import timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from conftest import NOW, OTHER_STUDENT_ID, STUDENT_ID
from edutest import models
from edutest.services.repository import SatAttemptRepository
from edutest.services.scoring import TOTAL_KEY


def full_answers(ids):
    return {
        "verbal": [
            {"question_id": ids["verbal"], "option_id": ids["verbal_right"], "isMarked": True},
        ],
        "math": [
            {"question_id": ids["math"], "option_id": str(ids["math_right"])},
            {"question_id": ids["math_writing"], "option_id": " ten "},
        ],
        "other": [
            {"question_id": ids["loose"], "option_id": ids["loose_right"]},
        ],
    }


def submit(client, ids, headers, answers=None):
    return client.post(
        f"/api/satTests/{ids['test_id']}/submit",
        json={"answers": full_answers(ids) if answers is None else answers},
        headers=headers,
    )


class TestSatSubmit:
    """Tests for POST /api/satTests/{id}/submit."""

    def test_scores_per_section(self, client, student_headers, sat_test, db_session):
        response = submit(client, sat_test, student_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["scores"] == {"verbal": 1, "math": 2, "general": 1, "totalScore": 4}

        attempt = db_session.get(models.SatAttempt, data["sat_attempt_id"])
        assert attempt.total_score == 4
        assert attempt.status == "completed"
        assert attempt.start_time == attempt.end_time == NOW
        assert len(attempt.sat_answers) == 4

    def test_wrong_answers_and_blank_sections(self, client, student_headers, sat_test):
        answers = {"verbal": [{"question_id": sat_test["verbal"], "option_id": sat_test["verbal_wrong"]}]}
        response = submit(client, sat_test, student_headers, answers=answers)

        assert response.status_code == 200
        assert response.json()["scores"] == {"verbal": 0, "math": 0, "general": 0, "totalScore": 0}

    def test_section_is_taken_from_the_question(self, client, student_headers, sat_test):
        """Answers filed under the wrong section key still count for their question's section."""
        answers = {"verbal": [{"question_id": sat_test["math"], "option_id": sat_test["math_right"]}]}
        response = submit(client, sat_test, student_headers, answers=answers)

        assert response.json()["scores"]["math"] == 1
        assert response.json()["scores"]["verbal"] == 0

    def test_unknown_questions_are_ignored(self, client, student_headers, sat_test):
        answers = full_answers(sat_test)
        answers["verbal"].append({"question_id": 99999, "option_id": 1})
        response = submit(client, sat_test, student_headers, answers=answers)

        assert response.status_code == 200
        assert response.json()["scores"]["totalScore"] == 4

    def test_empty_answers(self, client, student_headers, sat_test):
        response = submit(client, sat_test, student_headers, answers={})

        assert response.status_code == 400

    def test_sections_without_answers(self, client, student_headers, sat_test, db_session):
        response = submit(client, sat_test, student_headers, answers={"math": [], "verbal": []})

        assert response.status_code == 400
        assert response.json()["detail"] == "Answers cannot be empty."
        assert db_session.query(models.SatAttempt).count() == 0

    def test_unknown_test(self, client, student_headers, sat_test):
        response = submit(client, {**sat_test, "test_id": 4242}, student_headers)

        assert response.status_code == 404

    def test_failure_rolls_back_attempt(self, client, student_headers, sat_test,
                                        db_session, monkeypatch):
        real_save = SatAttemptRepository.save

        def broken_save(self, *args, **kwargs):
            real_save(self, *args, **kwargs)
            raise OperationalError("INSERT INTO sat_answers", {}, Exception("disk I/O error"))

        monkeypatch.setattr(SatAttemptRepository, "save", broken_save)

        response = submit(client, sat_test, student_headers)

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"
        db_session.expire_all()
        assert db_session.query(models.SatAttempt).count() == 0
        assert db_session.query(models.SatAnswer).count() == 0

    def test_expired_test(self, client, student_headers, sat_test, clock, db_session):
        clock.advance(days=2)

        response = submit(client, sat_test, student_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Test has expired."
        assert db_session.query(models.SatAttempt).count() == 0

    def test_no_attempt_cap(self, client, student_headers, sat_test):
        for _ in range(3):
            assert submit(client, sat_test, student_headers).status_code == 200

    def test_group_deadline_overrides_test_window(self, client, student_headers,
                                                  other_student_headers, sat_test, db_session):
        db_session.add(models.GroupMembership(group_id=9, user_id=STUDENT_ID))
        db_session.add(models.Deadline(
            test_id=sat_test["test_id"], group_id=9,
            open=NOW + timedelta(hours=1), due=NOW + timedelta(hours=2),
        ))
        db_session.commit()

        response = submit(client, sat_test, student_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Test is not open yet."

        assert submit(client, sat_test, other_student_headers).status_code == 200

    def test_group_deadline_extends_past_test_due(self, client, student_headers,
                                                  sat_test, db_session, clock):
        db_session.add(models.GroupMembership(group_id=9, user_id=STUDENT_ID))
        db_session.add(models.Deadline(
            test_id=sat_test["test_id"], group_id=9,
            open=NOW, due=NOW + timedelta(days=5),
        ))
        db_session.commit()
        clock.advance(days=3)

        assert submit(client, sat_test, student_headers).status_code == 200

    def test_admin_submits_outside_window(self, client, admin_headers, sat_test, clock):
        clock.advance(days=10)

        assert submit(client, sat_test, admin_headers).status_code == 200


class TestSatDetails:
    """Tests for GET /api/satTests/{id}/details."""

    def test_questions_grouped_by_section(self, client, student_headers, sat_test):
        response = client.get(f"/api/satTests/{sat_test['test_id']}/details", headers=student_headers)

        assert response.status_code == 200
        by_section = response.json()["questionsBySection"]
        assert set(by_section) == {"verbal", "math", "general"}
        assert len(by_section["math"]) == 2
        for questions in by_section.values():
            for question in questions:
                assert "explanation" not in question
                for option in question["sat_answer_options"]:
                    assert "is_correct" not in option
        writing = [q for q in by_section["math"] if q["question_type"] == "writing"][0]
        assert writing["sat_answer_options"] == []

    def test_teacher_sees_correct_options(self, client, teacher_headers, sat_test):
        response = client.get(f"/api/satTests/{sat_test['test_id']}/details", headers=teacher_headers)

        verbal = response.json()["questionsBySection"]["verbal"][0]
        assert verbal["explanation"] == "Large means big"
        assert any(o["is_correct"] for o in verbal["sat_answer_options"])

    def test_student_cannot_view_expired_test(self, client, student_headers, sat_test, clock):
        clock.advance(days=2)

        response = client.get(f"/api/satTests/{sat_test['test_id']}/details", headers=student_headers)

        assert response.status_code == 400

    def test_unknown_test(self, client, student_headers):
        response = client.get("/api/satTests/4242/details", headers=student_headers)

        assert response.status_code == 404


class TestSatAttempts:
    """Tests for SAT attempt history, detail and deletion."""

    def detail_url(self, attempt_id, user_id=STUDENT_ID):
        return f"/api/satAttempts/{attempt_id}/user/{user_id}/answers"

    def test_detail_recomputes_scores(self, client, student_headers, sat_test):
        attempt_id = submit(client, sat_test, student_headers).json()["sat_attempt_id"]

        response = client.get(self.detail_url(attempt_id), headers=student_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["scores"] == {"verbal": 1, "math": 2, "general": 1, "totalScore": 4}
        assert data["attempt"]["total_score"] == 4

        questions = {q["sat_question_id"]: q for q in data["sat_test"]["sat_questions"]}
        verbal = questions[sat_test["verbal"]]
        assert verbal["explanation"] == "Large means big"
        assert [o["sat_answer_option_id"] for o in verbal["sat_answer_options"] if o["selected"]] == [
            sat_test["verbal_right"]
        ]
        assert questions[sat_test["math_writing"]]["student_answer"] == " ten "

    def test_detail_does_not_write(self, client, student_headers, sat_test, db_session):
        attempt_id = submit(client, sat_test, student_headers).json()["sat_attempt_id"]
        attempt = db_session.get(models.SatAttempt, attempt_id)
        attempt.total_score = 99
        db_session.commit()

        first = client.get(self.detail_url(attempt_id), headers=student_headers).json()
        second = client.get(self.detail_url(attempt_id), headers=student_headers).json()

        assert first == second
        assert first["attempt"]["total_score"] == 99
        assert first["scores"]["totalScore"] == 4
        db_session.expire_all()
        assert db_session.get(models.SatAttempt, attempt_id).total_score == 99

    def test_detail_of_other_user_is_denied(self, client, student_headers,
                                            other_student_headers, sat_test):
        attempt_id = submit(client, sat_test, student_headers).json()["sat_attempt_id"]

        response = client.get(self.detail_url(attempt_id), headers=other_student_headers)

        assert response.status_code == 403

    def test_detail_with_mismatched_user(self, client, student_headers, teacher_headers, sat_test):
        attempt_id = submit(client, sat_test, student_headers).json()["sat_attempt_id"]

        response = client.get(self.detail_url(attempt_id, OTHER_STUDENT_ID), headers=teacher_headers)

        assert response.status_code == 404

    def test_list_user_attempts(self, client, student_headers, sat_test):
        submit(client, sat_test, student_headers)
        submit(client, sat_test, student_headers)

        response = client.get(f"/api/satAttempts/user/{STUDENT_ID}", headers=student_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 2
        assert data[0]["sat_test"]["name"] == "SAT practice 1"
        assert all(a["total_score"] == 4 for a in data)

    def test_delete_requires_admin(self, client, student_headers, teacher_headers, sat_test):
        attempt_id = submit(client, sat_test, student_headers).json()["sat_attempt_id"]

        assert client.delete(f"/api/satAttempts/{attempt_id}", headers=student_headers).status_code == 403
        assert client.delete(f"/api/satAttempts/{attempt_id}", headers=teacher_headers).status_code == 403

    def test_admin_deletes_attempt(self, client, student_headers, admin_headers, sat_test, db_session):
        attempt_id = submit(client, sat_test, student_headers).json()["sat_attempt_id"]

        response = client.delete(f"/api/satAttempts/{attempt_id}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(self.detail_url(attempt_id), headers=student_headers).status_code == 404
        db_session.expire_all()
        assert db_session.query(models.SatAnswer).count() == 0

    def test_delete_unknown_attempt(self, client, admin_headers):
        response = client.delete("/api/satAttempts/9999", headers=admin_headers)

        assert response.status_code == 404
        assert "Maybe Attempt was not found" in response.json()["detail"]


class TestSectionLabels:
    """The grand-total key cannot be used as a section label."""

    def test_reserved_label_is_refused(self):
        with pytest.raises(ValueError):
            models.SatQuestion(section=TOTAL_KEY, question_text="Clash")

    def test_reserved_label_is_refused_by_the_database(self, sat_test, db_session):
        with pytest.raises(IntegrityError):
            db_session.execute(
                text("INSERT INTO sat_questions (test_id, section, question_text, question_type) "
                     "VALUES (:test_id, :section, 'Clash', 'single')"),
                {"test_id": sat_test["test_id"], "section": TOTAL_KEY},
            )
        db_session.rollback()

    def test_ordinary_labels_are_kept(self):
        question = models.SatQuestion(section="reading", question_text="Read this")

        assert question.section == "reading"
