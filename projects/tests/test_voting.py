from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from core.exceptions import Conflict, NotFound, PhaseClosed, ValidationError
from demoday.models import Demoday
from demoday.tests.helpers import (
    APPROVAL_DAY,
    AFTER_EVENT,
    FINAL_DAY,
    POPULAR_DAY,
    SUBMISSION_DAY,
    make_demoday,
    make_submission,
    make_user,
    schedule_with_open_phase,
)
from projects.models import ProjectSubmission, Vote
from projects.voting import cast_vote, has_voted, withdraw_vote


class VotingGateTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", role="admin")
        self.prof = make_user("prof", role="professor")
        self.student = make_user("student", role="student")
        self.author = make_user("author", role="student")
        self.demoday = make_demoday(self.admin)
        self.approved = make_submission(self.demoday, self.author, title="Aprovado")
        self.finalist = make_submission(
            self.demoday, self.author, title="Finalista", status=ProjectSubmission.STATUS_FINALIST,
        )

    def cast(self, user, submission, now, **kwargs):
        return cast_vote(user, submission.project_id, self.demoday.id, now=now, **kwargs)

    def test_popular_vote(self):
        vote = self.cast(self.student, self.approved, POPULAR_DAY, rating=4)
        self.assertEqual(vote.vote_phase, Vote.PHASE_POPULAR)
        self.assertEqual(vote.weight, 1)
        self.assertEqual(vote.voter_role, "student")
        self.assertEqual(vote.rating, 4)

    def test_professor_popular_vote_weighs_one(self):
        vote = self.cast(self.prof, self.approved, POPULAR_DAY)
        self.assertEqual(vote.weight, 1)

    def test_final_vote_weights(self):
        self.assertEqual(self.cast(self.prof, self.finalist, FINAL_DAY).weight, 3)
        self.assertEqual(self.cast(self.admin, self.finalist, FINAL_DAY).weight, 3)
        self.assertEqual(self.cast(self.student, self.finalist, FINAL_DAY).weight, 1)

    def test_outside_voting_phases(self):
        for moment in (SUBMISSION_DAY, APPROVAL_DAY, AFTER_EVENT):
            with self.assertRaises(PhaseClosed) as ctx:
                self.cast(self.student, self.approved, moment)
            self.assertEqual(ctx.exception.code, "not_voting_window")
        self.assertFalse(Vote.objects.exists())

    def test_pinned_phase_must_be_open(self):
        with self.assertRaises(PhaseClosed):
            self.cast(self.student, self.finalist, POPULAR_DAY, requested_phase=Vote.PHASE_FINAL)
        vote = self.cast(self.student, self.finalist, POPULAR_DAY, requested_phase=Vote.PHASE_POPULAR)
        self.assertEqual(vote.vote_phase, Vote.PHASE_POPULAR)

    def test_final_phase_only_accepts_finalists(self):
        with self.assertRaises(PhaseClosed) as ctx:
            self.cast(self.student, self.approved, FINAL_DAY)
        self.assertEqual(ctx.exception.code, "not_finalist")

    def test_submission_status_checked_before_phase(self):
        pending = make_submission(
            self.demoday, self.author, title="Pendente", status=ProjectSubmission.STATUS_SUBMITTED,
        )
        with self.assertRaises(ValidationError) as ctx:
            self.cast(self.student, pending, SUBMISSION_DAY)
        self.assertEqual(ctx.exception.code, "submission_not_votable")

    def test_unknown_project_or_not_submitted_here(self):
        with self.assertRaises(NotFound):
            cast_vote(self.student, 999999, self.demoday.id, now=POPULAR_DAY)

        other = make_demoday(self.admin, name="Outro", active=False, status=Demoday.STATUS_FINISHED)
        elsewhere = make_submission(other, self.author, title="Outro projeto")
        with self.assertRaises(NotFound):
            cast_vote(self.student, elsewhere.project_id, self.demoday.id, now=POPULAR_DAY)

    def test_inactive_demoday_has_no_voting_window(self):
        self.demoday.active = False
        self.demoday.status = Demoday.STATUS_CANCELED
        self.demoday.save()
        with self.assertRaises(PhaseClosed):
            self.cast(self.student, self.approved, POPULAR_DAY)

    def test_duplicate_vote(self):
        self.cast(self.student, self.approved, POPULAR_DAY)
        with self.assertRaises(Conflict) as ctx:
            self.cast(self.student, self.approved, POPULAR_DAY)
        self.assertEqual(ctx.exception.code, "already_voted")
        self.assertEqual(Vote.objects.count(), 1)

    def test_storage_constraint_is_the_final_guard(self):
        self.cast(self.student, self.approved, POPULAR_DAY)

        # Simulate a concurrent request that passed the pre-check
        no_votes = mock.Mock()
        no_votes.exists.return_value = False
        with mock.patch.object(Vote.objects, "filter", return_value=no_votes):
            with self.assertRaises(Conflict):
                self.cast(self.student, self.approved, POPULAR_DAY)
        self.assertEqual(Vote.objects.count(), 1)

    def test_same_project_in_both_phases(self):
        self.cast(self.student, self.finalist, POPULAR_DAY)
        self.cast(self.student, self.finalist, FINAL_DAY)
        self.assertEqual(Vote.objects.filter(user=self.student).count(), 2)

    def test_rating_range(self):
        with self.assertRaises(ValidationError):
            self.cast(self.student, self.approved, POPULAR_DAY, rating=6)
        self.assertFalse(Vote.objects.exists())

    def test_has_voted(self):
        self.assertFalse(has_voted(self.student, self.approved.project_id))
        self.cast(self.student, self.approved, POPULAR_DAY)
        self.assertTrue(has_voted(self.student, self.approved.project_id))
        self.assertTrue(has_voted(self.student, self.approved.project_id, Vote.PHASE_POPULAR))
        self.assertFalse(has_voted(self.student, self.approved.project_id, Vote.PHASE_FINAL))

    def test_withdraw_only_while_phase_open(self):
        self.cast(self.student, self.approved, POPULAR_DAY)

        with self.assertRaises(PhaseClosed):
            withdraw_vote(self.student, self.approved.project_id, now=FINAL_DAY)

        withdraw_vote(self.student, self.approved.project_id, Vote.PHASE_POPULAR, now=POPULAR_DAY)
        self.assertFalse(Vote.objects.exists())

        with self.assertRaises(NotFound):
            withdraw_vote(self.student, self.approved.project_id, now=POPULAR_DAY)


class VoteEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin", role="admin")
        self.student = make_user("student", role="student")
        self.author = make_user("author", role="student")
        self.demoday = make_demoday(self.admin, phases=schedule_with_open_phase(3))
        self.submission = make_submission(self.demoday, self.author)
        self.client.force_authenticate(user=self.student)

    def payload(self, **extra):
        data = {"project_id": self.submission.project_id, "demoday_id": self.demoday.id}
        data.update(extra)
        return data

    def test_vote_then_duplicate(self):
        resp = self.client.post("/api/projects/vote/", self.payload(rating=5), format="json")
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual(resp.json()["vote_phase"], "popular")

        resp = self.client.post("/api/projects/vote/", self.payload(), format="json")
        self.assertEqual(resp.status_code, 409)
        body = resp.json()
        self.assertEqual(body["status_code"], 409)
        self.assertEqual(body["errors"]["code"], "already_voted")
        self.assertEqual(body["errors"]["detail"], "Você já votou neste projeto.")

    def test_has_voted_and_withdraw(self):
        url = f"/api/projects/{self.submission.project_id}/vote/"
        self.assertFalse(self.client.get(url).json()["has_voted"])

        self.client.post("/api/projects/vote/", self.payload(), format="json")
        self.assertTrue(self.client.get(url, {"phase": "popular"}).json()["has_voted"])

        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Vote.objects.exists())

    def test_bad_rating_payload(self):
        resp = self.client.post("/api/projects/vote/", self.payload(rating=0), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("rating", resp.json()["errors"]["fields"])
