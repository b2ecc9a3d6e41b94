import csv
from io import StringIO

from django.test import TestCase
from rest_framework.test import APIClient

from core.exceptions import Forbidden, NotFound
from demoday import scoring
from demoday.models import ProjectCategory
from evaluations.models import ProfessorEvaluation
from projects.models import ProjectSubmission, Vote
from .helpers import make_demoday, make_submission, make_user


def vote(user, submission, phase=Vote.PHASE_POPULAR, weight=1):
    return Vote.objects.create(
        user=user,
        project=submission.project,
        demoday=submission.demoday,
        voter_role=user.role,
        vote_phase=phase,
        weight=weight,
    )


def evaluate(professor, submission, total_score):
    return ProfessorEvaluation.objects.create(
        submission=submission, professor=professor, total_score=total_score,
    )


class RankingTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", role="admin")
        self.prof1 = make_user("prof1", role="professor")
        self.prof2 = make_user("prof2", role="professor")
        self.students = [make_user(f"student{i}", role="student") for i in range(4)]
        self.demoday = make_demoday(self.admin)

    def test_weighted_score_example(self):
        a = make_submission(self.demoday, self.students[0], title="A")
        b = make_submission(self.demoday, self.students[1], title="B")
        c = make_submission(self.demoday, self.students[2], title="C")

        vote(self.students[1], a)
        vote(self.students[2], a)
        vote(self.prof1, a, phase=Vote.PHASE_FINAL, weight=3)
        evaluate(self.prof1, a, 80)
        evaluate(self.prof2, a, 60)

        for student in self.students[:3]:
            vote(student, b)

        evaluate(self.prof1, c, 10)

        ranking = scoring.compute_ranking(self.demoday.id)

        self.assertEqual([e.title for e in ranking], ["A", "C", "B"])
        top = ranking[0]
        self.assertEqual(top.popular_votes, 2)
        self.assertEqual(top.final_votes, 1)
        self.assertEqual(top.evaluation_count, 2)
        self.assertEqual(top.evaluation_average, 70)
        self.assertEqual(top.total_weighted_score, 75)
        self.assertEqual(ranking[1].total_weighted_score, 10)
        self.assertEqual(ranking[2].total_weighted_score, 3)

    def test_score_never_drops_when_an_input_grows(self):
        base = (4, 2, 55.5)
        for index in range(3):
            lower = scoring.weighted_score(*base)
            for step in (1, 2, 10):
                grown = list(base)
                grown[index] += step
                self.assertGreaterEqual(scoring.weighted_score(*grown), lower)

        a = make_submission(self.demoday, self.students[0], title="A")
        scores = [scoring.compute_ranking(self.demoday.id)[0].total_weighted_score]
        vote(self.students[1], a)
        scores.append(scoring.compute_ranking(self.demoday.id)[0].total_weighted_score)
        vote(self.students[2], a, phase=Vote.PHASE_FINAL)
        scores.append(scoring.compute_ranking(self.demoday.id)[0].total_weighted_score)
        evaluate(self.prof1, a, 40)
        scores.append(scoring.compute_ranking(self.demoday.id)[0].total_weighted_score)
        self.assertEqual(scores, sorted(scores))
        self.assertEqual(scores, [0, 1, 4, 44])

    def test_final_votes_count_three_times_regardless_of_stored_weight(self):
        a = make_submission(self.demoday, self.students[0], title="A")
        vote(self.students[1], a, phase=Vote.PHASE_FINAL, weight=1)

        entry = scoring.compute_ranking(self.demoday.id)[0]
        self.assertEqual(entry.total_weighted_score, 3)

    def test_ties_break_on_popular_votes_then_submission_order(self):
        first = make_submission(self.demoday, self.students[0], title="Primeiro")
        second = make_submission(self.demoday, self.students[1], title="Segundo")
        popular = make_submission(self.demoday, self.students[2], title="Popular")

        # All three total 3
        vote(self.prof1, first, phase=Vote.PHASE_FINAL, weight=3)
        vote(self.prof2, second, phase=Vote.PHASE_FINAL, weight=3)
        for student in (self.students[0], self.students[1], self.students[3]):
            vote(student, popular)

        titles = [e.title for e in scoring.compute_ranking(self.demoday.id)]
        self.assertEqual(titles, ["Popular", "Primeiro", "Segundo"])

    def test_votes_of_other_demodays_are_ignored(self):
        a = make_submission(self.demoday, self.students[0], title="A")
        other = make_demoday(self.admin, name="Outro", active=False, status="finished")
        Vote.objects.create(
            user=self.students[1], project=a.project, demoday=other,
            voter_role="student", vote_phase=Vote.PHASE_POPULAR,
        )
        self.assertEqual(scoring.compute_ranking(self.demoday.id)[0].popular_votes, 0)

    def test_unknown_demoday(self):
        with self.assertRaises(NotFound):
            scoring.compute_ranking(999999)


class SelectFinalistsTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", role="admin")
        self.students = [make_user(f"student{i}", role="student") for i in range(4)]
        self.demoday = make_demoday(self.admin, max_finalists=1)
        self.software = ProjectCategory.objects.create(
            demoday=self.demoday, name="Software", max_finalists=1,
        )
        self.hardware = ProjectCategory.objects.create(
            demoday=self.demoday, name="Hardware", max_finalists=2,
        )

        s = self.students
        self.sw_best = make_submission(self.demoday, s[0], title="SW best", category=self.software)
        self.sw_other = make_submission(
            self.demoday, s[1], title="SW other", category=self.software,
            status=ProjectSubmission.STATUS_FINALIST,
        )
        self.sw_rejected = make_submission(
            self.demoday, s[2], title="SW rejected", category=self.software,
            status=ProjectSubmission.STATUS_REJECTED,
        )
        self.hw_one = make_submission(self.demoday, s[0], title="HW one", category=self.hardware)
        self.hw_two = make_submission(self.demoday, s[1], title="HW two", category=self.hardware)
        self.general_best = make_submission(self.demoday, s[2], title="Geral best")
        self.general_other = make_submission(self.demoday, s[3], title="Geral other")

        for student in s[1:]:
            vote(student, self.sw_best)
        for student in s:
            vote(student, self.sw_rejected)
        vote(s[0], self.general_best)
        vote(s[1], self.general_best)
        vote(s[0], self.general_other)

    def statuses(self):
        return dict(
            ProjectSubmission.objects.filter(demoday=self.demoday)
            .values_list("project__title", "status")
        )

    def test_top_per_category_become_finalists(self):
        results = scoring.select_finalists(self.admin, self.demoday.id)

        statuses = self.statuses()
        self.assertEqual(statuses["SW best"], "finalist")
        self.assertEqual(statuses["SW other"], "approved", "Previous finalist mark is reset")
        self.assertEqual(statuses["SW rejected"], "rejected")
        self.assertEqual(statuses["HW one"], "finalist")
        self.assertEqual(statuses["HW two"], "finalist")
        self.assertEqual(statuses["Geral best"], "finalist")
        self.assertEqual(statuses["Geral other"], "approved")

        by_name = {r["category_name"]: r for r in results}
        self.assertEqual(by_name["Projetos Gerais"]["max_finalists"], 1)
        self.assertEqual(len(by_name["Hardware"]["finalists"]), 2)

    def test_idempotent(self):
        scoring.select_finalists(self.admin, self.demoday.id)
        first = self.statuses()
        scoring.select_finalists(self.admin, self.demoday.id)
        self.assertEqual(self.statuses(), first)

    def test_rerun_follows_new_votes(self):
        scoring.select_finalists(self.admin, self.demoday.id)
        for student in self.students:
            Vote.objects.create(
                user=student, project=self.general_other.project, demoday=self.demoday,
                voter_role="student", vote_phase=Vote.PHASE_FINAL,
            )
        scoring.select_finalists(self.admin, self.demoday.id)
        statuses = self.statuses()
        self.assertEqual(statuses["Geral other"], "finalist")
        self.assertEqual(statuses["Geral best"], "approved")

    def test_admin_only(self):
        with self.assertRaises(Forbidden):
            scoring.select_finalists(self.students[0], self.demoday.id)
        self.assertEqual(self.statuses()["SW other"], "finalist")

    def test_endpoint(self):
        client = APIClient()
        client.force_authenticate(user=self.admin)
        resp = client.post(f"/api/demodays/{self.demoday.id}/select-finalists/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_finalists"], 4)


class ResultsAndExportTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", role="admin")
        self.prof = make_user("prof", role="professor")
        self.alice = make_user("alice", role="student")
        self.bob = make_user("bob", role="student")
        self.demoday = make_demoday(self.admin)
        self.category = ProjectCategory.objects.create(demoday=self.demoday, name="Software")

        self.a = make_submission(self.demoday, self.alice, title="A", category=self.category)
        self.b = make_submission(self.demoday, self.alice, title="B")
        self.c = make_submission(self.demoday, self.bob, title="C", status=ProjectSubmission.STATUS_SUBMITTED)

        vote(self.bob, self.a)
        vote(self.prof, self.a, phase=Vote.PHASE_FINAL, weight=3)
        vote(self.bob, self.b)
        evaluate(self.prof, self.b, 90)

    def test_results(self):
        results = scoring.get_results(self.demoday.id)

        self.assertEqual(results["demoday_name"], "Demoday 2026")
        stats = results["overall_stats"]
        self.assertEqual(stats["total_submitted_projects"], 3)
        self.assertEqual(stats["total_unique_participants"], 2)
        self.assertEqual(stats["total_popular_votes"], 2)
        self.assertEqual(stats["total_final_votes"], 1)

        groups = {g["name"]: g for g in results["categories"]}
        self.assertEqual([p["title"] for p in groups["Software"]["projects"]], ["A"])
        self.assertEqual([p["title"] for p in groups["Projetos Gerais"]["projects"]], ["B", "C"])
        self.assertEqual(groups["Projetos Gerais"]["projects"][0]["total_weighted_score"], 91)

    def test_export_csv(self):
        rows = list(csv.reader(StringIO(scoring.export_csv(self.demoday.id))))

        self.assertEqual(rows[0], scoring.CSV_HEADER)
        self.assertEqual(len(rows), 4)
        header = rows[0]
        top = dict(zip(header, rows[1]))
        self.assertEqual(top["Título"], "B")
        self.assertEqual(top["Pontuação Final"], "91.00")
        self.assertEqual(top["Número Avaliações"], "1")
        second = dict(zip(header, rows[2]))
        self.assertEqual(second["Categoria"], "Software")
        self.assertEqual(second["Votos Finais"], "1")

    def test_export_endpoint_is_admin_only(self):
        client = APIClient()
        client.force_authenticate(user=self.alice)
        resp = client.get(f"/api/demodays/{self.demoday.id}/export/")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["errors"]["code"], "forbidden")

        client.force_authenticate(user=self.admin)
        resp = client.get(f"/api/demodays/{self.demoday.id}/export/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/csv; charset=utf-8")
        self.assertIn("Pontuação Final", resp.content.decode("utf-8"))

    def test_ranking_endpoint(self):
        client = APIClient()
        client.force_authenticate(user=self.admin)
        resp = client.get(f"/api/demodays/{self.demoday.id}/ranking/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([e["title"] for e in resp.json()], ["B", "A", "C"])
