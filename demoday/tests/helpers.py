"""Builders shared by the Demoday test suites."""
from datetime import date, datetime, timedelta

from demoday.models import Demoday, DemodayPhase
from demoday.phases import now as local_now
from projects.models import Project, ProjectSubmission
from users.models import User

# Fixed calendar used by tests that pass ``now`` explicitly
PHASES = [
    {"phase_number": 1, "name": "Submissão", "description": "Envio de projetos",
     "start_date": date(2026, 3, 1), "end_date": date(2026, 3, 10)},
    {"phase_number": 2, "name": "Triagem", "description": "Aprovação",
     "start_date": date(2026, 3, 11), "end_date": date(2026, 3, 20)},
    {"phase_number": 3, "name": "Votação popular", "description": "Votação",
     "start_date": date(2026, 3, 21), "end_date": date(2026, 3, 31)},
    {"phase_number": 4, "name": "Votação final", "description": "Final",
     "start_date": date(2026, 4, 1), "end_date": date(2026, 4, 5)},
]

BEFORE_EVENT = datetime(2026, 2, 20, 12, 0)
SUBMISSION_DAY = datetime(2026, 3, 5, 12, 0)
APPROVAL_DAY = datetime(2026, 3, 15, 12, 0)
POPULAR_DAY = datetime(2026, 3, 25, 12, 0)
FINAL_DAY = datetime(2026, 4, 3, 12, 0)
AFTER_EVENT = datetime(2026, 4, 10, 12, 0)


def schedule_with_open_phase(open_phase, count=4):
    """Consecutive 10-day phases where ``open_phase`` contains today."""
    today = local_now().date()
    phases = []
    for number in range(1, count + 1):
        start = today + timedelta(days=(number - open_phase) * 10 - 2)
        phases.append({
            "phase_number": number,
            "name": f"Fase {number}",
            "description": "",
            "start_date": start,
            "end_date": start + timedelta(days=9),
        })
    return phases


def make_user(username, role=User.ROLE_USER, **extra):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="pass",
        role=role,
        **extra,
    )


def make_demoday(creator, name="Demoday 2026", phases=None, active=True, **fields):
    demoday = Demoday.objects.create(
        name=name,
        created_by=creator,
        active=active,
        status=fields.pop("status", Demoday.STATUS_ACTIVE),
        **fields,
    )
    for phase in PHASES if phases is None else phases:
        DemodayPhase.objects.create(demoday=demoday, **phase)
    return demoday


def make_submission(demoday, author, title="Projeto", status=ProjectSubmission.STATUS_APPROVED,
                    category=None):
    project = Project.objects.create(
        author=author,
        title=title,
        description="Descrição do projeto",
        type=Project.TYPE_TCC,
        category=category,
        authors="Ana, Bruno",
        development_year="2025",
        video_url="https://example.com/video",
        contact_email=author.email,
        contact_phone="11999990000",
        advisor="Prof. Carla",
    )
    return ProjectSubmission.objects.create(project=project, demoday=demoday, status=status)


def submission_payload(**overrides):
    payload = {
        "title": "Robô seguidor de linha",
        "description": "Um robô que segue linhas usando sensores infravermelhos.",
        "type": "TCC",
        "authors": "Ana Souza, Bruno Lima",
        "development_year": "2025",
        "video_url": "https://youtube.com/watch?v=abc",
        "repository_url": "https://github.com/ana/robo",
        "contact_email": "ana@example.com",
        "contact_phone": "11999990000",
        "advisor": "Prof. Carla",
    }
    payload.update(overrides)
    return payload
