from django.core.management.base import BaseCommand

from demoday.state_machine import finish_expired_demodays


class Command(BaseCommand):
    help = "Finishes every active demoday whose last phase has already ended"

    def handle(self, *args, **options):
        finished = finish_expired_demodays()
        if not finished:
            self.stdout.write("No expired demodays.")
            return
        for demoday in finished:
            self.stdout.write(self.style.SUCCESS(f"Finished: {demoday.name} (id={demoday.id})"))
