import logging
import time

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from assessments.timer import sweep_expired

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Finalizes in-progress attempts whose deadline has passed and scores them'

    def add_arguments(self, parser):
        parser.add_argument('--loop', action='store_true', help='Keep sweeping until interrupted')
        parser.add_argument(
            '--interval',
            type=int,
            default=settings.EXAM_ENGINE.get("SWEEP_INTERVAL_SECONDS", 30),
            help='Seconds between sweeps when looping',
        )
        parser.add_argument('--batch-size', type=int, default=None, help='Attempts claimed per sweep')

    def handle(self, *args, **options):
        if options['interval'] <= 0:
            raise CommandError("--interval must be positive")

        while True:
            finalized = sweep_expired(batch_size=options['batch_size'])
            if finalized:
                self.stdout.write(self.style.SUCCESS(f"Finalized {len(finalized)} expired attempt(s)"))
            else:
                self.stdout.write("No expired attempts found.")

            if not options['loop']:
                return
            try:
                time.sleep(options['interval'])
            except KeyboardInterrupt:
                logger.info("Expiry sweep stopped")
                return
