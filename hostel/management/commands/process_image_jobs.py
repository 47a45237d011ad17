import logging
import time

from django.core.management.base import BaseCommand

from hostel.services.images import claim_next_job, run_image_job

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Process queued image jobs (resize and WebP re-encode)."

    def add_arguments(self, parser):
        parser.add_argument("--once", action="store_true", help="Drain the queue once and exit.")
        parser.add_argument("--sleep", type=float, default=2.0, help="Seconds to wait when the queue is empty.")

    def handle(self, *args, **options):
        processed = failed = 0
        while True:
            job = claim_next_job()
            if job is None:
                if options["once"]:
                    break
                time.sleep(options["sleep"])
                continue
            if run_image_job(job):
                processed += 1
            else:
                failed += 1
        logger.info("Image worker finished: %s processed, %s failed", processed, failed)
        self.stdout.write(self.style.SUCCESS(f"processed={processed} failed={failed}"))
