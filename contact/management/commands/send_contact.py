from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from contact.controller import ContactFormController, FormStatus


class Command(BaseCommand):
    help = "Fill in the contact form and submit it to the relay endpoint"

    def add_arguments(self, parser):
        parser.add_argument("--name", default="")
        parser.add_argument("--email", default="")
        parser.add_argument("--message", default="")
        parser.add_argument(
            "--phone",
            default=None,
            help="Optional phone number; digits are masked as DDD-DDD-DDDD",
        )
        parser.add_argument(
            "--endpoint",
            default=settings.CONTACT_ENDPOINT_URL,
            help="Relay endpoint URL (default: CONTACT_ENDPOINT_URL)",
        )

    def handle(self, *args, **options):
        form = ContactFormController(endpoint_url=options["endpoint"])

        form.update_field("name", options["name"])
        form.update_field("email", options["email"])
        form.update_field("message", options["message"])
        # Leaving --phone out keeps the field untouched, so it stays optional
        if options["phone"] is not None:
            form.update_field("phone", options["phone"])

        state = form.submit()

        if state.status is not FormStatus.SUBMITTED:
            raise CommandError(state.error)

        self.stdout.write(self.style.SUCCESS(state.success))
