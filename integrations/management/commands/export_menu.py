"""
Management command: push the current menu to the configured partner platform.
Can be run from cron to keep the partner's copy fresh.
"""
from django.core.management.base import BaseCommand, CommandError
from rest_framework.exceptions import APIException

from inventory.models import MenuItem
from integrations.models import IntegrationSettings
from integrations.sync import build_export_payload, export_menu


class Command(BaseCommand):
    help = 'Export the menu to the partner platform configured in integration settings'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only print the payload that would be sent, do not send it',
        )
        parser.add_argument(
            '--timeout',
            type=int,
            default=None,
            help='Request timeout in seconds (defaults to INTEGRATION_SYNC_TIMEOUT)',
        )

    def handle(self, *args, **options):
        integration = IntegrationSettings.load()
        items = MenuItem.objects.all()

        if options['dry_run']:
            payload = build_export_payload(items, integration)
            self.stdout.write(f"Would send {len(payload['items'])} item(s) to {integration.platform_url or '(no url)'}")
            for item in payload['items']:
                self.stdout.write(f"  {item['id']}: {item['name']} enabled={item['isEnabled']}")
            return

        try:
            result = export_menu(items, integration, timeout=options['timeout'])
        except APIException as e:
            raise CommandError(f'Menu export failed: {e.detail}')

        self.stdout.write(self.style.SUCCESS(
            f"Exported {result['synced']} item(s), partner answered {result['upstream_status']}."
        ))
