# pulse_core/ledger/apps.py
from django.apps import AppConfig


class LedgerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pulse_core.ledger"

    def ready(self):
        # Register in-process event handlers
        from pulse_core.ledger import subscribers  # noqa: F401
