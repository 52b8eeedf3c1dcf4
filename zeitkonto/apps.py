from django.apps import AppConfig


class ZeitkontoConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'zeitkonto'
    verbose_name = 'Zeitkonto & Stundensaldo'

    def ready(self):
        """Signals beim App-Start importieren"""
        import zeitkonto.signals  # noqa
