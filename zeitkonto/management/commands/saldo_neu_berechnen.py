"""
Management Command: Berechnet den Stundensaldo neu (Ist - Soll)
"""

from django.core.management.base import BaseCommand, CommandError

from zeitkonto.exceptions import SaldoFehler
from zeitkonto.services import SaldoService


class Command(BaseCommand):
    help = 'Berechnet den Stundensaldo für alle oder einen einzelnen User neu'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            type=int,
            help='Nur für bestimmten User (ID)'
        )
        parser.add_argument(
            '--fehlerhafte-eintraege',
            choices=['ueberspringen', 'fehler'],
            help='Umgang mit kaputten Einträgen (Standard: aus settings)'
        )

    def handle(self, *args, **options):
        service = SaldoService(
            fehlerhafte_eintraege=options.get('fehlerhafte_eintraege')
        )
        user_id = options.get('user')

        self.stdout.write(self.style.SUCCESS('=' * 70))
        self.stdout.write(self.style.SUCCESS('  BERECHNUNG STUNDENSALDO'))
        self.stdout.write(self.style.SUCCESS('=' * 70))

        if user_id:
            try:
                ergebnis = service.neu_berechnen(user_id)
            except SaldoFehler as e:
                raise CommandError(f'User {user_id}: {e.message}')

            self.stdout.write(
                self.style.SUCCESS(
                    f"  ✓ User {user_id}: "
                    f"Soll {ergebnis['soll_stunden']}h, "
                    f"Ist {ergebnis['ist_stunden']}h, "
                    f"Saldo {ergebnis['saldo']}h"
                )
            )
            return

        lauf = service.alle_neu_berechnen()
        erfolge = 0
        fehler_liste = []

        for eintrag in lauf['results']:
            if eintrag['success']:
                erfolge += 1
                self.stdout.write(
                    f"  ✓ User {eintrag['userId']}: "
                    f"Saldo {eintrag['saldo']:.2f}h"
                )
            else:
                fehler_liste.append(eintrag)
                self.stdout.write(
                    self.style.ERROR(f"  ✗ User {eintrag['userId']}: {eintrag['error']}")
                )

        # Zusammenfassung
        self.stdout.write('\n' + '=' * 70)
        self.stdout.write(f"Verarbeitet: {lauf['totalProcessed']}")
        self.stdout.write(self.style.SUCCESS(f'Erfolgreich: {erfolge}'))
        if fehler_liste:
            self.stdout.write(self.style.WARNING(f'Fehler: {len(fehler_liste)}'))
        self.stdout.write('=' * 70 + '\n')
