"""
Speicher-Adapter fuer Soll-Zeiten, Ist-Zeiten und Saldo.

Der SaldoService bekommt einen Speicher uebergeben und kennt nur
diese Schnittstelle. Es gibt zwei gleichwertige Implementierungen:

- DjangoSpeicher: relationale Datenbank ueber das Django-ORM
  (SQLite lokal, PostgreSQL/Supabase per DATABASE_URL)
- DokumentSpeicher: Dokumente im Firestore-Format (camelCase),
  im Speicher gehalten
"""
import logging

from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string

from .models import Profil, Sollzeit, Zeiterfassung
from .trigger import DatensatzGeaendert, TABELLEN

logger = logging.getLogger(__name__)


class SaldoSpeicher:
    """Schnittstelle aller Speicher-Adapter."""

    def lade_eintraege(self, user_id):
        """
        Liest Soll-Zeiten und abgeschlossene Zeiterfassungen eines Users.

        Returns:
            dict mit 'sollzeiten' (beginn, ende) und
            'zeiterfassungen' (einstempeln, ausstempeln, gesamt_stunden)
        """
        raise NotImplementedError

    def schreibe_saldo(self, user_id, ergebnis):
        """
        Schreibt nur den Saldo (plus Aenderungszeitpunkt) ins Profil.

        Returns:
            False wenn es kein Profil zum User gibt, sonst True
        """
        raise NotImplementedError

    def alle_user_ids(self):
        raise NotImplementedError


class DjangoSpeicher(SaldoSpeicher):
    """Relationaler Speicher ueber die Django-Models."""

    def lade_eintraege(self, user_id):
        sollzeiten = list(
            Sollzeit.objects.filter(user_id=user_id).values('beginn', 'ende')
        )
        zeiterfassungen = list(
            Zeiterfassung.objects.filter(
                user_id=user_id,
                ausstempeln__isnull=False,
            ).values('einstempeln', 'ausstempeln', 'gesamt_stunden')
        )
        return {
            'sollzeiten': sollzeiten,
            'zeiterfassungen': zeiterfassungen,
        }

    def schreibe_saldo(self, user_id, ergebnis):
        profile = Profil.objects.filter(user_id=user_id)
        if not profile.exists():
            return False

        # Unveraenderter Saldo -> kein Schreibzugriff, auch kein updated_at
        profile.exclude(stunden_saldo=ergebnis['saldo']).update(
            stunden_saldo=ergebnis['saldo'],
            updated_at=timezone.now(),
        )
        return True

    def alle_user_ids(self):
        return list(
            Profil.objects.order_by('user_id').values_list('user_id', flat=True)
        )


class DokumentSpeicher(SaldoSpeicher):
    """Dokumentenspeicher mit den Sammlungen users, schedules, timerecords.

    Dokumente verwenden die Feldnamen der Firestore-Variante:
    userId, startTime, endTime, checkIn, checkOut, totalHours,
    hours_saldo, lastUpdated.

    Wird bei_aenderung uebergeben, meldet speichere() und loesche()
    jede Aenderung an schedules/timerecords als DatensatzGeaendert,
    wie ein onWrite-Trigger.
    """

    SAMMLUNGEN = ('users', 'schedules', 'timerecords')

    def __init__(self, sammlungen=None, bei_aenderung=None):
        self.sammlungen = sammlungen if sammlungen is not None else {}
        for name in self.SAMMLUNGEN:
            self.sammlungen.setdefault(name, {})
        self.bei_aenderung = bei_aenderung

    def _dokumente(self, sammlung, user_id):
        return [
            dok for dok in self.sammlungen[sammlung].values()
            if dok.get('userId') == user_id
        ]

    def lade_eintraege(self, user_id):
        sollzeiten = [
            {'beginn': dok.get('startTime'), 'ende': dok.get('endTime')}
            for dok in self._dokumente('schedules', user_id)
        ]
        zeiterfassungen = [
            {
                'einstempeln': dok.get('checkIn'),
                'ausstempeln': dok.get('checkOut'),
                'gesamt_stunden': dok.get('totalHours'),
            }
            for dok in self._dokumente('timerecords', user_id)
            if dok.get('checkOut') is not None
        ]
        return {
            'sollzeiten': sollzeiten,
            'zeiterfassungen': zeiterfassungen,
        }

    def schreibe_saldo(self, user_id, ergebnis):
        dok = self.sammlungen['users'].get(user_id)
        if dok is None:
            return False

        saldo = float(ergebnis['saldo'])
        if dok.get('hours_saldo') != saldo:
            dok['hours_saldo'] = saldo
            dok['lastUpdated'] = timezone.now()
        return True

    def alle_user_ids(self):
        return list(self.sammlungen['users'])

    def speichere(self, sammlung, dok_id, daten):
        """Legt ein Dokument an oder ersetzt es."""
        vorher = self.sammlungen[sammlung].get(dok_id)
        self.sammlungen[sammlung][dok_id] = dict(daten)
        self._melde(sammlung, vorher, self.sammlungen[sammlung][dok_id])

    def loesche(self, sammlung, dok_id):
        vorher = self.sammlungen[sammlung].pop(dok_id, None)
        if vorher is not None:
            self._melde(sammlung, vorher, None)

    def _melde(self, sammlung, vorher, nachher):
        if self.bei_aenderung is None or sammlung not in TABELLEN:
            return
        self.bei_aenderung(
            DatensatzGeaendert(TABELLEN[sammlung], vorher, nachher)
        )


def get_speicher(pfad=None):
    """Erzeugt den in settings.ZEITKONTO_SPEICHER konfigurierten Speicher."""
    klasse = import_string(pfad or settings.ZEITKONTO_SPEICHER)
    logger.debug('Verwende Saldo-Speicher %s', klasse.__name__)
    return klasse()
