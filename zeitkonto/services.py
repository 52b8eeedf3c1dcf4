"""Saldo-Service: Zentrale Logik fuer Stundensaldo und Verwaltung

- neu_berechnen(): Saldo eines Users berechnen und speichern
- berechnen(): dasselbe als Aufruf eines angemeldeten Users
- alle_neu_berechnen(): Saldo aller User (nur admin)
- rolle_aendern(): Rolle eines Users setzen (admin/manager)
- exportieren(): Soll-/Ist-Zeiten als Datensaetze (nur admin)
"""
import logging

from django.db import transaction

from .berechnung import berechne_saldo
from .berechtigungen import pruefe_angemeldet, pruefe_rolle, rolle_von
from .exceptions import (
    InternerFehler,
    KeineBerechtigung,
    NichtGefunden,
    SaldoFehler,
    UngueltigesArgument,
)
from .filters import SollzeitExportFilter, ZeiterfassungExportFilter
from .models import GUELTIGE_ROLLEN, Profil, Sollzeit, Zeiterfassung
from .speicher import get_speicher

logger = logging.getLogger(__name__)

EXPORT_TYPEN = ('timerecords', 'schedules', 'all')


def als_antwort(ergebnis):
    """Berechnungsergebnis im Format der Aufruf-Schnittstelle."""
    return {
        'success': True,
        'saldo': float(ergebnis['saldo']),
        'scheduledHours': float(ergebnis['soll_stunden']),
        'workedHours': float(ergebnis['ist_stunden']),
    }


class SaldoService:
    """Zentrale Saldo-Logik.

    Der Speicher wird explizit uebergeben; ohne Angabe wird der in
    settings.ZEITKONTO_SPEICHER konfigurierte verwendet.

    Beispiel:
        service = SaldoService(DjangoSpeicher())
        ergebnis = service.neu_berechnen(user.pk)
    """

    def __init__(self, speicher=None, fehlerhafte_eintraege=None):
        self.speicher = speicher if speicher is not None else get_speicher()
        self.fehlerhafte_eintraege = fehlerhafte_eintraege

    def neu_berechnen(self, user_id):
        """Berechnet den Saldo eines Users und schreibt ihn ins Profil.

        Returns:
            dict mit 'soll_stunden', 'ist_stunden', 'saldo'

        Raises:
            UngueltigesArgument: user_id fehlt
            NichtGefunden: kein Profil zum User
            InternerFehler: Lese-, Schreib- oder Datenfehler
        """
        if user_id is None or user_id == '':
            raise UngueltigesArgument('userId ist erforderlich')

        try:
            eintraege = self.speicher.lade_eintraege(user_id)
        except (TypeError, ValueError):
            raise UngueltigesArgument(f'Ungueltige userId: {user_id!r}')
        except Exception as e:
            logger.exception('Fehler beim Lesen der Eintraege fuer User %s', user_id)
            raise InternerFehler(f'Fehler bei der Saldo-Berechnung: {e}') from e

        try:
            ergebnis = berechne_saldo(
                eintraege['sollzeiten'],
                eintraege['zeiterfassungen'],
                self.fehlerhafte_eintraege,
            )
            geschrieben = self.speicher.schreibe_saldo(user_id, ergebnis)
        except SaldoFehler:
            raise
        except Exception as e:
            logger.exception('Fehler bei Saldo-Berechnung fuer User %s', user_id)
            raise InternerFehler(f'Fehler bei der Saldo-Berechnung: {e}') from e

        if not geschrieben:
            raise NichtGefunden(f'Kein Profil fuer User {user_id} vorhanden')

        logger.info(
            'Saldo fuer User %s: %s h (Soll %s h, Ist %s h)',
            user_id,
            ergebnis['saldo'],
            ergebnis['soll_stunden'],
            ergebnis['ist_stunden'],
        )
        return ergebnis

    def berechnen(self, aufrufer, user_id):
        pruefe_angemeldet(aufrufer)
        return als_antwort(self.neu_berechnen(user_id))

    def alle_neu_berechnen(self, aufrufer=None):
        """Berechnet den Saldo aller User.

        Fehler einzelner User brechen den Lauf nicht ab, sie landen
        im jeweiligen Ergebnis-Eintrag.

        Args:
            aufrufer: User der den Lauf startet (muss admin sein).
                None bei internen Aufrufen (Management Command).
        """
        if aufrufer is not None:
            pruefe_rolle(aufrufer, ('admin',))

        try:
            user_ids = self.speicher.alle_user_ids()
        except Exception as e:
            logger.exception('Fehler beim Lesen der User-Liste')
            raise InternerFehler(f'Fehler beim Lesen der User-Liste: {e}') from e

        ergebnisse = []
        for user_id in user_ids:
            try:
                ergebnis = self.neu_berechnen(user_id)
            except SaldoFehler as e:
                ergebnisse.append({
                    'userId': user_id,
                    'success': False,
                    'error': e.message,
                })
                continue
            ergebnisse.append({'userId': user_id, **als_antwort(ergebnis)})

        fehler_anzahl = sum(1 for e in ergebnisse if not e['success'])
        logger.info(
            'Saldo fuer %d User neu berechnet, %d Fehler',
            len(ergebnisse),
            fehler_anzahl,
        )
        return {
            'success': True,
            'results': ergebnisse,
            'totalProcessed': len(ergebnisse),
        }

    def rolle_aendern(self, aufrufer, ziel_user_id, neue_rolle):
        """Setzt die Rolle eines Users.

        Manager duerfen Rollen aendern, aber die Rolle 'admin'
        weder vergeben noch entziehen.
        """
        pruefe_rolle(aufrufer, ('admin', 'manager'))

        if not ziel_user_id or not neue_rolle:
            raise UngueltigesArgument('targetUserId und newRole sind erforderlich')
        if neue_rolle not in GUELTIGE_ROLLEN:
            raise UngueltigesArgument(f'Ungueltige Rolle: {neue_rolle}')

        try:
            profil = Profil.objects.select_related('user').get(user_id=ziel_user_id)
        except (TypeError, ValueError):
            raise UngueltigesArgument(f'Ungueltige targetUserId: {ziel_user_id!r}')
        except Profil.DoesNotExist:
            raise NichtGefunden(f'Kein Profil fuer User {ziel_user_id} vorhanden')

        if rolle_von(aufrufer) != 'admin' and 'admin' in (neue_rolle, profil.rolle):
            raise KeineBerechtigung('Nur Administratoren duerfen die Admin-Rolle aendern')

        try:
            with transaction.atomic():
                profil.rolle = neue_rolle
                profil.save(update_fields=['rolle', 'updated_at'])

                user = profil.user
                if not user.is_superuser:
                    user.is_staff = neue_rolle == 'admin'
                    user.save(update_fields=['is_staff'])
        except Exception as e:
            logger.exception('Fehler beim Aendern der Rolle von User %s', ziel_user_id)
            raise InternerFehler(f'Fehler beim Aendern der Rolle: {e}') from e

        logger.info(
            'Rolle von User %s auf %s geaendert durch %s',
            profil.user_id,
            neue_rolle,
            aufrufer.username,
        )
        return {
            'success': True,
            'targetUserId': profil.user_id,
            'newRole': neue_rolle,
            'message': 'Rolle erfolgreich geaendert',
        }

    def exportieren(self, aufrufer, export_typ, start_datum=None, ende_datum=None, user_id=None):
        """Liefert Zeiterfassungen und/oder Soll-Zeiten als Datensaetze.

        Args:
            export_typ: 'timerecords', 'schedules' oder 'all'
            start_datum, ende_datum: Zeitraum (ISO-Datum oder -Zeitpunkt)
            user_id: nur Datensaetze dieses Users
        """
        pruefe_rolle(aufrufer, ('admin',))

        if export_typ not in EXPORT_TYPEN:
            raise UngueltigesArgument(f'Ungueltiger Exporttyp: {export_typ!r}')

        filter_daten = {
            schluessel: wert
            for schluessel, wert in (
                ('start_datum', start_datum),
                ('ende_datum', ende_datum),
                ('user', user_id),
            )
            if wert not in (None, '')
        }

        daten = []
        if export_typ in ('timerecords', 'all'):
            filterset = ZeiterfassungExportFilter(
                filter_daten,
                queryset=Zeiterfassung.objects.select_related('user').order_by('einstempeln'),
            )
            daten.extend(self._zeiterfassung_zeile(z) for z in self._gefiltert(filterset))

        if export_typ in ('schedules', 'all'):
            filterset = SollzeitExportFilter(
                filter_daten,
                queryset=Sollzeit.objects.select_related('user', 'abteilung').order_by('beginn'),
            )
            daten.extend(self._sollzeit_zeile(s) for s in self._gefiltert(filterset))

        logger.info('Datenexport (%s): %d Datensaetze', export_typ, len(daten))
        return {
            'success': True,
            'recordCount': len(daten),
            'exportType': export_typ,
            'data': daten,
        }

    def _gefiltert(self, filterset):
        if not filterset.is_valid():
            raise UngueltigesArgument(f'Ungueltige Filter: {dict(filterset.errors)}')
        try:
            return list(filterset.qs)
        except Exception as e:
            logger.exception('Fehler beim Datenexport')
            raise InternerFehler(f'Fehler beim Datenexport: {e}') from e

    def _zeiterfassung_zeile(self, erfassung):
        user = erfassung.user
        return {
            'id': erfassung.pk,
            'recordType': 'timerecord',
            'userId': user.pk,
            'userFirstName': user.first_name,
            'userLastName': user.last_name,
            'userEmail': user.email,
            'checkIn': erfassung.einstempeln,
            'checkOut': erfassung.ausstempeln,
            'totalHours': (
                float(erfassung.gesamt_stunden)
                if erfassung.gesamt_stunden is not None else None
            ),
            'createdAt': erfassung.created_at,
            'updatedAt': erfassung.updated_at,
        }

    def _sollzeit_zeile(self, sollzeit):
        user = sollzeit.user
        return {
            'id': sollzeit.pk,
            'recordType': 'schedule',
            'userId': user.pk,
            'userFirstName': user.first_name,
            'userLastName': user.last_name,
            'userEmail': user.email,
            'title': sollzeit.titel,
            'startTime': sollzeit.beginn,
            'endTime': sollzeit.ende,
            'location': sollzeit.ort,
            'shiftType': sollzeit.schichttyp,
            'departmentId': sollzeit.abteilung_id or '',
            'departmentName': sollzeit.abteilung.name if sollzeit.abteilung else '',
            'createdAt': sollzeit.created_at,
            'updatedAt': sollzeit.updated_at,
        }
