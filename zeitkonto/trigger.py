"""
Saldo-Neuberechnung nach Aenderungen an Soll- und Ist-Zeiten.

Jede Aenderung (anlegen, aendern, loeschen) wird als DatensatzGeaendert
mit Vorher-/Nachher-Stand gemeldet. Fehler bei der Neuberechnung
werden nur geloggt: die ausloesende Aenderung bleibt davon unberuehrt.
"""
import logging
from collections import namedtuple
from collections.abc import Mapping

from .exceptions import NichtGefunden

logger = logging.getLogger(__name__)

SOLLZEIT = 'sollzeit'
ZEITERFASSUNG = 'zeiterfassung'

# Tabellen bzw. Sammlungen der externen Speicher
TABELLEN = {
    'schedules': SOLLZEIT,
    'timerecords': ZEITERFASSUNG,
}

DatensatzGeaendert = namedtuple('DatensatzGeaendert', ['art', 'vorher', 'nachher'])


def _user_id_aus(stand):
    if stand is None:
        return None
    if isinstance(stand, Mapping):
        for schluessel in ('user_id', 'userId', 'user'):
            wert = stand.get(schluessel)
            if wert not in (None, ''):
                return getattr(wert, 'pk', wert)
        return None
    return getattr(stand, 'user_id', None)


def ermittle_user_id(ereignis):
    """User des Nachher-Stands, bei Loeschung der des Vorher-Stands."""
    if ereignis.nachher is not None:
        return _user_id_aus(ereignis.nachher)
    return _user_id_aus(ereignis.vorher)


def frueherer_user_id(ereignis):
    """User des Vorher-Stands, falls der Datensatz den User gewechselt hat."""
    if ereignis.nachher is None:
        return None
    frueher = _user_id_aus(ereignis.vorher)
    if frueher is None or frueher == _user_id_aus(ereignis.nachher):
        return None
    return frueher


def _neu_berechnen(service, user_id, art):
    try:
        return service.neu_berechnen(user_id)
    except NichtGefunden:
        # z.B. User samt Profil geloescht
        logger.info('Kein Profil fuer User %s, Saldo nicht aktualisiert', user_id)
    except Exception:
        logger.exception(
            'Fehler bei Saldo-Neuberechnung nach Aenderung an %s fuer User %s',
            art,
            user_id,
        )
    return None


def behandle_aenderung(ereignis, service=None):
    """
    Berechnet den Saldo des betroffenen Users neu.

    Wechselt ein Datensatz den User, wird auch der Saldo des
    bisherigen Users neu berechnet.

    Args:
        ereignis: DatensatzGeaendert
        service: SaldoService (Standard: mit konfiguriertem Speicher)

    Returns:
        Ergebnis der Berechnung fuer den betroffenen User
        oder None (kein User / Fehler)
    """
    user_id = ermittle_user_id(ereignis)
    frueher = frueherer_user_id(ereignis)
    if user_id is None:
        logger.info('Keine userId fuer Aenderung an %s gefunden', ereignis.art)
        if frueher is None:
            return None

    if service is None:
        from .services import SaldoService
        try:
            service = SaldoService()
        except Exception:
            logger.exception('Saldo-Speicher konnte nicht erzeugt werden')
            return None

    ergebnis = None
    if user_id is not None:
        ergebnis = _neu_berechnen(service, user_id, ereignis.art)
    if frueher is not None:
        _neu_berechnen(service, frueher, ereignis.art)
    return ergebnis
