"""
Saldo-Berechnung: Ist-Stunden minus Soll-Stunden

Reine Funktionen ohne Datenbankzugriff. Die Eingaben liefert ein
SaldoSpeicher (siehe speicher.py), das Ergebnis wird dort auch
wieder abgelegt.
"""
import logging
import math
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.dateparse import parse_datetime

logger = logging.getLogger(__name__)

UEBERSPRINGEN = 'ueberspringen'
FEHLER = 'fehler'
RICHTLINIEN = (UEBERSPRINGEN, FEHLER)


def runde_stunden(wert):
    """
    Rundet Stunden auf 2 Nachkommastellen.

    Entspricht round(x * 100) / 100 auf dem Float-Wert, halbe Werte
    werden von Null weg gerundet (-0.125 -> -0.13).

    Returns:
        Decimal mit genau 2 Nachkommastellen
    """
    skaliert = Decimal(wert * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    if skaliert == 0:
        skaliert = Decimal('0')
    return skaliert.scaleb(-2)


def _feld(eintrag, name):
    if isinstance(eintrag, Mapping):
        return eintrag.get(name)
    return getattr(eintrag, name, None)


def _zeitpunkt(wert):
    if isinstance(wert, datetime):
        return wert
    if isinstance(wert, str):
        try:
            geparst = parse_datetime(wert)
        except ValueError:
            geparst = None
        if geparst is not None:
            return geparst
    raise ValueError(f"Ungueltiger Zeitstempel: {wert!r}")


def dauer_stunden(beginn, ende):
    """Dauer zwischen zwei Zeitpunkten in Stunden (Float)."""
    return (_zeitpunkt(ende) - _zeitpunkt(beginn)).total_seconds() / 3600


def _richtlinie(fehlerhafte_eintraege):
    if fehlerhafte_eintraege is None:
        fehlerhafte_eintraege = getattr(
            settings, 'ZEITKONTO_FEHLERHAFTE_EINTRAEGE', UEBERSPRINGEN
        )
    if fehlerhafte_eintraege not in RICHTLINIEN:
        raise ValueError(
            f"Unbekannte Richtlinie fuer fehlerhafte Eintraege: {fehlerhafte_eintraege!r}"
        )
    return fehlerhafte_eintraege


def _fehlerhafter_eintrag(art, eintrag, fehler, richtlinie):
    if richtlinie == FEHLER:
        raise ValidationError(
            f"Fehlerhafte {art}: {fehler}",
            code='fehlerhafter_eintrag',
        )
    logger.warning('Fehlerhafte %s uebersprungen (%s): %r', art, fehler, eintrag)


def berechne_saldo(sollzeiten, zeiterfassungen, fehlerhafte_eintraege=None):
    """
    Berechnet Soll-Stunden, Ist-Stunden und Saldo eines Mitarbeiters.

    Args:
        sollzeiten: Iterable mit 'beginn' und 'ende'
        zeiterfassungen: Iterable mit 'einstempeln', 'ausstempeln'
            und optional 'gesamt_stunden'
        fehlerhafte_eintraege: 'ueberspringen' oder 'fehler'
            (Standard: settings.ZEITKONTO_FEHLERHAFTE_EINTRAEGE)

    Returns:
        dict mit 'soll_stunden', 'ist_stunden', 'saldo' (je Decimal, 2 Stellen).
        Der Saldo wird aus den ungerundeten Summen gebildet und
        eigenstaendig gerundet.

    Raises:
        ValidationError: Bei fehlerhaftem Eintrag und Richtlinie 'fehler'
    """
    richtlinie = _richtlinie(fehlerhafte_eintraege)

    # 1. Soll-Stunden: alle Schichten, ohne Filter
    soll_stunden = 0.0
    for sollzeit in sollzeiten or []:
        try:
            stunden = dauer_stunden(_feld(sollzeit, 'beginn'), _feld(sollzeit, 'ende'))
        except (TypeError, ValueError) as e:
            _fehlerhafter_eintrag('Soll-Zeit', sollzeit, e, richtlinie)
            continue
        soll_stunden += stunden

    # 2. Ist-Stunden: nur abgeschlossene Zeiterfassungen
    ist_stunden = 0.0
    for erfassung in zeiterfassungen or []:
        if _feld(erfassung, 'ausstempeln') is None:
            continue
        try:
            gesamt = _feld(erfassung, 'gesamt_stunden')
            if gesamt:
                stunden = float(gesamt)
                if not math.isfinite(stunden):
                    raise ValueError(f"Ungueltige Gesamtstunden: {gesamt!r}")
            else:
                stunden = dauer_stunden(
                    _feld(erfassung, 'einstempeln'),
                    _feld(erfassung, 'ausstempeln'),
                )
        except (TypeError, ValueError) as e:
            _fehlerhafter_eintrag('Zeiterfassung', erfassung, e, richtlinie)
            continue
        ist_stunden += stunden

    # 3. Saldo aus den ungerundeten Summen
    saldo = ist_stunden - soll_stunden

    return {
        'soll_stunden': runde_stunden(soll_stunden),
        'ist_stunden': runde_stunden(ist_stunden),
        'saldo': runde_stunden(saldo),
    }
