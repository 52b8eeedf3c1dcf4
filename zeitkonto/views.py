"""
JSON-Schnittstelle fuer Stundensaldo, Rollen und Export
"""
import json
import logging
from functools import wraps

from django.conf import settings
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .berechtigungen import pruefe_angemeldet
from .exceptions import (
    NichtAngemeldet,
    NichtGefunden,
    SaldoFehler,
    UngueltigesArgument,
)
from .models import Profil
from .services import SaldoService
from .trigger import TABELLEN, DatensatzGeaendert, behandle_aenderung, ermittle_user_id

logger = logging.getLogger(__name__)


# --- HELPER FUNKTIONEN ---

def json_api(view):
    """Beantwortet SaldoFehler als {'error': {'code', 'message'}}."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except SaldoFehler as e:
            if e.status >= 500:
                logger.error('%s %s fehlgeschlagen: %s', request.method, request.path, e.message)
            return JsonResponse({'error': e.als_dict()}, status=e.status)
    return wrapper


def _lese_json(request):
    if not request.body:
        return {}
    try:
        daten = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise UngueltigesArgument('Ungueltige JSON-Struktur')
    if not isinstance(daten, dict):
        raise UngueltigesArgument('JSON-Objekt erwartet')
    return daten


# --- VIEWS ---

@require_POST
@json_api
def saldo_berechnen(request):
    daten = _lese_json(request)
    service = SaldoService()
    return JsonResponse(service.berechnen(request.user, daten.get('userId')))


@require_POST
@json_api
def alle_neu_berechnen(request):
    service = SaldoService()
    return JsonResponse(service.alle_neu_berechnen(request.user))


@require_POST
@json_api
def rolle_aendern(request):
    daten = _lese_json(request)
    service = SaldoService()
    ergebnis = service.rolle_aendern(
        request.user,
        daten.get('targetUserId'),
        daten.get('newRole'),
    )
    return JsonResponse(ergebnis)


@require_GET
@json_api
def export(request):
    service = SaldoService()
    ergebnis = service.exportieren(
        request.user,
        request.GET.get('exportType'),
        start_datum=request.GET.get('startDate'),
        ende_datum=request.GET.get('endDate'),
        user_id=request.GET.get('userId'),
    )
    return JsonResponse(ergebnis)


@require_GET
@json_api
def mein_profil(request):
    """Eigenes Profil mit aktuellem Saldo."""
    pruefe_angemeldet(request.user)
    try:
        profil = Profil.objects.select_related('user', 'abteilung').get(user=request.user)
    except Profil.DoesNotExist:
        raise NichtGefunden('Kein Profil vorhanden')

    user = profil.user
    return JsonResponse({
        'userId': user.pk,
        'username': user.username,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'email': user.email,
        'role': profil.rolle,
        'departmentId': profil.abteilung_id,
        'departmentName': profil.abteilung.name if profil.abteilung else '',
        'hoursSaldo': float(profil.stunden_saldo),
        'hoursSaldoFormatted': profil.saldo_formatiert,
        'updatedAt': profil.updated_at,
    })


@csrf_exempt
@require_POST
@json_api
def aenderung_melden(request):
    """
    Webhook fuer externe Schreibzugriffe auf Soll-/Ist-Zeiten.

    Erwartet das Format eines Supabase Database Webhooks:
    {
        "type": "INSERT" | "UPDATE" | "DELETE",
        "table": "schedules" | "timerecords",
        "record": {...} | null,
        "old_record": {...} | null
    }
    """
    geheimnis = getattr(settings, 'ZEITKONTO_WEBHOOK_SECRET', '')
    if not geheimnis:
        raise NichtGefunden('Webhook ist nicht aktiviert')
    if not constant_time_compare(request.headers.get('X-Webhook-Secret', ''), geheimnis):
        raise NichtAngemeldet('Ungueltiges Webhook-Geheimnis')

    daten = _lese_json(request)
    art = TABELLEN.get(daten.get('table'))
    if art is None:
        raise UngueltigesArgument(f"Unbekannte Tabelle: {daten.get('table')!r}")

    ereignis = DatensatzGeaendert(art, daten.get('old_record'), daten.get('record'))
    ergebnis = behandle_aenderung(ereignis)

    return JsonResponse({
        'success': True,
        'userId': ermittle_user_id(ereignis),
        'recalculated': ergebnis is not None,
    })
