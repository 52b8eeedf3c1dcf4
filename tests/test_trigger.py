from decimal import Decimal

import pytest
from django.contrib.auth.models import User

from zeitkonto.exceptions import NichtGefunden
from zeitkonto.models import Profil, Sollzeit, Zeiterfassung
from zeitkonto.services import SaldoService
from zeitkonto.speicher import DokumentSpeicher
from zeitkonto.trigger import (
    SOLLZEIT,
    ZEITERFASSUNG,
    DatensatzGeaendert,
    behandle_aenderung,
    ermittle_user_id,
)


class AufzeichnenderService:
    def __init__(self, fehler=None):
        self.aufrufe = []
        self.fehler = fehler

    def neu_berechnen(self, user_id):
        self.aufrufe.append(user_id)
        if self.fehler:
            raise self.fehler
        return {'saldo': Decimal('1.00')}


# --- ermittle_user_id ---

def test_user_id_aus_nachher_stand():
    ereignis = DatensatzGeaendert(SOLLZEIT, {'userId': 'alt'}, {'userId': 'neu'})
    assert ermittle_user_id(ereignis) == 'neu'


def test_user_id_aus_user_schluessel():
    assert ermittle_user_id(DatensatzGeaendert(SOLLZEIT, None, {'user': 5})) == 5
    assert ermittle_user_id(DatensatzGeaendert(SOLLZEIT, None, {'user': User(pk=7)})) == 7


def test_user_id_bei_loeschung_aus_vorher_stand():
    ereignis = DatensatzGeaendert(ZEITERFASSUNG, {'user_id': 7}, None)
    assert ermittle_user_id(ereignis) == 7


def test_user_id_ohne_fallback_wenn_nachher_existiert():
    ereignis = DatensatzGeaendert(SOLLZEIT, {'userId': 'alt'}, {'titel': 'ohne user'})
    assert ermittle_user_id(ereignis) is None


def test_user_id_aus_model_instanz():
    instanz = Sollzeit(user_id=42)
    assert ermittle_user_id(DatensatzGeaendert(SOLLZEIT, None, instanz)) == 42


# --- behandle_aenderung ---

def test_ohne_user_id_keine_berechnung(caplog):
    service = AufzeichnenderService()

    ergebnis = behandle_aenderung(DatensatzGeaendert(SOLLZEIT, None, None), service)

    assert ergebnis is None
    assert service.aufrufe == []
    assert 'Keine userId' in caplog.text


def test_berechnet_fuer_betroffenen_user():
    service = AufzeichnenderService()

    ergebnis = behandle_aenderung(DatensatzGeaendert(SOLLZEIT, None, {'userId': 'u1'}), service)

    assert ergebnis == {'saldo': Decimal('1.00')}
    assert service.aufrufe == ['u1']


def test_userwechsel_berechnet_beide_user():
    service = AufzeichnenderService()

    ergebnis = behandle_aenderung(
        DatensatzGeaendert(SOLLZEIT, {'userId': 'alt'}, {'userId': 'neu'}), service
    )

    assert ergebnis == {'saldo': Decimal('1.00')}
    assert service.aufrufe == ['neu', 'alt']


def test_gleicher_user_nur_einmal():
    service = AufzeichnenderService()

    behandle_aenderung(DatensatzGeaendert(ZEITERFASSUNG, {'user_id': 3}, {'user_id': 3}), service)

    assert service.aufrufe == [3]


def test_fehler_wird_geloggt_nicht_weitergereicht(caplog):
    service = AufzeichnenderService(fehler=RuntimeError('Datenbank weg'))

    ergebnis = behandle_aenderung(DatensatzGeaendert(ZEITERFASSUNG, {'userId': 'u1'}, None), service)

    assert ergebnis is None
    assert service.aufrufe == ['u1']
    assert 'Datenbank weg' in caplog.text


def test_fehlendes_profil_ist_kein_fehler():
    service = AufzeichnenderService(fehler=NichtGefunden('weg'))

    assert behandle_aenderung(DatensatzGeaendert(SOLLZEIT, {'userId': 'u1'}, None), service) is None


def test_dokumentspeicher_mit_trigger(dokumente, zeit):
    speicher = DokumentSpeicher(dokumente)
    service = SaldoService(speicher)
    speicher.bei_aenderung = lambda ereignis: behandle_aenderung(ereignis, service)

    speicher.speichere(
        'timerecords', 't5',
        {'userId': 'u2', 'checkIn': zeit(8, tag=4), 'checkOut': zeit(9, tag=4), 'totalHours': None},
    )

    # Soll 8h, Ist 8.75h + 1h
    assert dokumente['users']['u2']['hours_saldo'] == 1.75
    assert dokumente['users']['u1']['hours_saldo'] == 0.0


def test_dokument_wechselt_user(dokumente):
    speicher = DokumentSpeicher(dokumente)
    service = SaldoService(speicher)
    speicher.bei_aenderung = lambda ereignis: behandle_aenderung(ereignis, service)

    speicher.speichere('schedules', 's3', dict(dokumente['schedules']['s3'], userId='u1'))

    # u2 behaelt nur die Zeiterfassung, u1 bekommt 8h Soll dazu
    assert dokumente['users']['u2']['hours_saldo'] == 8.75
    assert dokumente['users']['u1']['hours_saldo'] == -8.0


def test_loeschen_der_einzigen_sollzeit(dokumente):
    speicher = DokumentSpeicher(dokumente)
    service = SaldoService(speicher)
    service.neu_berechnen('u2')
    assert dokumente['users']['u2']['hours_saldo'] == 0.75

    speicher.bei_aenderung = lambda ereignis: behandle_aenderung(ereignis, service)
    speicher.loesche('schedules', 's3')

    # Nur noch die Zeiterfassung zaehlt
    assert dokumente['users']['u2']['hours_saldo'] == 8.75


# --- Django Signals ---

@pytest.mark.django_db
def test_signal_berechnet_nach_commit(mitarbeiter, zeit, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        Sollzeit.objects.create(user=mitarbeiter, beginn=zeit(8), ende=zeit(16))
    assert Profil.objects.get(user=mitarbeiter).stunden_saldo == Decimal('-8.00')

    with django_capture_on_commit_callbacks(execute=True):
        Zeiterfassung.objects.create(user=mitarbeiter, einstempeln=zeit(8, 15), ausstempeln=zeit(17))
    assert Profil.objects.get(user=mitarbeiter).stunden_saldo == Decimal('0.75')


@pytest.mark.django_db
def test_signal_schicht_an_kollegin_uebergeben(
    mitarbeiter, kollegin, zeit, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True):
        sollzeit = Sollzeit.objects.create(user=mitarbeiter, beginn=zeit(8), ende=zeit(16))
    assert Profil.objects.get(user=mitarbeiter).stunden_saldo == Decimal('-8.00')

    with django_capture_on_commit_callbacks(execute=True):
        sollzeit.user = kollegin
        sollzeit.save()

    assert Profil.objects.get(user=mitarbeiter).stunden_saldo == Decimal('0.00')
    assert Profil.objects.get(user=kollegin).stunden_saldo == Decimal('-8.00')


@pytest.mark.django_db
def test_signal_bei_loeschung(mitarbeiter, zeit, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        sollzeit = Sollzeit.objects.create(user=mitarbeiter, beginn=zeit(8), ende=zeit(16))
        Zeiterfassung.objects.create(user=mitarbeiter, einstempeln=zeit(8), ausstempeln=zeit(12))
    assert Profil.objects.get(user=mitarbeiter).stunden_saldo == Decimal('-4.00')

    with django_capture_on_commit_callbacks(execute=True):
        sollzeit.delete()

    assert Profil.objects.get(user=mitarbeiter).stunden_saldo == Decimal('4.00')


@pytest.mark.django_db
def test_signal_erst_nach_commit(mitarbeiter, zeit, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks() as callbacks:
        Sollzeit.objects.create(user=mitarbeiter, beginn=zeit(8), ende=zeit(16))
        assert Profil.objects.get(user=mitarbeiter).stunden_saldo == Decimal('0.00')

    assert len(callbacks) == 1


@pytest.mark.django_db
def test_signal_abschaltbar(settings, mitarbeiter, zeit, django_capture_on_commit_callbacks):
    settings.ZEITKONTO_AUTO_NEUBERECHNUNG = False

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        Sollzeit.objects.create(user=mitarbeiter, beginn=zeit(8), ende=zeit(16))

    assert callbacks == []
    assert Profil.objects.get(user=mitarbeiter).stunden_saldo == Decimal('0.00')


@pytest.mark.django_db
def test_fehler_in_neuberechnung_blockiert_speichern_nicht(
    monkeypatch, mitarbeiter, zeit, django_capture_on_commit_callbacks
):
    def kaputt(self, user_id):
        raise RuntimeError('Speicher nicht erreichbar')

    monkeypatch.setattr(SaldoService, 'neu_berechnen', kaputt)

    with django_capture_on_commit_callbacks(execute=True):
        Sollzeit.objects.create(user=mitarbeiter, beginn=zeit(8), ende=zeit(16))

    assert Sollzeit.objects.filter(user=mitarbeiter).count() == 1


@pytest.mark.django_db
def test_user_loeschen_entfernt_alles(mitarbeiter, zeit, django_capture_on_commit_callbacks):
    Sollzeit.objects.create(user=mitarbeiter, beginn=zeit(8), ende=zeit(16))
    Zeiterfassung.objects.create(user=mitarbeiter, einstempeln=zeit(8), ausstempeln=zeit(12))
    user_id = mitarbeiter.pk

    with django_capture_on_commit_callbacks(execute=True):
        mitarbeiter.delete()

    assert not Profil.objects.filter(user_id=user_id).exists()
    assert not Sollzeit.objects.filter(user_id=user_id).exists()
    assert not Zeiterfassung.objects.filter(user_id=user_id).exists()


@pytest.mark.django_db
@pytest.mark.parametrize('email, superuser, rolle', [
    ('max@firma.de', False, 'employee'),
    ('chef@admin.firma.de', False, 'admin'),
    ('chef@manager.firma.de', False, 'admin'),
    ('lea@lead.firma.de', False, 'manager'),
    ('sam@supervisor.firma.de', False, 'manager'),
    ('root@firma.de', True, 'admin'),
])
def test_profil_wird_mit_startrolle_angelegt(email, superuser, rolle):
    if superuser:
        user = User.objects.create_superuser('neu', email=email, password='geheim123')
    else:
        user = User.objects.create_user('neu', email=email, password='geheim123')

    profil = Profil.objects.get(user=user)
    assert profil.rolle == rolle
    assert profil.stunden_saldo == Decimal('0.00')
    assert User.objects.get(pk=user.pk).is_staff == (rolle == 'admin')
