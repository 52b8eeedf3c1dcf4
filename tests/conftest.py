from datetime import datetime

import pytest
from django.contrib.auth.models import User
from django.utils import timezone


@pytest.fixture
def zeit():
    """Zeitpunkt im Maerz 2025 (lokale Zeitzone, timezone-aware)."""
    def _zeit(stunde, minute=0, tag=3):
        return timezone.make_aware(datetime(2025, 3, tag, stunde, minute))
    return _zeit


@pytest.fixture
def mitarbeiter(db):
    return User.objects.create_user(
        'max',
        email='max@firma.de',
        password='geheim123',
        first_name='Max',
        last_name='Mustermann',
    )


@pytest.fixture
def kollegin(db):
    return User.objects.create_user(
        'erika',
        email='erika@firma.de',
        password='geheim123',
        first_name='Erika',
        last_name='Musterfrau',
    )


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        'lea',
        email='lea@lead.firma.de',
        password='geheim123',
        first_name='Lea',
        last_name='Leitung',
    )


@pytest.fixture
def app_admin(db):
    return User.objects.create_user(
        'ada',
        email='ada@admin.firma.de',
        password='geheim123',
        first_name='Ada',
        last_name='Admin',
    )


@pytest.fixture
def dokumente(zeit):
    """Sammlungen im Firestore-Format fuer zwei User."""
    return {
        'users': {
            'u1': {'email': 'max@firma.de', 'role': 'employee', 'hours_saldo': 0.0},
            'u2': {'email': 'erika@firma.de', 'role': 'employee', 'hours_saldo': 0.0},
        },
        'schedules': {
            's1': {'userId': 'u1', 'startTime': zeit(9), 'endTime': zeit(17)},
            's2': {'userId': 'u1', 'startTime': zeit(9, tag=4), 'endTime': zeit(13, tag=4)},
            's3': {'userId': 'u2', 'startTime': zeit(8), 'endTime': zeit(16)},
        },
        'timerecords': {
            't1': {'userId': 'u1', 'checkIn': zeit(9), 'checkOut': zeit(17), 'totalHours': 7.5},
            't2': {'userId': 'u1', 'checkIn': zeit(10, tag=4), 'checkOut': zeit(14, 30, tag=4)},
            't3': {'userId': 'u1', 'checkIn': zeit(8, tag=5), 'checkOut': None},
            't4': {'userId': 'u2', 'checkIn': zeit(8, 15), 'checkOut': zeit(17)},
        },
    }
