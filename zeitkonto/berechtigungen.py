"""
Rollenpruefung fuer die Saldo-Operationen.

Rollen stehen im Profil (employee, manager, admin). Superuser
gelten immer als admin.
"""
from .exceptions import KeineBerechtigung, NichtAngemeldet
from .models import Profil


def standardrolle(user):
    """Startrolle fuer einen neuen Account, abgeleitet aus der E-Mail-Domain."""
    if user.is_superuser:
        return 'admin'
    email = (user.email or '').lower()
    if '@admin.' in email or '@manager.' in email:
        return 'admin'
    if '@lead.' in email or '@supervisor.' in email:
        return 'manager'
    return 'employee'


def rolle_von(user):
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser:
        return 'admin'
    try:
        return user.profil.rolle
    except Profil.DoesNotExist:
        return None


def pruefe_angemeldet(user):
    if user is None or not user.is_authenticated:
        raise NichtAngemeldet('Anmeldung erforderlich')


def pruefe_rolle(user, rollen):
    pruefe_angemeldet(user)
    if rolle_von(user) not in rollen:
        raise KeineBerechtigung('Keine Berechtigung')
