"""
Django Signals fuer Saldo-Neuberechnung und Profilanlage.
"""
import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.db import transaction
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from .berechtigungen import standardrolle
from .models import Profil, Sollzeit, Zeiterfassung
from .trigger import SOLLZEIT, ZEITERFASSUNG, DatensatzGeaendert, behandle_aenderung

logger = logging.getLogger(__name__)

ARTEN = {
    Sollzeit: SOLLZEIT,
    Zeiterfassung: ZEITERFASSUNG,
}


def _stand(instance, user_id=None):
    return {
        'id': instance.pk,
        'user_id': instance.user_id if user_id is None else user_id,
    }


def _plane_neuberechnung(ereignis):
    """Neuberechnung erst nach erfolgreichem Commit der Aenderung."""
    if not getattr(settings, 'ZEITKONTO_AUTO_NEUBERECHNUNG', True):
        return
    transaction.on_commit(lambda: behandle_aenderung(ereignis))


@receiver(pre_save, sender=Sollzeit)
@receiver(pre_save, sender=Zeiterfassung)
def gespeicherten_user_merken(sender, instance, raw=False, **kwargs):
    """Bisherigen User aus der DB merken (z.B. Schicht an Kollegin uebergeben)."""
    instance._vorher_user_id = None
    if raw or instance.pk is None:
        return
    instance._vorher_user_id = (
        sender.objects.filter(pk=instance.pk)
        .values_list('user_id', flat=True)
        .first()
    )


@receiver(post_save, sender=Sollzeit)
@receiver(post_save, sender=Zeiterfassung)
def saldo_nach_speichern(sender, instance, created, raw=False, **kwargs):
    """Soll-/Ist-Zeit angelegt oder geaendert."""
    if raw:
        return
    vorher_user_id = getattr(instance, '_vorher_user_id', None)
    vorher = None
    if not created and vorher_user_id is not None:
        vorher = _stand(instance, vorher_user_id)
    _plane_neuberechnung(DatensatzGeaendert(ARTEN[sender], vorher, _stand(instance)))


@receiver(post_delete, sender=Sollzeit)
@receiver(post_delete, sender=Zeiterfassung)
def saldo_nach_loeschen(sender, instance, **kwargs):
    """Soll-/Ist-Zeit geloescht: User aus dem Vorher-Stand."""
    _plane_neuberechnung(DatensatzGeaendert(ARTEN[sender], _stand(instance), None))


@receiver(post_save, sender=User)
def profil_anlegen(sender, instance, created, raw=False, **kwargs):
    """Legt zu jedem neuen Account ein Profil mit Startrolle an."""
    if not created or raw:
        return

    rolle = standardrolle(instance)
    Profil.objects.get_or_create(user=instance, defaults={'rolle': rolle})

    if rolle == 'admin' and not instance.is_staff:
        User.objects.filter(pk=instance.pk).update(is_staff=True)
        instance.is_staff = True

    logger.info(
        'Profil fuer %s mit Rolle %s angelegt',
        instance.email or instance.username,
        rolle,
    )
