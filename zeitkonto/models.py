"""
Django Models für Soll-Zeiten, Ist-Zeiten und Stundensaldo
"""
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models


ROLLE_CHOICES = [
    ('employee', 'Mitarbeiter'),
    ('manager', 'Manager'),
    ('admin', 'Administrator'),
]

GUELTIGE_ROLLEN = [wert for wert, _ in ROLLE_CHOICES]


class Abteilung(models.Model):
    """Abteilung, der Mitarbeiter und Schichten zugeordnet werden."""
    name = models.CharField(max_length=100, unique=True)
    farbe = models.CharField(max_length=7, default='#6c757d')

    class Meta:
        verbose_name = "Abteilung"
        verbose_name_plural = "Abteilungen"
        ordering = ['name']

    def __str__(self):
        return self.name


class Profil(models.Model):
    """
    Mitarbeiterprofil zum Login-Account.

    stunden_saldo ist ein abgeleiteter Wert (Ist - Soll) und wird
    ausschließlich über den SaldoService geschrieben.
    """

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='profil'
    )

    rolle = models.CharField(
        max_length=20,
        choices=ROLLE_CHOICES,
        default='employee'
    )

    abteilung = models.ForeignKey(
        Abteilung,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='profile'
    )

    telefon = models.CharField(max_length=30, blank=True, default='')
    aktiv = models.BooleanField(default=True)

    stunden_saldo = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        verbose_name="Stundensaldo",
        help_text="Ist-Stunden minus Soll-Stunden, automatisch berechnet"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Profil"
        verbose_name_plural = "Profile"
        ordering = ['user__last_name', 'user__first_name']

    def __str__(self):
        return f"{self.vollname} ({self.get_rolle_display()})"

    @property
    def vollname(self):
        name = f"{self.user.first_name} {self.user.last_name}".strip()
        return name or self.user.username

    @property
    def saldo_formatiert(self):
        """Saldo als +/-H:MMh (z.B. '-1:30h')"""
        minuten_gesamt = int(round(abs(self.stunden_saldo) * 60))
        vz = "-" if self.stunden_saldo < 0 else "+"
        return f"{vz}{minuten_gesamt // 60}:{minuten_gesamt % 60:02d}h"


class Sollzeit(models.Model):
    """Geplante Schicht (Soll-Zeit) eines Mitarbeiters"""

    SCHICHTTYP_CHOICES = [
        ('frueh', 'Frühschicht'),
        ('spaet', 'Spätschicht'),
        ('nacht', 'Nachtschicht'),
        ('tag', 'Tagdienst'),
    ]

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sollzeiten'
    )
    titel = models.CharField(max_length=200, blank=True)

    beginn = models.DateTimeField()
    ende = models.DateTimeField()

    ort = models.CharField(max_length=200, blank=True)
    schichttyp = models.CharField(
        max_length=20,
        choices=SCHICHTTYP_CHOICES,
        blank=True
    )
    abteilung = models.ForeignKey(
        Abteilung,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sollzeiten'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Soll-Zeit"
        verbose_name_plural = "Soll-Zeiten"
        ordering = ['-beginn']

    def __str__(self):
        return f"{self.user.username} - {self.beginn:%d.%m.%Y %H:%M}"

    @property
    def dauer_stunden(self):
        return (self.ende - self.beginn).total_seconds() / 3600

    def clean(self):
        if self.beginn and self.ende and self.ende < self.beginn:
            raise ValidationError("Ende muss nach Beginn liegen.")


class Zeiterfassung(models.Model):
    """Erfasste Arbeitszeit (Ist-Zeit) mit Ein- und Ausstempeln"""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='zeiterfassungen'
    )

    einstempeln = models.DateTimeField()
    ausstempeln = models.DateTimeField(null=True, blank=True)

    # Optional vorberechnet, hat Vorrang vor ausstempeln - einstempeln
    gesamt_stunden = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True
    )

    bemerkung = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Zeiterfassung"
        verbose_name_plural = "Zeiterfassungen"
        ordering = ['-einstempeln']

    def __str__(self):
        return f"{self.user.username} - {self.einstempeln:%d.%m.%Y %H:%M}"

    @property
    def abgeschlossen(self):
        return self.ausstempeln is not None

    def clean(self):
        if self.ausstempeln and self.ausstempeln < self.einstempeln:
            raise ValidationError("Ausstempeln muss nach Einstempeln liegen.")
