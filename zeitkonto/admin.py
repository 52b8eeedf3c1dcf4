from django.contrib import admin, messages

from .exceptions import SaldoFehler
from .models import Abteilung, Profil, Sollzeit, Zeiterfassung
from .services import SaldoService


@admin.register(Abteilung)
class AbteilungAdmin(admin.ModelAdmin):
    list_display = ['name', 'farbe']
    search_fields = ['name']


@admin.register(Profil)
class ProfilAdmin(admin.ModelAdmin):
    list_display = [
        'user',
        'get_vollname',
        'rolle',
        'abteilung',
        'get_saldo_formatiert',
        'aktiv',
        'updated_at',
    ]

    list_filter = [
        'rolle',
        'aktiv',
        'abteilung',
    ]

    search_fields = [
        'user__username',
        'user__first_name',
        'user__last_name',
        'user__email',
    ]

    # Saldo wird nur berechnet, nie von Hand gepflegt
    readonly_fields = [
        'stunden_saldo',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Basisdaten', {
            'fields': ('user', 'rolle', 'abteilung', 'telefon', 'aktiv')
        }),
        ('Stundensaldo', {
            'fields': ('stunden_saldo',)
        }),
        ('Meta', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['saldo_neu_berechnen']

    def get_vollname(self, obj):
        return obj.vollname
    get_vollname.short_description = 'Name'

    def get_saldo_formatiert(self, obj):
        return obj.saldo_formatiert
    get_saldo_formatiert.short_description = 'Saldo'

    def saldo_neu_berechnen(self, request, queryset):
        """Admin-Action: Saldo neu berechnen"""
        service = SaldoService()
        count = 0
        for profil in queryset:
            try:
                service.neu_berechnen(profil.user_id)
            except SaldoFehler as e:
                self.message_user(
                    request,
                    f"{profil.vollname}: {e.message}",
                    level=messages.ERROR,
                )
                continue
            count += 1

        self.message_user(
            request,
            f"{count} Salden erfolgreich neu berechnet!"
        )
    saldo_neu_berechnen.short_description = "Saldo neu berechnen"


@admin.register(Sollzeit)
class SollzeitAdmin(admin.ModelAdmin):
    list_display = ['user', 'titel', 'beginn', 'ende', 'schichttyp', 'abteilung']
    list_filter = ['schichttyp', 'abteilung']
    search_fields = ['user__username', 'user__last_name', 'titel', 'ort']
    date_hierarchy = 'beginn'


@admin.register(Zeiterfassung)
class ZeiterfassungAdmin(admin.ModelAdmin):
    list_display = ['user', 'einstempeln', 'ausstempeln', 'gesamt_stunden']
    search_fields = ['user__username', 'user__last_name']
    date_hierarchy = 'einstempeln'
