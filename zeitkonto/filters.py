"""
Django-Filter fuer den Datenexport
"""
import django_filters

from .models import Sollzeit, Zeiterfassung


class ZeiterfassungExportFilter(django_filters.FilterSet):
    """Zeitraum bezieht sich auf das Einstempeln."""

    start_datum = django_filters.DateTimeFilter(
        field_name="einstempeln",
        lookup_expr="gte",
    )
    ende_datum = django_filters.DateTimeFilter(
        field_name="einstempeln",
        lookup_expr="lte",
    )
    user = django_filters.NumberFilter(field_name="user_id")

    class Meta:
        model = Zeiterfassung
        fields = []


class SollzeitExportFilter(django_filters.FilterSet):
    """Zeitraum bezieht sich auf den Schichtbeginn."""

    start_datum = django_filters.DateTimeFilter(
        field_name="beginn",
        lookup_expr="gte",
    )
    ende_datum = django_filters.DateTimeFilter(
        field_name="beginn",
        lookup_expr="lte",
    )
    user = django_filters.NumberFilter(field_name="user_id")

    class Meta:
        model = Sollzeit
        fields = []
