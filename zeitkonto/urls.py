from django.urls import path
from . import views

app_name = 'zeitkonto'

urlpatterns = [
    # Saldo
    path('api/saldo/berechnen/', views.saldo_berechnen, name='saldo_berechnen'),
    path('api/saldo/alle-neu-berechnen/', views.alle_neu_berechnen, name='alle_neu_berechnen'),

    # Verwaltung
    path('api/benutzer/rolle/', views.rolle_aendern, name='rolle_aendern'),
    path('api/export/', views.export, name='export'),
    path('api/profil/', views.mein_profil, name='mein_profil'),

    # Aenderungs-Webhook
    path('api/aenderungen/', views.aenderung_melden, name='aenderung_melden'),
]
