from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Abteilung',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('farbe', models.CharField(default='#6c757d', max_length=7)),
            ],
            options={
                'verbose_name': 'Abteilung',
                'verbose_name_plural': 'Abteilungen',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Profil',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rolle', models.CharField(choices=[('employee', 'Mitarbeiter'), ('manager', 'Manager'), ('admin', 'Administrator')], default='employee', max_length=20)),
                ('telefon', models.CharField(blank=True, default='', max_length=30)),
                ('aktiv', models.BooleanField(default=True)),
                ('stunden_saldo', models.DecimalField(decimal_places=2, default=0, help_text='Ist-Stunden minus Soll-Stunden, automatisch berechnet', max_digits=8, verbose_name='Stundensaldo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('abteilung', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='profile', to='zeitkonto.abteilung')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profil', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Profil',
                'verbose_name_plural': 'Profile',
                'ordering': ['user__last_name', 'user__first_name'],
            },
        ),
        migrations.CreateModel(
            name='Sollzeit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('titel', models.CharField(blank=True, max_length=200)),
                ('beginn', models.DateTimeField()),
                ('ende', models.DateTimeField()),
                ('ort', models.CharField(blank=True, max_length=200)),
                ('schichttyp', models.CharField(blank=True, choices=[('frueh', 'Frühschicht'), ('spaet', 'Spätschicht'), ('nacht', 'Nachtschicht'), ('tag', 'Tagdienst')], max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('abteilung', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sollzeiten', to='zeitkonto.abteilung')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sollzeiten', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Soll-Zeit',
                'verbose_name_plural': 'Soll-Zeiten',
                'ordering': ['-beginn'],
            },
        ),
        migrations.CreateModel(
            name='Zeiterfassung',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('einstempeln', models.DateTimeField()),
                ('ausstempeln', models.DateTimeField(blank=True, null=True)),
                ('gesamt_stunden', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('bemerkung', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='zeiterfassungen', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Zeiterfassung',
                'verbose_name_plural': 'Zeiterfassungen',
                'ordering': ['-einstempeln'],
            },
        ),
    ]
