# Seeds the rooms and restriction kinds the site ships with.

from django.core.management.color import no_style
from django.db import migrations

ROOMS = [
    (1, "General's Quarters"),
    (2, "Major's Suite"),
]

RESTRICTIONS = [
    (1, "Reservation"),
    (2, "Owner Block"),
]


def seed_reference_data(apps, schema_editor):
    Room = apps.get_model("bookings", "Room")
    Restriction = apps.get_model("bookings", "Restriction")

    for pk, name in ROOMS:
        Room.objects.update_or_create(pk=pk, defaults={"room_name": name})

    for pk, name in RESTRICTIONS:
        Restriction.objects.update_or_create(pk=pk, defaults={"restriction_name": name})

    # Rows were inserted with explicit keys; move sequences past them.
    connection = schema_editor.connection
    for sql in connection.ops.sequence_reset_sql(no_style(), [Room, Restriction]):
        schema_editor.execute(sql)


def remove_reference_data(apps, schema_editor):
    Room = apps.get_model("bookings", "Room")
    Restriction = apps.get_model("bookings", "Restriction")

    Room.objects.filter(pk__in=[pk for pk, _ in ROOMS]).delete()
    Restriction.objects.filter(pk__in=[pk for pk, _ in RESTRICTIONS]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_reference_data, remove_reference_data),
    ]
