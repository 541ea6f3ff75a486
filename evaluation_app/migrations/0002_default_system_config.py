from django.db import migrations


def create_config(apps, schema_editor):
    SystemConfig = apps.get_model("evaluation_app", "SystemConfig")
    if not SystemConfig.objects.exists():
        SystemConfig.objects.create()


class Migration(migrations.Migration):

    dependencies = [
        ("evaluation_app", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_config, migrations.RunPython.noop),
    ]
