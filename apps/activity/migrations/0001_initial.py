# Generated manually for the activity app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('groups', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ActivityEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('createGroup', 'Group created'), ('joinGroup', 'Member joined'), ('leaveGroup', 'Member left'), ('changeOwner', 'Ownership changed'), ('changeGroupName', 'Group renamed'), ('changeGroupImage', 'Group image changed'), ('changeGroupDescription', 'Group description changed'), ('addExpense', 'Expense added'), ('editExpense', 'Expense edited'), ('deleteExpense', 'Expense deleted'), ('reminder', 'Debt reminder')], max_length=32)),
                ('content', models.TextField()),
                ('date', models.DateTimeField(auto_now_add=True)),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activity_entries', to=settings.AUTH_USER_MODEL)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activity', to='groups.group')),
            ],
            options={
                'db_table': 'activity_entries',
                'ordering': ['-date'],
                'verbose_name_plural': 'activity entries',
                'indexes': [
                    models.Index(fields=['group', '-date'], name='activity_en_group_i_5d0b7c_idx'),
                ],
            },
        ),
    ]
