import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import vocab.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Word',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('text', models.CharField(max_length=200)),
                ('part_of_speech', models.CharField(choices=[('noun', 'Noun'), ('verb', 'Verb'), ('adjective', 'Adjective'), ('adverb', 'Adverb'), ('preposition', 'Preposition')], default='noun', max_length=20)),
                ('pronunciation', models.CharField(blank=True, max_length=200)),
                ('definition', models.TextField(blank=True)),
                ('past', models.CharField(blank=True, max_length=200)),
                ('past_participle', models.CharField(blank=True, max_length=200)),
                ('translation', models.CharField(blank=True, max_length=200)),
                ('difficulty', models.CharField(choices=[('A1', 'A1 Beginner'), ('A2', 'A2 Elementary'), ('B1', 'B1 Intermediate'), ('B2', 'B2 Upper Intermediate'), ('C1', 'C1 Advanced'), ('C2', 'C2 Proficient')], default='A1', max_length=2)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'ordering': ['text'],
                'unique_together': {('text', 'part_of_speech')},
            },
        ),
        migrations.CreateModel(
            name='Example',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sentence', models.TextField()),
                ('translation', models.TextField(blank=True)),
                ('word', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='examples', to='vocab.word')),
            ],
            options={
                'ordering': ['pk'],
            },
        ),
        migrations.CreateModel(
            name='LearnerProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('new_words_per_session', models.IntegerField(default=vocab.models.default_new_words_per_session)),
                ('max_reviews_per_session', models.IntegerField(default=vocab.models.default_max_reviews_per_session)),
                ('words_learned', models.IntegerField(default=0)),
                ('current_streak', models.IntegerField(default=0)),
                ('longest_streak', models.IntegerField(default=0)),
                ('last_study_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='learner_profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='WordProgress',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ease_factor', models.FloatField(default=2.5)),
                ('interval', models.IntegerField(default=0)),
                ('repetitions', models.IntegerField(default=0)),
                ('next_review', models.DateTimeField(default=django.utils.timezone.now)),
                ('last_reviewed', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='word_progress', to=settings.AUTH_USER_MODEL)),
                ('word', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='progress', to='vocab.word')),
            ],
            options={
                'verbose_name_plural': 'Word progress',
                'ordering': ['next_review'],
                'unique_together': {('user', 'word')},
            },
        ),
        migrations.CreateModel(
            name='ReviewLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quality', models.IntegerField()),
                ('ease_factor_before', models.FloatField()),
                ('ease_factor_after', models.FloatField()),
                ('interval_before', models.IntegerField()),
                ('interval_after', models.IntegerField()),
                ('reviewed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('progress', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_logs', to='vocab.wordprogress')),
            ],
            options={
                'ordering': ['-reviewed_at'],
            },
        ),
    ]
