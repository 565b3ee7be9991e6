import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Course',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('code', models.CharField(db_index=True, max_length=10, unique=True, validators=[django.core.validators.RegexValidator(message='Course code must be in format like CS101, MATH2001', regex='^[A-Z]{2,4}[0-9]{3,4}$')], verbose_name='Code')),
                ('title', models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(3)], verbose_name='Title')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('credits', models.PositiveSmallIntegerField(default=3, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(6)])),
                ('department', models.CharField(max_length=50, validators=[django.core.validators.MinLengthValidator(2)])),
                ('semester', models.CharField(choices=[('Spring', 'Spring'), ('Summer', 'Summer'), ('Fall', 'Fall'), ('Winter', 'Winter')], max_length=10)),
                ('year', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(2020), django.core.validators.MaxValueValidator(2030)])),
                ('max_students', models.PositiveIntegerField(default=30, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(200)], verbose_name='Capacity')),
                ('current_enrollment', models.PositiveIntegerField(default=0, help_text='Number of enrollments with status "enrolled"')),
                ('schedule', models.JSONField(blank=True, default=list, help_text='[{"day": "Mon", "start": "09:00", "end": "10:30"}, ...]')),
                ('location', models.CharField(blank=True, max_length=100)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('start_date', models.DateTimeField()),
                ('end_date', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('instructor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='courses_taught', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Course',
                'verbose_name_plural': 'Courses',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['department', 'semester', 'year'], name='course_dept_term_idx'),
                    models.Index(fields=['instructor', 'is_active'], name='course_instructor_active_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(current_enrollment__gte=0), name='course_enrollment_non_negative'),
                    models.CheckConstraint(condition=models.Q(current_enrollment__lte=models.F('max_students')), name='course_enrollment_within_capacity'),
                    models.CheckConstraint(condition=models.Q(end_date__gt=models.F('start_date')), name='course_end_after_start'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Enrollment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('enrolled', 'Enrolled'), ('completed', 'Completed'), ('dropped', 'Dropped'), ('withdrawn', 'Withdrawn')], db_index=True, default='enrolled', max_length=20)),
                ('grade', models.CharField(blank=True, choices=[('A+', 'A+'), ('A', 'A'), ('A-', 'A-'), ('B+', 'B+'), ('B', 'B'), ('B-', 'B-'), ('C+', 'C+'), ('C', 'C'), ('C-', 'C-'), ('D+', 'D+'), ('D', 'D'), ('D-', 'D-'), ('F', 'F'), ('I', 'Incomplete'), ('W', 'Withdrawn')], max_length=2, null=True)),
                ('grade_points', models.DecimalField(blank=True, decimal_places=2, max_digits=3, null=True, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(4)])),
                ('enrollment_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('completion_date', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to='courses.course')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Enrollment',
                'verbose_name_plural': 'Enrollments',
                'ordering': ['-enrollment_date', '-id'],
                'indexes': [
                    models.Index(fields=['student', 'status'], name='enrollment_student_status_idx'),
                    models.Index(fields=['course', 'status'], name='enrollment_course_status_idx'),
                ],
                'unique_together': {('student', 'course')},
            },
        ),
    ]
