"""
Recompute Course.current_enrollment from the enrolled rows.

Usage:
    # All courses
    python manage.py recount_enrollments

    # Specific courses by code
    python manage.py recount_enrollments --course CS101 --course MATH2001
"""

from django.core.management.base import BaseCommand, CommandError

from courses.models import Course
from courses.services.enrollment_service import recount_enrollments


class Command(BaseCommand):
    help = 'Recompute course enrollment counters from enrolled rows'

    def add_arguments(self, parser):
        parser.add_argument(
            '--course', action='append', dest='codes', default=[],
            help='Course code to recount (repeatable); all courses when omitted',
        )

    def handle(self, *args, **options):
        codes = [code.strip().upper() for code in options['codes']]

        course_ids = None
        if codes:
            found = dict(Course.objects.filter(code__in=codes).values_list('code', 'pk'))
            missing = sorted(set(codes) - set(found))
            if missing:
                raise CommandError(f'Unknown course code(s): {", ".join(missing)}')
            course_ids = list(found.values())

        corrected = recount_enrollments(course_ids)

        if corrected:
            self.stdout.write(self.style.WARNING(f'Corrected {corrected} course counter(s)'))
        else:
            self.stdout.write(self.style.SUCCESS('All course counters are consistent'))
