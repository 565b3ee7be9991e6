"""
Course Tests — enrollment lifecycle, capacity accounting, listings and
the HTTP envelope.

Tests cover:
1. Enroll (capacity, duplicates, inactive courses)
2. Status changes and the enrollment counter
3. Drop / withdraw
4. Concurrent enrollment into the last seat
5. Recount
6. Listings and pagination
7. API endpoints
"""

from datetime import timedelta
from decimal import Decimal
import threading
import uuid

from django.core.management import call_command
from django.db import IntegrityError, connection, transaction
from django.db.models import F
from django.test import TestCase, TransactionTestCase
from django.utils import timezone
from io import StringIO
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from users.models import User, UserRole
from courses.exceptions import AlreadyEnrolled, CourseFull, CourseNotFound, Forbidden
from courses.models import Course, Enrollment, EnrollmentStatus, Semester
from courses.services.enrollment_service import (
    _claim_seat, _release_seat, change_status, enroll_student,
    recount_enrollments, update_enrollment, withdraw,
)
from courses.services.listing_service import (
    list_course_roster, list_courses, list_instructor_courses, list_student_enrollments,
)


class CourseTestBase(TestCase):
    """Shared users and a helper to create courses."""

    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@test.com', password='Testpass123', role=UserRole.ADMIN,
        )
        self.instructor = User.objects.create_user(
            email='prof@test.com', password='Testpass123', role=UserRole.INSTRUCTOR,
        )
        self.other_instructor = User.objects.create_user(
            email='prof2@test.com', password='Testpass123', role=UserRole.INSTRUCTOR,
        )
        self.student = User.objects.create_user(
            email='alice@test.com', password='Testpass123',
        )
        self.student2 = User.objects.create_user(
            email='bob@test.com', password='Testpass123',
        )
        self.course = self.make_course(code='CS101', max_students=2)

    _code_seq = 0

    def make_course(self, code=None, instructor=None, started=False, **kwargs):
        if code is None:
            CourseTestBase._code_seq += 1
            code = f'TST{1000 + CourseTestBase._code_seq}'
        now = timezone.now()
        start = now - timedelta(days=10) if started else now + timedelta(days=30)
        defaults = {
            'title': f'Course {code}',
            'department': 'Computer Science',
            'semester': Semester.FALL,
            'year': 2026,
            'max_students': 30,
            'start_date': start,
            'end_date': start + timedelta(days=90),
        }
        defaults.update(kwargs)
        return Course.objects.create(
            code=code, instructor=instructor or self.instructor, **defaults,
        )

    def make_student(self, n):
        return User.objects.create_user(email=f'student{n}@test.com', password='Testpass123')

    def counter(self, course):
        course.refresh_from_db()
        return course.current_enrollment


# ═════════════════════════════════════════════════════════════════════════════
# 1. ENROLL
# ═════════════════════════════════════════════════════════════════════════════

class EnrollTests(CourseTestBase):

    def test_enroll_takes_a_seat(self):
        enrollment = enroll_student(self.student, self.course.pk)
        self.assertEqual(enrollment.status, EnrollmentStatus.ENROLLED)
        self.assertEqual(enrollment.student, self.student)
        self.assertEqual(self.counter(self.course), 1)

    def test_enroll_full_course_refused(self):
        course = self.make_course(max_students=1)
        enroll_student(self.student, course.pk)
        with self.assertRaises(CourseFull):
            enroll_student(self.student2, course.pk)
        self.assertEqual(self.counter(course), 1)
        self.assertFalse(Enrollment.objects.filter(student=self.student2, course=course).exists())

    def test_enroll_twice_counts_once(self):
        enroll_student(self.student, self.course.pk)
        with self.assertRaises(AlreadyEnrolled):
            enroll_student(self.student, self.course.pk)
        self.assertEqual(self.counter(self.course), 1)
        self.assertEqual(Enrollment.objects.filter(course=self.course).count(), 1)

    def test_dropped_student_cannot_enroll_again(self):
        enrollment = enroll_student(self.student, self.course.pk)
        change_status(enrollment.pk, EnrollmentStatus.DROPPED, self.instructor)
        with self.assertRaises(AlreadyEnrolled):
            enroll_student(self.student, self.course.pk)
        self.assertEqual(self.counter(self.course), 0)

    def test_inactive_course_refused(self):
        course = self.make_course(is_active=False)
        with self.assertRaises(CourseNotFound):
            enroll_student(self.student, course.pk)
        self.assertEqual(self.counter(course), 0)

    def test_unknown_course_refused(self):
        with self.assertRaises(CourseNotFound):
            enroll_student(self.student, uuid.uuid4())

    def test_last_seat_scenario(self):
        """max=1: the first student gets the seat, the second is refused."""
        course = self.make_course(max_students=1)
        enroll_student(self.student, course.pk)
        self.assertEqual(self.counter(course), 1)
        with self.assertRaises(CourseFull):
            enroll_student(self.student2, course.pk)
        self.assertEqual(self.counter(course), 1)


# ═════════════════════════════════════════════════════════════════════════════
# 2. STATUS CHANGES
# ═════════════════════════════════════════════════════════════════════════════

class StatusChangeTests(CourseTestBase):

    def setUp(self):
        super().setUp()
        self.enrollment = enroll_student(self.student, self.course.pk)

    def test_enrolled_to_dropped_releases_seat(self):
        change_status(self.enrollment.pk, EnrollmentStatus.DROPPED, self.instructor)
        self.assertEqual(self.counter(self.course), 0)

    def test_dropped_to_enrolled_takes_seat(self):
        change_status(self.enrollment.pk, EnrollmentStatus.DROPPED, self.instructor)
        change_status(self.enrollment.pk, EnrollmentStatus.ENROLLED, self.instructor)
        self.assertEqual(self.counter(self.course), 1)

    def test_completed_to_withdrawn_leaves_counter(self):
        enrollment = change_status(self.enrollment.pk, EnrollmentStatus.COMPLETED, self.instructor)
        self.assertEqual(self.counter(self.course), 0)
        self.assertIsNotNone(enrollment.completion_date)

        change_status(self.enrollment.pk, EnrollmentStatus.WITHDRAWN, self.admin)
        self.assertEqual(self.counter(self.course), 0)

    def test_same_status_is_a_no_op(self):
        change_status(self.enrollment.pk, EnrollmentStatus.ENROLLED, self.instructor)
        self.assertEqual(self.counter(self.course), 1)

    def test_reenroll_into_full_course_refused(self):
        change_status(self.enrollment.pk, EnrollmentStatus.DROPPED, self.instructor)
        enroll_student(self.student2, self.course.pk)
        enroll_student(self.make_student(3), self.course.pk)

        with self.assertRaises(CourseFull):
            change_status(self.enrollment.pk, EnrollmentStatus.ENROLLED, self.instructor)

        self.enrollment.refresh_from_db()
        self.assertEqual(self.enrollment.status, EnrollmentStatus.DROPPED)
        self.assertEqual(self.counter(self.course), 2)

    def test_grading(self):
        enrollment = update_enrollment(
            self.enrollment.pk, self.instructor,
            status=EnrollmentStatus.COMPLETED, grade='A', grade_points=Decimal('4.00'),
        )
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.grade, 'A')
        self.assertEqual(enrollment.grade_points, Decimal('4.00'))
        self.assertEqual(enrollment.status, EnrollmentStatus.COMPLETED)

    def test_other_instructor_cannot_grade(self):
        with self.assertRaises(Forbidden):
            update_enrollment(self.enrollment.pk, self.other_instructor, grade='A')

    def test_student_may_drop_own_enrollment(self):
        change_status(self.enrollment.pk, EnrollmentStatus.DROPPED, self.student)
        self.assertEqual(self.counter(self.course), 0)

    def test_withdrawn_status_stamps_completion_date(self):
        enrollment = change_status(self.enrollment.pk, EnrollmentStatus.WITHDRAWN, self.student)
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.status, EnrollmentStatus.WITHDRAWN)
        self.assertIsNotNone(enrollment.completion_date)
        self.assertEqual(self.counter(self.course), 0)

    def test_student_cannot_grade_themselves(self):
        with self.assertRaises(Forbidden):
            update_enrollment(self.enrollment.pk, self.student, grade='A')
        with self.assertRaises(Forbidden):
            change_status(self.enrollment.pk, EnrollmentStatus.COMPLETED, self.student)
        self.assertEqual(self.counter(self.course), 1)

    def test_other_student_cannot_drop(self):
        with self.assertRaises(Forbidden):
            change_status(self.enrollment.pk, EnrollmentStatus.DROPPED, self.student2)
        self.assertEqual(self.counter(self.course), 1)

    def test_unknown_status_rejected(self):
        with self.assertRaises(ValueError):
            change_status(self.enrollment.pk, 'graduated', self.instructor)


# ═════════════════════════════════════════════════════════════════════════════
# 3. DROP / WITHDRAW
# ═════════════════════════════════════════════════════════════════════════════

class WithdrawTests(CourseTestBase):

    def test_drop_before_start_removes_row(self):
        enrollment = enroll_student(self.student, self.course.pk)
        outcome, _ = withdraw(enrollment.pk, self.student)

        self.assertEqual(outcome, EnrollmentStatus.DROPPED)
        self.assertFalse(Enrollment.objects.filter(pk=enrollment.pk).exists())
        self.assertEqual(self.counter(self.course), 0)

    def test_drop_before_start_of_completed_row_keeps_counter(self):
        enroll_student(self.student2, self.course.pk)
        enrollment = enroll_student(self.student, self.course.pk)
        change_status(enrollment.pk, EnrollmentStatus.COMPLETED, self.instructor)
        self.assertEqual(self.counter(self.course), 1)

        withdraw(enrollment.pk, self.admin)
        self.assertEqual(self.counter(self.course), 1)

    def test_withdraw_after_start_keeps_row(self):
        course = self.make_course(started=True)
        enrollment = enroll_student(self.student, course.pk)
        outcome, result = withdraw(enrollment.pk, self.student)

        self.assertEqual(outcome, EnrollmentStatus.WITHDRAWN)
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.status, EnrollmentStatus.WITHDRAWN)
        self.assertIsNotNone(enrollment.completion_date)
        self.assertEqual(result.course.current_enrollment, 0)
        self.assertEqual(self.counter(course), 0)

    def test_admin_may_withdraw_any_student(self):
        enrollment = enroll_student(self.student, self.course.pk)
        outcome, _ = withdraw(enrollment.pk, self.admin)
        self.assertEqual(outcome, EnrollmentStatus.DROPPED)

    def test_instructor_and_other_students_cannot_withdraw(self):
        enrollment = enroll_student(self.student, self.course.pk)
        with self.assertRaises(Forbidden):
            withdraw(enrollment.pk, self.student2)
        with self.assertRaises(Forbidden):
            withdraw(enrollment.pk, self.instructor)
        self.assertEqual(self.counter(self.course), 1)


# ═════════════════════════════════════════════════════════════════════════════
# 4. CONCURRENCY & COUNTER BOUNDS
# ═════════════════════════════════════════════════════════════════════════════

class ConcurrentEnrollTests(TransactionTestCase):
    """Enrollments racing on separate connections for the last seat."""

    THREADS = 8

    def setUp(self):
        self.instructor = User.objects.create_user(
            email='prof@test.com', password='Testpass123', role=UserRole.INSTRUCTOR,
        )
        start = timezone.now() + timedelta(days=30)
        self.course = Course.objects.create(
            code='CS999', title='Last Seat', department='Computer Science',
            semester=Semester.FALL, year=2026, max_students=1,
            instructor=self.instructor,
            start_date=start, end_date=start + timedelta(days=90),
        )
        self.students = [
            User.objects.create_user(email=f'racer{n}@test.com', password='Testpass123')
            for n in range(self.THREADS)
        ]

    def test_racing_requests_for_last_seat(self):
        barrier = threading.Barrier(self.THREADS)
        results = []
        lock = threading.Lock()

        def attempt(student):
            try:
                barrier.wait()
                enroll_student(student, self.course.pk)
                outcome = 'ok'
            except CourseFull:
                outcome = 'full'
            except Exception as e:
                outcome = type(e).__name__
            finally:
                connection.close()
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=attempt, args=(s,)) for s in self.students]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(results.count('ok'), 1, results)
        self.assertEqual(results.count('full'), self.THREADS - 1, results)
        self.course.refresh_from_db()
        self.assertEqual(self.course.current_enrollment, 1)
        self.assertEqual(
            Enrollment.objects.filter(course=self.course, status=EnrollmentStatus.ENROLLED).count(), 1
        )


class CapacityTests(CourseTestBase):

    def test_claim_is_conditional(self):
        course = self.make_course(max_students=1)
        self.assertTrue(_claim_seat(course.pk))
        self.assertFalse(_claim_seat(course.pk))
        self.assertEqual(self.counter(course), 1)

    def test_release_never_goes_negative(self):
        _release_seat(self.course.pk)
        self.assertEqual(self.counter(self.course), 0)

    def test_database_rejects_counter_above_capacity(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            Course.objects.filter(pk=self.course.pk).update(
                current_enrollment=F('max_students') + 1
            )

    def test_counter_stays_within_bounds(self):
        e1 = enroll_student(self.student, self.course.pk)
        e2 = enroll_student(self.student2, self.course.pk)
        change_status(e1.pk, EnrollmentStatus.DROPPED, self.instructor)
        change_status(e2.pk, EnrollmentStatus.COMPLETED, self.instructor)
        change_status(e1.pk, EnrollmentStatus.ENROLLED, self.instructor)
        withdraw(e1.pk, self.student)

        for course in Course.objects.all():
            self.assertGreaterEqual(course.current_enrollment, 0)
            self.assertLessEqual(course.current_enrollment, course.max_students)
        self.assertEqual(self.counter(self.course), 0)


# ═════════════════════════════════════════════════════════════════════════════
# 5. RECOUNT
# ═════════════════════════════════════════════════════════════════════════════

class RecountTests(CourseTestBase):

    def test_recount_repairs_drift(self):
        enroll_student(self.student, self.course.pk)
        Course.objects.filter(pk=self.course.pk).update(current_enrollment=0)

        self.assertEqual(recount_enrollments(), 1)
        self.assertEqual(self.counter(self.course), 1)
        self.assertEqual(recount_enrollments(), 0)

    def test_recount_command(self):
        enroll_student(self.student, self.course.pk)
        Course.objects.filter(pk=self.course.pk).update(current_enrollment=2)

        out = StringIO()
        call_command('recount_enrollments', '--course', 'cs101', stdout=out)
        self.assertIn('Corrected 1', out.getvalue())
        self.assertEqual(self.counter(self.course), 1)


# ═════════════════════════════════════════════════════════════════════════════
# 6. LISTINGS
# ═════════════════════════════════════════════════════════════════════════════

class ListingTests(CourseTestBase):

    def setUp(self):
        super().setUp()
        Course.objects.all().delete()
        for i in range(25):
            self.make_course(code=f'CS{100 + i}', title=f'Intro {i}')

    def test_second_page(self):
        page = list_courses({'page': '2', 'pageSize': '10'})
        self.assertEqual(len(page['items']), 10)
        self.assertEqual(page['totalCount'], 25)
        self.assertEqual(page['totalPages'], 3)
        self.assertTrue(page['hasNextPage'])
        self.assertTrue(page['hasPreviousPage'])

    def test_pages_do_not_overlap(self):
        seen = set()
        for n in (1, 2, 3):
            page = list_courses({'page': str(n), 'limit': '10'})
            seen.update(c.pk for c in page['items'])
        self.assertEqual(len(seen), 25)

    def test_page_past_end_is_empty(self):
        page = list_courses({'page': '4', 'limit': '10'})
        self.assertEqual(page['items'], [])
        self.assertFalse(page['hasNextPage'])

    def test_out_of_range_paging_rejected(self):
        with self.assertRaises(ValidationError):
            list_courses({'limit': '101'})
        with self.assertRaises(ValidationError):
            list_courses({'page': '0'})

    def test_inactive_and_full_courses(self):
        Course.objects.filter(code='CS100').update(is_active=False)
        Course.objects.filter(code='CS101').update(max_students=1, current_enrollment=1)

        self.assertEqual(list_courses({})['totalCount'], 24)
        self.assertEqual(list_courses({'available': 'true'})['totalCount'], 23)

    def test_search_is_case_insensitive(self):
        page = list_courses({'search': 'cs12'})
        self.assertEqual({c.code for c in page['items']}, {f'CS{n}' for n in range(120, 125)})

    def test_instructor_courses_default_to_active(self):
        Course.objects.filter(code='CS100').update(is_active=False)
        self.make_course(instructor=self.other_instructor)

        self.assertEqual(list_instructor_courses(self.instructor, {})['totalCount'], 24)
        self.assertEqual(
            list_instructor_courses(self.instructor, {'status': 'all'})['totalCount'], 25,
        )
        self.assertEqual(
            list_instructor_courses(self.instructor, {'status': 'inactive'})['totalCount'], 1,
        )

    def test_student_enrollments_and_roster(self):
        cs100 = Course.objects.get(code='CS100')
        cs101 = Course.objects.get(code='CS101')
        enroll_student(self.student, cs100.pk)
        enrollment = enroll_student(self.student, cs101.pk)
        change_status(enrollment.pk, EnrollmentStatus.DROPPED, self.instructor)

        self.assertEqual(list_student_enrollments(self.student, {})['totalCount'], 2)
        self.assertEqual(
            list_student_enrollments(self.student, {'status': 'enrolled'})['totalCount'], 1,
        )
        self.assertEqual(len(list_course_roster(cs100)), 1)


# ═════════════════════════════════════════════════════════════════════════════
# 7. API
# ═════════════════════════════════════════════════════════════════════════════

class CourseAPITests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@test.com', password='Testpass123', role=UserRole.ADMIN,
        )
        self.instructor = User.objects.create_user(
            email='prof@test.com', password='Testpass123', role=UserRole.INSTRUCTOR,
        )
        self.other_instructor = User.objects.create_user(
            email='prof2@test.com', password='Testpass123', role=UserRole.INSTRUCTOR,
        )
        self.student = User.objects.create_user(
            email='alice@test.com', password='Testpass123',
        )
        self.start = timezone.now() + timedelta(days=30)
        self.course = Course.objects.create(
            code='CS101', title='Intro to CS', department='Computer Science',
            semester=Semester.FALL, year=2026, max_students=1,
            instructor=self.instructor,
            start_date=self.start, end_date=self.start + timedelta(days=90),
        )

    def course_payload(self, **overrides):
        payload = {
            'code': 'cs201',
            'title': 'Data Structures',
            'department': 'Computer Science',
            'semester': 'Fall',
            'year': 2026,
            'max_students': 40,
            'start_date': self.start.isoformat(),
            'end_date': (self.start + timedelta(days=90)).isoformat(),
        }
        payload.update(overrides)
        return payload

    # ─── Courses ────────────────────────────────────────────────────────────

    def test_catalog_is_public(self):
        response = self.client.get('/api/courses/')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['success'])
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['pagination']['totalCount'], 1)
        self.assertEqual(response.data['pagination']['pageSize'], 10)

    def test_invalid_paging_is_validation_error(self):
        response = self.client.get('/api/courses/?limit=500')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])
        self.assertIn('limit', response.data['errors'])

    def test_instructor_creates_own_course(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.post('/api/courses/', self.course_payload(), format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['data']['code'], 'CS201')
        self.assertEqual(response.data['data']['instructor']['id'], str(self.instructor.pk))
        self.assertEqual(response.data['data']['current_enrollment'], 0)

    def test_current_enrollment_cannot_be_supplied(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.post(
            '/api/courses/', self.course_payload(current_enrollment=5), format='json',
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Course.objects.get(code='CS201').current_enrollment, 0)

    def test_admin_must_name_an_instructor(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            '/api/courses/', self.course_payload(instructor=str(self.student.pk)), format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Invalid instructor')

    def test_duplicate_code_rejected(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.post('/api/courses/', self.course_payload(code='CS101'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])

    def test_end_before_start_rejected(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.post(
            '/api/courses/',
            self.course_payload(end_date=(self.start - timedelta(days=1)).isoformat()),
            format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('end_date', response.data['errors'])

    def test_student_cannot_create_course(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/courses/', self.course_payload(), format='json')
        self.assertEqual(response.status_code, 403)
        self.assertFalse(response.data['success'])

    def test_only_owner_updates_course(self):
        self.client.force_authenticate(self.other_instructor)
        response = self.client.patch(
            f'/api/courses/{self.course.pk}/', {'title': 'Hijacked'}, format='json',
        )
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.instructor)
        response = self.client.patch(
            f'/api/courses/{self.course.pk}/', {'title': 'Intro to Computing'}, format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['title'], 'Intro to Computing')

    def test_capacity_below_enrollment_rejected(self):
        course = Course.objects.create(
            code='CS301', title='Compilers', department='Computer Science',
            semester=Semester.FALL, year=2026, max_students=5, current_enrollment=3,
            instructor=self.instructor,
            start_date=self.start, end_date=self.start + timedelta(days=90),
        )
        self.client.force_authenticate(self.instructor)
        response = self.client.patch(
            f'/api/courses/{course.pk}/', {'max_students': 2}, format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('max_students', response.data['errors'])

    def test_delete_deactivates(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.delete(f'/api/courses/{self.course.pk}/')
        self.assertEqual(response.status_code, 200)
        self.course.refresh_from_db()
        self.assertFalse(self.course.is_active)

        self.client.force_authenticate(None)
        response = self.client.get(f'/api/courses/{self.course.pk}/')
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.data['success'])

    def test_roster_for_owner_only(self):
        enroll_student(self.student, self.course.pk)

        self.client.force_authenticate(self.instructor)
        response = self.client.get(f'/api/courses/{self.course.pk}/enrollments/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data['data']['enrollments']), 1)

        self.client.force_authenticate(self.student)
        response = self.client.get(f'/api/courses/{self.course.pk}/enrollments/')
        self.assertEqual(response.status_code, 403)

    def test_my_courses(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.get('/api/courses/my-courses/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['pagination']['totalCount'], 1)

        self.client.force_authenticate(self.student)
        response = self.client.get('/api/courses/my-courses/')
        self.assertEqual(response.status_code, 403)

    # ─── Enrollments ────────────────────────────────────────────────────────

    def test_enroll_via_api(self):
        self.client.force_authenticate(self.student)
        response = self.client.post(
            '/api/enrollments/', {'courseId': str(self.course.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['status'], 'enrolled')
        self.course.refresh_from_db()
        self.assertEqual(self.course.current_enrollment, 1)

        response = self.client.post(
            '/api/enrollments/', {'courseId': str(self.course.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Already enrolled in this course.')

    def test_enroll_full_course_via_api(self):
        enroll_student(
            User.objects.create_user(email='carol@test.com', password='Testpass123'),
            self.course.pk,
        )
        self.client.force_authenticate(self.student)
        response = self.client.post(
            '/api/enrollments/', {'courseId': str(self.course.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Course is full.')

    def test_enroll_requires_student(self):
        response = self.client.post(
            '/api/enrollments/', {'courseId': str(self.course.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data['success'])

        self.client.force_authenticate(self.instructor)
        response = self.client.post(
            '/api/enrollments/', {'courseId': str(self.course.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 403)

    def test_my_enrollments(self):
        enroll_student(self.student, self.course.pk)
        self.client.force_authenticate(self.student)
        response = self.client.get('/api/enrollments/my/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['course']['code'], 'CS101')

    def test_grade_via_api(self):
        enrollment = enroll_student(self.student, self.course.pk)
        self.client.force_authenticate(self.instructor)
        response = self.client.patch(
            f'/api/enrollments/{enrollment.pk}/',
            {'status': 'completed', 'grade': 'A-', 'grade_points': '3.70'},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['grade'], 'A-')
        self.course.refresh_from_db()
        self.assertEqual(self.course.current_enrollment, 0)

    def test_invalid_grade_points_rejected(self):
        enrollment = enroll_student(self.student, self.course.pk)
        self.client.force_authenticate(self.instructor)
        response = self.client.patch(
            f'/api/enrollments/{enrollment.pk}/', {'grade_points': '4.50'}, format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('grade_points', response.data['errors'])

    def test_student_cannot_grade_via_api(self):
        enrollment = enroll_student(self.student, self.course.pk)
        self.client.force_authenticate(self.student)
        response = self.client.patch(
            f'/api/enrollments/{enrollment.pk}/', {'grade': 'A+'}, format='json',
        )
        self.assertEqual(response.status_code, 403)

    def test_drop_via_api(self):
        enrollment = enroll_student(self.student, self.course.pk)
        self.client.force_authenticate(self.student)
        response = self.client.delete(f'/api/enrollments/{enrollment.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Successfully dropped from course')
        self.assertFalse(Enrollment.objects.filter(pk=enrollment.pk).exists())

    def test_unknown_enrollment_is_404(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(f'/api/enrollments/{uuid.uuid4()}/')
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.data['success'])
