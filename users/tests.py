"""
User Tests — access policy, authentication and user management.
"""

from datetime import timedelta

from django.contrib.auth.models import AnonymousUser, Group
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase

from courses.models import Course, Enrollment, EnrollmentStatus, Semester
from courses.services.enrollment_service import change_status, enroll_student
from users import policy
from users.models import User, UserRole


def make_course(instructor, code='CS101', **kwargs):
    start = timezone.now() + timedelta(days=30)
    return Course.objects.create(
        code=code, title='Intro to CS', department='Computer Science',
        semester=Semester.FALL, year=2026, instructor=instructor,
        start_date=start, end_date=start + timedelta(days=90), **kwargs
    )


# ═════════════════════════════════════════════════════════════════════════════
# 1. ACCESS POLICY
# ═════════════════════════════════════════════════════════════════════════════

class PolicyTests(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(email='admin@test.com', role=UserRole.ADMIN)
        self.instructor = User.objects.create_user(email='prof@test.com', role=UserRole.INSTRUCTOR)
        self.other_instructor = User.objects.create_user(email='prof2@test.com', role=UserRole.INSTRUCTOR)
        self.student = User.objects.create_user(email='alice@test.com')
        self.other_student = User.objects.create_user(email='bob@test.com')
        self.anonymous = AnonymousUser()

        self.course = make_course(self.instructor)
        self.enrollment = Enrollment.objects.create(student=self.student, course=self.course)

    def test_user_rules(self):
        self.assertTrue(policy.can_read(self.student, self.student))
        self.assertFalse(policy.can_read(self.student, self.other_student))
        self.assertTrue(policy.can_read(self.admin, self.student))
        self.assertTrue(policy.can_write(self.student, self.student))
        self.assertFalse(policy.can_write(self.instructor, self.student))
        self.assertFalse(policy.can_manage_account(self.student, self.student))
        self.assertTrue(policy.can_manage_account(self.admin, self.student))

    def test_only_admin_lists_users(self):
        self.assertTrue(policy.can_list_users(self.admin))
        self.assertFalse(policy.can_list_users(self.instructor))
        self.assertFalse(policy.can_list_users(self.anonymous))

    def test_admin_cannot_delete_self(self):
        self.assertTrue(policy.can_delete_user(self.admin, self.student))
        self.assertFalse(policy.can_delete_user(self.admin, self.admin))
        self.assertFalse(policy.can_delete_user(self.student, self.other_student))

    def test_course_rules(self):
        self.assertTrue(policy.can_read(self.anonymous, self.course))
        self.assertTrue(policy.can_read(None, self.course))
        self.assertTrue(policy.can_create_course(self.instructor))
        self.assertTrue(policy.can_create_course(self.admin))
        self.assertFalse(policy.can_create_course(self.student))
        self.assertTrue(policy.can_write(self.instructor, self.course))
        self.assertTrue(policy.can_write(self.admin, self.course))
        self.assertFalse(policy.can_write(self.other_instructor, self.course))
        self.assertFalse(policy.can_write(self.student, self.course))
        self.assertTrue(policy.can_view_roster(self.instructor, self.course))
        self.assertFalse(policy.can_view_roster(self.other_instructor, self.course))

    def test_enrollment_rules(self):
        self.assertTrue(policy.can_read(self.student, self.enrollment))
        self.assertTrue(policy.can_read(self.instructor, self.enrollment))
        self.assertTrue(policy.can_read(self.admin, self.enrollment))
        self.assertFalse(policy.can_read(self.other_student, self.enrollment))
        self.assertFalse(policy.can_read(self.other_instructor, self.enrollment))

        self.assertTrue(policy.can_write(self.instructor, self.enrollment))
        self.assertFalse(policy.can_write(self.student, self.enrollment))

        self.assertTrue(policy.can_withdraw_enrollment(self.student, self.enrollment))
        self.assertTrue(policy.can_withdraw_enrollment(self.admin, self.enrollment))
        self.assertFalse(policy.can_withdraw_enrollment(self.instructor, self.enrollment))

        self.assertTrue(policy.can_enroll(self.student))
        self.assertFalse(policy.can_enroll(self.instructor))
        self.assertFalse(policy.can_enroll(self.anonymous))

    def test_inactive_users_have_no_rights(self):
        self.admin.deactivate()
        self.assertFalse(policy.can_list_users(self.admin))
        self.assertFalse(policy.can_write(self.admin, self.course))

    def test_unknown_resource_type(self):
        with self.assertRaises(TypeError):
            policy.can_read(self.admin, Group(name='staff'))


# ═════════════════════════════════════════════════════════════════════════════
# 2. AUTHENTICATION
# ═════════════════════════════════════════════════════════════════════════════

class AuthAPITests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            email='alice@test.com', password='Testpass123', username='alice',
            first_name='Alice', last_name='Martin',
        )

    def test_register_returns_tokens(self):
        response = self.client.post('/api/auth/register/', {
            'username': 'bob42',
            'email': 'Bob@Test.com',
            'password': 'Secret123',
            'first_name': 'Bob',
            'last_name': 'Stone',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data['success'])
        self.assertIn('access', response.data['data']['tokens'])
        self.assertEqual(response.data['data']['user']['role'], UserRole.STUDENT)
        self.assertTrue(User.objects.filter(email='bob@test.com').exists())

    def test_register_cannot_create_admin(self):
        response = self.client.post('/api/auth/register/', {
            'username': 'mallory',
            'email': 'mallory@test.com',
            'password': 'Secret123',
            'first_name': 'Mal',
            'last_name': 'Lory',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('role', response.data['errors'])

    def test_register_rejects_weak_password_and_duplicates(self):
        response = self.client.post('/api/auth/register/', {
            'username': 'alice',
            'email': 'alice@test.com',
            'password': 'alllowercase',
            'first_name': 'A',
            'last_name': 'B',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])
        for field in ('username', 'email', 'password'):
            self.assertIn(field, response.data['errors'])

    def test_login(self):
        response = self.client.post('/api/auth/login/', {
            'email': 'alice@test.com', 'password': 'Testpass123',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data['data'])
        self.assertEqual(response.data['data']['user']['email'], 'alice@test.com')

        token = response.data['data']['access']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['username'], 'alice')

    def test_login_wrong_password(self):
        response = self.client.post('/api/auth/login/', {
            'email': 'alice@test.com', 'password': 'nope',
        }, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['message'], 'Invalid email or password.')

    def test_inactive_user_cannot_login(self):
        self.user.deactivate()
        response = self.client.post('/api/auth/login/', {
            'email': 'alice@test.com', 'password': 'Testpass123',
        }, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['message'], 'Account is deactivated.')

    def test_me_requires_authentication(self):
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data['success'])

    def test_update_profile(self):
        self.client.force_authenticate(self.user)
        response = self.client.patch('/api/auth/profile/', {'first_name': 'Alicia'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Alicia')

    def test_change_password(self):
        self.client.force_authenticate(self.user)
        response = self.client.put('/api/auth/change-password/', {
            'current_password': 'Testpass123', 'new_password': 'Newpass456',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Newpass456'))

        response = self.client.put('/api/auth/change-password/', {
            'current_password': 'wrong', 'new_password': 'Newpass789',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('current_password', response.data['errors'])


# ═════════════════════════════════════════════════════════════════════════════
# 3. USER MANAGEMENT
# ═════════════════════════════════════════════════════════════════════════════

class UserAPITests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@test.com', password='Testpass123', role=UserRole.ADMIN,
        )
        self.instructor = User.objects.create_user(
            email='prof@test.com', password='Testpass123', role=UserRole.INSTRUCTOR,
        )
        self.student = User.objects.create_user(
            email='alice@test.com', password='Testpass123', first_name='Alice',
        )
        self.other_student = User.objects.create_user(
            email='bob@test.com', password='Testpass123',
        )

    def test_admin_lists_and_filters_users(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['pagination']['totalCount'], 4)

        response = self.client.get('/api/users/?role=student&search=alice')
        self.assertEqual(response.data['pagination']['totalCount'], 1)
        self.assertEqual(response.data['data'][0]['email'], 'alice@test.com')

    def test_non_admin_cannot_list_users(self):
        self.client.force_authenticate(self.student)
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, 403)

    def test_users_read_themselves_only(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f'/api/users/{self.student.pk}/')
        self.assertEqual(response.status_code, 200)

        response = self.client.get(f'/api/users/{self.other_student.pk}/')
        self.assertEqual(response.status_code, 403)

    def test_only_admin_changes_role(self):
        self.client.force_authenticate(self.student)
        response = self.client.patch(
            f'/api/users/{self.student.pk}/', {'role': 'admin'}, format='json',
        )
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            f'/api/users/{self.student.pk}/', {'role': 'instructor'}, format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.student.refresh_from_db()
        self.assertEqual(self.student.role, UserRole.INSTRUCTOR)

    def test_delete_without_relationships_is_hard(self):
        self.client.force_authenticate(self.admin)
        response = self.client.delete(f'/api/users/{self.other_student.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(User.objects.filter(pk=self.other_student.pk).exists())

    def test_delete_with_enrollment_is_soft(self):
        course = make_course(self.instructor)
        Enrollment.objects.create(
            student=self.student, course=course, status=EnrollmentStatus.ENROLLED,
        )
        self.client.force_authenticate(self.admin)
        response = self.client.delete(f'/api/users/{self.student.pk}/')
        self.assertEqual(response.status_code, 200)
        self.student.refresh_from_db()
        self.assertFalse(self.student.is_active)

    def test_delete_instructor_with_courses_is_soft(self):
        make_course(self.instructor, is_active=False)
        self.client.force_authenticate(self.admin)
        response = self.client.delete(f'/api/users/{self.instructor.pk}/')
        self.assertEqual(response.status_code, 200)
        self.instructor.refresh_from_db()
        self.assertFalse(self.instructor.is_active)

    def test_admin_cannot_delete_self(self):
        self.client.force_authenticate(self.admin)
        response = self.client.delete(f'/api/users/{self.admin.pk}/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Cannot delete your own account')
        self.assertTrue(User.objects.filter(pk=self.admin.pk).exists())

    def test_stats(self):
        self.other_student.deactivate()
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/users/stats/')
        self.assertEqual(response.status_code, 200)
        data = response.data['data']
        self.assertEqual(data['total_users'], 4)
        self.assertEqual(data['inactive_users'], 1)
        self.assertEqual(data['by_role']['student'], 2)
        self.assertEqual(sum(r['count'] for r in data['recent_registrations']), 4)

        self.client.force_authenticate(self.student)
        response = self.client.get('/api/users/stats/')
        self.assertEqual(response.status_code, 403)

    def test_health(self):
        response = self.client.get('/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['status'], 'ok')


# ═════════════════════════════════════════════════════════════════════════════
# 4. ADMIN SITE DELETES
# ═════════════════════════════════════════════════════════════════════════════

class AdminDeleteTests(TestCase):
    """Admin deletes must not bypass seat accounting."""

    def setUp(self):
        self.superuser = User.objects.create_superuser(
            email='root@test.com', password='Testpass123',
        )
        self.instructor = User.objects.create_user(
            email='prof@test.com', password='Testpass123', role=UserRole.INSTRUCTOR,
        )
        self.student = User.objects.create_user(email='alice@test.com', password='Testpass123')
        self.course = make_course(self.instructor, max_students=2)
        self.enrollment = enroll_student(self.student, self.course.pk)
        self.client.force_login(self.superuser)

    def counter(self):
        self.course.refresh_from_db()
        return self.course.current_enrollment

    def test_enrollment_delete_is_refused(self):
        url = reverse('admin:courses_enrollment_delete', args=[self.enrollment.pk])
        response = self.client.post(url, {'post': 'yes'})
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Enrollment.objects.filter(pk=self.enrollment.pk).exists())
        self.assertEqual(self.counter(), 1)

    def test_enrolled_student_is_deactivated_not_deleted(self):
        url = reverse('admin:users_user_delete', args=[self.student.pk])
        response = self.client.post(url, {'post': 'yes'})
        self.assertEqual(response.status_code, 302)

        self.student.refresh_from_db()
        self.assertFalse(self.student.is_active)
        self.assertTrue(Enrollment.objects.filter(pk=self.enrollment.pk).exists())
        self.assertEqual(self.counter(), 1)

    def test_bulk_delete_action_deactivates_linked_users(self):
        loner = User.objects.create_user(email='loner@test.com', password='Testpass123')
        response = self.client.post(reverse('admin:users_user_changelist'), {
            'action': 'delete_selected',
            '_selected_action': [str(self.student.pk), str(self.instructor.pk), str(loner.pk)],
            'post': 'yes',
        })
        self.assertEqual(response.status_code, 302)

        self.assertFalse(User.objects.filter(pk=loner.pk).exists())
        self.student.refresh_from_db()
        self.instructor.refresh_from_db()
        self.assertFalse(self.student.is_active)
        self.assertFalse(self.instructor.is_active)
        self.assertTrue(Course.objects.filter(pk=self.course.pk).exists())
        self.assertEqual(self.counter(), 1)

    def test_user_with_only_dropped_rows_is_removed(self):
        change_status(self.enrollment.pk, EnrollmentStatus.DROPPED, self.instructor)
        url = reverse('admin:users_user_delete', args=[self.student.pk])
        response = self.client.post(url, {'post': 'yes'})
        self.assertEqual(response.status_code, 302)
        self.assertFalse(User.objects.filter(pk=self.student.pk).exists())
        self.assertEqual(self.counter(), 0)
