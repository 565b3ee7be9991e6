"""
Course Admin — courses with their roster inline, and enrollments.

Enrollment status and the enrollment counter are read-only here, and
enrollments cannot be deleted: seats change only through the enrollment
service.
"""

from django.contrib import admin, messages

from courses.models import Course, Enrollment
from courses.services.enrollment_service import recount_enrollments


# ─── Inlines ─────────────────────────────────────────────────────────────────

class EnrollmentInline(admin.TabularInline):
    model = Enrollment
    extra = 0
    fields = ['student', 'status', 'grade', 'grade_points', 'enrollment_date']
    readonly_fields = ['student', 'status', 'enrollment_date']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


# ─── Model Admins ────────────────────────────────────────────────────────────

@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = [
        'code', 'title', 'department', 'semester', 'year',
        'current_enrollment', 'max_students', 'is_active', 'start_date',
    ]
    list_filter = ['is_active', 'semester', 'year', 'department']
    search_fields = ['code', 'title']
    raw_id_fields = ['instructor']
    readonly_fields = ['id', 'current_enrollment', 'created_at', 'updated_at']
    inlines = [EnrollmentInline]
    actions = ['recount']
    fieldsets = (
        (None, {
            'fields': ('id', 'code', 'title', 'description', 'credits', 'department'),
        }),
        ('Term', {
            'fields': ('semester', 'year', 'start_date', 'end_date', 'schedule', 'location'),
        }),
        ('Capacity', {
            'fields': ('max_students', 'current_enrollment', 'instructor', 'is_active'),
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    @admin.action(description='Recount enrolled students')
    def recount(self, request, queryset):
        corrected = recount_enrollments(list(queryset.values_list('pk', flat=True)))
        self.message_user(request, f'{corrected} course counter(s) corrected.', messages.SUCCESS)


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['student', 'course', 'status', 'grade', 'enrollment_date']
    list_filter = ['status', 'grade']
    search_fields = ['student__email', 'course__code']
    raw_id_fields = ['student', 'course']
    readonly_fields = ['id', 'student', 'course', 'status', 'enrollment_date', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
