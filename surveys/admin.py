# surveys/admin.py
from django.contrib import admin
from django.db.models import Count
from django.urls import reverse
from django.utils.html import format_html

from .models import Store, Survey, SurveyAnalytics, SurveyResponse


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ('shop_domain', 'email', 'survey_count', 'created_at')
    search_fields = ('shop_domain', 'email')
    readonly_fields = ('created_at',)
    exclude = ('access_token',)

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_survey_count=Count('surveys'))

    def survey_count(self, obj):
        return obj._survey_count
    survey_count.short_description = 'Surveys'
    survey_count.admin_order_field = '_survey_count'


class SurveyAnalyticsInline(admin.StackedInline):
    model = SurveyAnalytics
    extra = 0
    can_delete = False
    readonly_fields = (
        'views', 'completions', 'completion_rate', 'average_time_spent',
        'new_customers', 'returning_customers', 'average_cart_value', 'updated_at',
    )
    exclude = ('question_analytics',)


@admin.register(Survey)
class SurveyAdmin(admin.ModelAdmin):
    list_display = (
        'title',
        'status_badge',
        'store',
        'active',
        'priority',
        'response_count',
        'created_at',
    )
    list_filter = ('status', 'active', 'created_at')
    search_fields = ('title', 'description', 'store__shop_domain')
    readonly_fields = ('created_at', 'updated_at', 'script_tag_id')
    inlines = [SurveyAnalyticsInline]
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('store', 'title', 'description', 'status', 'active', 'priority')
        }),
        ('Content', {
            'fields': ('questions', 'style')
        }),
        ('Targeting', {
            'fields': ('target_audience', 'display_rules'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('script_tag_id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_response_count=Count('responses'))

    def status_badge(self, obj):
        colors = {
            'draft': '#6c757d',
            'active': '#28a745',
            'paused': '#ffc107',
            'completed': '#dc3545',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def response_count(self, obj):
        return format_html('<strong>{}</strong>', obj._response_count)
    response_count.short_description = 'Responses'
    response_count.admin_order_field = '_response_count'


@admin.register(SurveyResponse)
class SurveyResponseAdmin(admin.ModelAdmin):
    list_display = ('id', 'survey_link', 'customer_type', 'customer_email', 'total_time_spent', 'created_at')
    list_filter = ('customer_type', 'created_at')
    search_fields = ('customer_email', 'survey__title')
    readonly_fields = ('survey', 'responses', 'customer_email', 'customer_type', 'total_time_spent', 'metadata', 'created_at')
    list_select_related = ('survey',)

    def survey_link(self, obj):
        url = reverse('admin:surveys_survey_change', args=[obj.survey_id])
        return format_html('<a href="{}">{}</a>', url, obj.survey.title)
    survey_link.short_description = 'Survey'

    def has_add_permission(self, request):
        return False


@admin.register(SurveyAnalytics)
class SurveyAnalyticsAdmin(admin.ModelAdmin):
    list_display = ('survey', 'views', 'completions', 'completion_rate_display', 'updated_at')
    readonly_fields = [f.name for f in SurveyAnalytics._meta.fields]
    list_select_related = ('survey',)

    def completion_rate_display(self, obj):
        return f"{obj.completion_rate * 100:.1f}%"
    completion_rate_display.short_description = 'Completion rate'

    def has_add_permission(self, request):
        return False
