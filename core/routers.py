"""
URL mappings for the medical planning API.

Paths mirror the ones used by the front-end.  Trailing slashes are
deliberately omitted (``APPEND_SLASH = False``).
"""
from django.urls import path, include

from .auth_views import diagnose_view, jwt_logout_view, jwt_refresh_view, login_view, me_view
from .views import absences, access, activities, centers, consultations, health, planning, specialties, users
from .views import visit_counters


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/logout', jwt_logout_view, name='logout_view'),
    path('api/auth/refresh', jwt_refresh_view, name='refresh_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/diagnose', diagnose_view, name='diagnose_view'),

    # Reference data
    path('api/centers', centers.centers, name='centers'),
    path('api/centers/<int:pk>', centers.center_detail, name='center_detail'),
    path('api/specialties', specialties.specialties, name='specialties'),
    path('api/specialties/<int:pk>', specialties.specialty_detail, name='specialty_detail'),
    path('api/specialties/<int:pk>/activities', specialties.specialty_activities, name='specialty_activities'),
    path('api/activities', activities.activities, name='activities'),
    path('api/activities/<int:pk>', activities.activity_detail, name='activity_detail'),
    path('api/consultations', consultations.consultations, name='consultations'),
    path('api/consultations/<int:pk>', consultations.consultation_detail, name='consultation_detail'),

    # Staff and access
    path('api/users', users.users, name='users'),
    path('api/users/active', users.active_users, name='active_users'),
    path('api/users/<int:pk>', users.user_detail, name='user_detail'),
    path('api/access', access.access_list, name='access_list'),
    path('api/access/<int:pk>', access.access_detail, name='access_detail'),

    # Planning
    path('api/planning', planning.planning, name='planning'),
    path('api/planning/register', planning.planning_register, name='planning_register'),
    path('api/planning/records', planning.planning_records, name='planning_records'),
    path('api/planning/records/<int:pk>', planning.planning_record_detail, name='planning_record_detail'),
    path('api/absences', absences.absences, name='absences'),
    path('api/absences/<int:pk>', absences.absence_detail, name='absence_detail'),

    # Visit counters
    path('api/visit-counters', visit_counters.visit_counters, name='visit_counters'),
    path('api/visit-counters/specialty', visit_counters.visit_counters_specialty, name='visit_counters_specialty'),
    path('api/visit-counters/<int:pk>/toggle', visit_counters.visit_counter_toggle, name='visit_counter_toggle'),
]
