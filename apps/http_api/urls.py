from django.urls import path

from apps.accounts.api import ChangePasswordView, LoginView, MeView, PasswordStatusView, RegisterView
from apps.ai.views import NextBestActionView, SentimentView
from apps.analytics.views import DashboardSummaryView, FunnelView, PracticeMetricsView
from apps.appointments.views import AppointmentListCreateView, AppointmentOutcomeView
from apps.leads.views import (
    LeadDetailView,
    LeadInteractionsView,
    LeadListCreateView,
    LeadStatusView,
    LeadSummaryView,
)
from apps.practices.views import PracticeListView
from apps.webhooks.views import meta_lead_webhook

urlpatterns = [
    path('webhooks/meta-leads', meta_lead_webhook, name='meta-lead-webhook'),
    path('auth/login', LoginView.as_view(), name='auth-login'),
    path('auth/register', RegisterView.as_view(), name='auth-register'),
    path('auth/me', MeView.as_view(), name='auth-me'),
    path('auth/password-status', PasswordStatusView.as_view(), name='auth-password-status'),
    path('auth/change-password', ChangePasswordView.as_view(), name='auth-change-password'),
    path('leads', LeadListCreateView.as_view(), name='leads'),
    path('leads/<int:lead_id>', LeadDetailView.as_view(), name='lead-detail'),
    path('leads/<int:lead_id>/status', LeadStatusView.as_view(), name='lead-status'),
    path('leads/<int:lead_id>/interactions', LeadInteractionsView.as_view(), name='lead-interactions'),
    path('leads/<int:lead_id>/summary', LeadSummaryView.as_view(), name='lead-summary'),
    path('appointments', AppointmentListCreateView.as_view(), name='appointments'),
    path('appointments/<int:appointment_id>/outcome', AppointmentOutcomeView.as_view(), name='appointment-outcome'),
    path('analytics/practice-metrics', PracticeMetricsView.as_view(), name='analytics-practice-metrics'),
    path('analytics/funnel', FunnelView.as_view(), name='analytics-funnel'),
    path('analytics/summary', DashboardSummaryView.as_view(), name='analytics-summary'),
    path('practices', PracticeListView.as_view(), name='practices'),
    path('ai/leads/<int:lead_id>/next-best-action', NextBestActionView.as_view(), name='ai-next-best-action'),
    path('ai/sentiment', SentimentView.as_view(), name='ai-sentiment'),
]
