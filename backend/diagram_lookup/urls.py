from django.urls import path
from . import views

urlpatterns = [
    path('search/', views.DiagramLookupView.as_view(), name='diagram_lookup_search'),
    path('health/', views.HealthCheckView.as_view(), name='diagram_lookup_health'),
]
