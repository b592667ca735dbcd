"""URL configuration for the Fort Smythe booking site.

Public pages and the booking flow live at the root, the reservation
dashboard under ``admin/`` and Django's own admin site under
``django-admin/``.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from django.views.generic import TemplateView  # type: ignore

urlpatterns = [
    path('', TemplateView.as_view(template_name='pages/home.html'), name='home'),
    path('about/', TemplateView.as_view(template_name='pages/about.html'), name='about'),
    path('contact/', TemplateView.as_view(template_name='pages/contact.html'), name='contact'),
    path('generals-quarters/', TemplateView.as_view(template_name='pages/generals.html'), name='generals'),
    path('majors-suite/', TemplateView.as_view(template_name='pages/majors.html'), name='majors'),
    # Booking flow
    path('', include('apps.bookings.urls')),
    path('user/', include('apps.users.urls')),
    # Reservation dashboard
    path('admin/', include('apps.bookings.dashboard_urls')),
    path('django-admin/', admin.site.urls),
]
