# compra/urls.py
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),

    # Surveys App (API + widget)
    path("", include("surveys.urls")),
]

# JSON error handlers
handler404 = 'compra.views.custom_404'
handler500 = 'compra.views.custom_500'
