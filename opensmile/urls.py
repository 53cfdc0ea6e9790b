from django.urls import include, path

urlpatterns = [
    path("", include("apps.http_api.urls")),
]
