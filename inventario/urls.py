# inventario/urls.py
# -*- coding: utf-8 -*-
from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import InventarioView, RemediacionViewSet, SyncValidationView

app_name = "inventario"

router = SimpleRouter()
router.register(r"remediaciones", RemediacionViewSet, basename="remediacion")

urlpatterns = [
    path("", InventarioView.as_view(), name="inventario"),
    path("sync-validation/", SyncValidationView.as_view(), name="sync-validation"),
    path("", include(router.urls)),
]
