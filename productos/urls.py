# productos/urls.py
# -*- coding: utf-8 -*-
from django.urls import path, include
from rest_framework.routers import DefaultRouter, SimpleRouter

from .views import (
    CategoriaViewSet,
    ProductoViewSet,
    UnidadMedidaViewSet,
)

app_name = "productos"

# Router para el CRUD de productos en /api/productos/
router_productos = DefaultRouter()
router_productos.register(r"", ProductoViewSet, basename="producto")

# Router para catálogos en /api/productos/categorias/ y /api/productos/unidades/
# (SimpleRouter: sin API root, para no tapar el listado de productos)
router_catalogos = SimpleRouter()
router_catalogos.register(r"categorias", CategoriaViewSet, basename="producto-categoria")
router_catalogos.register(r"unidades", UnidadMedidaViewSet, basename="producto-unidad")

urlpatterns = [
    # IMPORTANTE: primero los catálogos; el router de productos captura cualquier /{pk}/
    path("productos/", include(router_catalogos.urls)),
    path("productos/", include(router_productos.urls)),
]
