from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'items'

router = DefaultRouter()
router.register(r'', views.ItemViewSet, basename='item')

urlpatterns = [
    # GET    /api/items/                 - Browse available items
    # POST   /api/items/                 - Submit listing
    # GET    /api/items/{id}/            - Item detail (counts a view)
    # PATCH  /api/items/{id}/            - Edit listing
    # DELETE /api/items/{id}/            - Withdraw listing

    # Custom actions
    # POST   /api/items/{id}/like/       - Toggle like
    # GET    /api/items/trending/        - Trending items
    # GET    /api/items/mine/            - Own items with swap status
    path('', include(router.urls)),
]
