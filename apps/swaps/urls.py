from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'swaps'

router = DefaultRouter()
router.register(r'', views.SwapViewSet, basename='swap')

urlpatterns = [
    # GET    /api/swaps/                 - My swaps (?status=)
    # POST   /api/swaps/                 - Request a swap
    # GET    /api/swaps/{id}/            - Swap detail
    # POST   /api/swaps/{id}/accept/     - Accept
    # POST   /api/swaps/{id}/reject/     - Reject
    # POST   /api/swaps/{id}/complete/   - Complete
    path('', include(router.urls)),
]
