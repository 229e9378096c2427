from django.urls import path
from . import views

app_name = 'admin-api'

urlpatterns = [
    path('dashboard/', views.admin_dashboard, name='dashboard'),

    # Items
    path('items/', views.admin_items, name='items'),
    path('items/<uuid:item_id>/approve/', views.admin_approve_item, name='approve-item'),
    path('items/<uuid:item_id>/', views.admin_remove_item, name='remove-item'),

    # Swaps
    path('swaps/', views.admin_swaps, name='swaps'),

    # Users
    path('users/', views.admin_users, name='users'),
    path('users/<uuid:user_id>/', views.admin_update_user, name='update-user'),
    path('users/<uuid:user_id>/adjust-points/', views.admin_adjust_points, name='adjust-points'),
]
