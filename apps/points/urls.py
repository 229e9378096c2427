from django.urls import path
from . import views

app_name = 'points'

urlpatterns = [
    path('balance/', views.balance, name='balance'),
    path('history/', views.history, name='history'),
    path('redeem/<uuid:item_id>/', views.redeem, name='redeem'),
]
