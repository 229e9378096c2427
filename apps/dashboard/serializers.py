"""
Response serializers for dashboard and admin panel endpoints.

They document the shapes returned by ``DashboardQueries`` for the schema;
the views build the data themselves.
"""

from rest_framework import serializers

from apps.accounts.serializers import UserSerializer
from apps.items.serializers import ItemWithSwapStatusSerializer
from apps.points.serializers import BalanceSerializer
from apps.swaps.serializers import SwapSerializer


class UserDashboardSerializer(serializers.Serializer):
    user = UserSerializer()
    items = ItemWithSwapStatusSerializer(many=True)
    swaps = SwapSerializer(many=True)
    points = BalanceSerializer()


class AdminCountsSerializer(serializers.Serializer):
    total_users = serializers.IntegerField()
    total_items = serializers.IntegerField()
    pending_items = serializers.IntegerField()
    total_swaps = serializers.IntegerField()
    pending_swaps = serializers.IntegerField()


class SystemPointsStatsSerializer(serializers.Serializer):
    total_points_earned = serializers.IntegerField()
    total_points_spent = serializers.IntegerField()
    total_transactions = serializers.IntegerField()
    unique_users = serializers.IntegerField()


class AdminDashboardSerializer(serializers.Serializer):
    counts = AdminCountsSerializer()
    recent_activity = serializers.DictField()
    points_stats = SystemPointsStatsSerializer()
