from django.urls import path

from .api import AdminBanUserView, AdminChangeRoleView, AdminDeleteUserView, AdminUnbanUserView

app_name = "users_admin"

urlpatterns = [
    path("<int:user_id>/", AdminDeleteUserView.as_view(), name="delete"),
    path("<int:user_id>/ban/", AdminBanUserView.as_view(), name="ban"),
    path("<int:user_id>/unban/", AdminUnbanUserView.as_view(), name="unban"),
    path("<int:user_id>/role/", AdminChangeRoleView.as_view(), name="role"),
]
