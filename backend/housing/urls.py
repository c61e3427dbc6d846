from django.urls import include, path

urlpatterns = [
    path("api/users/", include("users.urls")),
    path("api/admin/users/", include("users.admin_urls")),
    path("api/listings/", include("listings.urls")),
    path("api/posts/", include("posts.urls")),
]
