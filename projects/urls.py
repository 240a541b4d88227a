from django.urls import path
from . import views

app_name = "projects"

urlpatterns = [
    path("projects/", views.project_list, name="project_list"),
    path("projects/create/", views.create_project, name="create_project"),
    path("projects/bulk-delete/", views.bulk_delete_projects, name="bulk_delete_projects"),
    path("projects/import/", views.import_projects, name="import_projects"),
    path("projects/export/", views.export_projects, name="export_projects"),
    path("projects/clusters/", views.project_clusters, name="project_clusters"),
    path("projects/stats/", views.project_stats, name="project_stats"),
    path("projects/images/", views.upload_image, name="upload_image"),
    path("projects/<uuid:project_id>/", views.project_detail, name="project_detail"),
    path("projects/<uuid:project_id>/update/", views.update_project, name="update_project"),
    path("projects/<uuid:project_id>/delete/", views.delete_project, name="delete_project"),
    path("sectors/", views.sector_list, name="sector_list"),
    path("geocode/suggest/", views.geocode_suggest, name="geocode_suggest"),
]
