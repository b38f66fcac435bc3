from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication ---
    path('api/', include('users.urls')),

    # --- Exam catalog & publishing ---
    path('api/', include('exams.urls')),

    # --- Attempt sessions ---
    path('api/', include('assessments.urls')),

    # --- Results & re-grades ---
    path('api/', include('results.urls')),

    # --- Platform settings & audit trail ---
    path('api/', include('cores.urls')),
]
