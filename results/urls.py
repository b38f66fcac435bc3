from django.urls import path
from .views import ResultView, ResultHistoryView, RegradeExamView

urlpatterns = [
    path('results/<int:attempt_id>/', ResultView.as_view(), name='result-detail'),
    path('results/<int:attempt_id>/history/', ResultHistoryView.as_view(), name='result-history'),
    path('admin/exams/<int:exam_id>/regrade/', RegradeExamView.as_view(), name='exam-regrade'),
]
