from django.urls import path
from . import views

urlpatterns = [
    # Dashboard
    path('api/dashboard/', views.dashboard, name='dashboard'),

    # Review
    path('api/review/queue/', views.review_queue, name='review_queue'),
    path('api/review/<int:pk>/', views.review_word, name='review_word'),

    # Vocabulary
    path('api/words/', views.word_list, name='word_list'),
    path('api/words/export/', views.word_export, name='word_export'),
    path('api/words/import/', views.word_import, name='word_import'),

    # Health check
    path('health/', views.health_check, name='health_check'),
]
