from django.urls import path
from .views import PublishingSplitsView, MasterSplitsView

app_name = 'rights'
urlpatterns = [
    path('splits/publishing/', PublishingSplitsView.as_view(), name='publishing-splits'),
    path('splits/master/', MasterSplitsView.as_view(), name='master-splits'),
]
