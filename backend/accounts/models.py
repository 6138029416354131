from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    display_name = models.CharField(max_length=120, blank=True)
    wallet_address = models.CharField(max_length=128, blank=True)
    avatar_url = models.URLField(blank=True)

    @property
    def is_host(self) -> bool:
        return self.experiences.exists()
