"""Account domain constants."""

from django.db import models


class UserRole(models.TextChoices):
    PRODUCER = "producer", "Produtor"
    CONSUMER = "consumer", "Consumidor"
    LOGISTICS = "logistics", "Logística"


USERNAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 6
