from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import uuid6
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deleted_at",
                    models.DateTimeField(
                        blank=True, db_index=True, default=None, null=True
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.01"))
                        ],
                    ),
                ),
                ("stock", models.PositiveIntegerField(default=0)),
                ("unit", models.CharField(default="unidade", max_length=32)),
                ("category", models.CharField(max_length=100)),
                (
                    "image_url",
                    models.URLField(blank=True, default="", max_length=500),
                ),
                ("is_available", models.BooleanField(default=True)),
                (
                    "producer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="products",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "products",
                "ordering": ["name"],
                "indexes": [
                    models.Index(
                        fields=["is_available", "category"],
                        name="products_avail_category_idx",
                    ),
                    models.Index(fields=["producer"], name="products_producer_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__gt=0),
                        name="products_price_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(stock__gte=0),
                        name="products_stock_non_negative",
                    ),
                ],
            },
        ),
    ]
