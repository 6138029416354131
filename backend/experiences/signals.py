from decimal import Decimal

from django.db.models import Avg, Count
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Experience, Review


def refresh_review_stats(experience_id):
    stats = Review.objects.filter(experience_id=experience_id).aggregate(
        average=Avg("rating"),
        total=Count("id"),
    )
    average = stats["average"]
    rating = None
    if average is not None:
        rating = Decimal(str(average)).quantize(Decimal("0.01"))
    Experience.objects.filter(pk=experience_id).update(
        rating=rating,
        review_count=stats["total"] or 0,
    )


@receiver(post_save, sender=Review)
def handle_review_post_save(sender, instance, **kwargs):
    refresh_review_stats(instance.experience_id)


@receiver(post_delete, sender=Review)
def handle_review_post_delete(sender, instance, **kwargs):
    refresh_review_stats(instance.experience_id)
