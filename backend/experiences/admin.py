from django.contrib import admin

from .models import Experience, Review


class ReviewInline(admin.TabularInline):
    model = Review
    extra = 0
    fields = ("user", "booking", "rating", "comment", "created_at")
    readonly_fields = ("created_at",)


@admin.register(Experience)
class ExperienceAdmin(admin.ModelAdmin):
    list_display = ("title", "host", "category", "location", "price", "currency", "featured", "rating")
    list_filter = ("category", "featured", "currency")
    search_fields = ("title", "location", "description", "host__email")
    readonly_fields = ("rating", "review_count", "created_at", "updated_at")
    inlines = [ReviewInline]


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("experience", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("experience__title", "user__email", "comment")
