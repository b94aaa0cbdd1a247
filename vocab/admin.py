from django.contrib import admin
from .models import Word, Example, WordProgress, ReviewLog, LearnerProfile


class ExampleInline(admin.TabularInline):
    model = Example
    extra = 1
    fields = ['sentence', 'translation']


@admin.register(Word)
class WordAdmin(admin.ModelAdmin):
    list_display = ['text', 'part_of_speech', 'difficulty', 'translation', 'created_at']
    list_filter = ['difficulty', 'part_of_speech', 'created_at']
    search_fields = ['text', 'translation', 'definition']
    inlines = [ExampleInline]


@admin.register(WordProgress)
class WordProgressAdmin(admin.ModelAdmin):
    list_display = ['word', 'user', 'band', 'next_review', 'ease_factor', 'repetitions']
    list_filter = ['user', 'next_review']
    search_fields = ['word__text', 'user__username']
    readonly_fields = ['ease_factor', 'interval', 'repetitions', 'next_review', 'last_reviewed']

    def band(self, obj):
        return obj.band.value
    band.short_description = 'Stage'


@admin.register(ReviewLog)
class ReviewLogAdmin(admin.ModelAdmin):
    list_display = ['progress', 'quality', 'interval_before', 'interval_after', 'reviewed_at']
    list_filter = ['quality', 'reviewed_at']
    readonly_fields = ['progress', 'quality', 'ease_factor_before', 'ease_factor_after',
                       'interval_before', 'interval_after', 'reviewed_at']


@admin.register(LearnerProfile)
class LearnerProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'words_learned', 'current_streak', 'longest_streak', 'last_study_date']
    search_fields = ['user__username']
