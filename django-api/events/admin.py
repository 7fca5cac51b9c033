from django.contrib import admin

from events.models import Event, Participant, Session


class SessionInline(admin.TabularInline):
    model = Session
    extra = 0


class ParticipantInline(admin.TabularInline):
    model = Participant
    extra = 0


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "organizer_id", "start_date", "capacity", "is_public", "created_at"]
    list_filter = ["is_public"]
    search_fields = ["title", "location", "organizer_id"]
    readonly_fields = ["revision"]
    inlines = [SessionInline, ParticipantInline]


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ["title", "event", "start_time", "end_time", "speaker", "room"]
    list_filter = ["event"]


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ["user_name", "user_id", "event", "registered_at"]
    list_filter = ["event"]
    search_fields = ["user_id", "user_name", "user_email"]
