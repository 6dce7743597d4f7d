from datetime import date, datetime, time, timedelta

import pytest
from django.utils import timezone

from apps.timetracking.models import TimeEntry, EntryType
from apps.timetracking.services import (
    format_duration,
    round_to_nearest,
    calculate_duration,
    get_settings,
    update_settings,
    get_running_timer,
    start_timer,
    stop_timer,
    discard_timer,
    auto_stop_timers,
    create_manual_entry,
    list_entries,
    summarize_entries,
    update_entry,
    delete_entry,
    get_weekly_timesheet,
    get_stats,
    get_uninvoiced_time,
    mark_as_invoiced,
    unlock_invoiced_entries,
    get_public_time_logs,
    TimeEntryNotFoundError,
    TimeEntryProjectNotFoundError,
    TimerAlreadyRunningError,
    TimerNotRunningError,
    TimeEntryLockedError,
    InvalidTimeEntryError,
    OverlappingEntryError,
    InvalidSettingsError,
)


def at(day, hour, minute=0):
    return timezone.make_aware(datetime.combine(day, time(hour, minute)))


# =============================================================================
# Durations
# =============================================================================

class TestDurations:

    def test_format_duration(self):
        assert format_duration(3725) == '1h 2m'
        assert format_duration(125) == '2m'
        assert format_duration(0) == '0m'
        assert format_duration(None) == '0m'

    def test_round_to_nearest(self):
        assert round_to_nearest(450, 15) == 900
        assert round_to_nearest(449, 15) == 0
        assert round_to_nearest(1000, 0) == 1000

    def test_calculate_duration_never_negative(self):
        now = timezone.now()
        assert calculate_duration(now, now - timedelta(minutes=5)) == 0
        assert calculate_duration(now, now + timedelta(minutes=5)) == 300


# =============================================================================
# Settings
# =============================================================================

@pytest.mark.django_db
class TestTrackingSettings:

    def test_created_with_defaults(self, user):
        settings = get_settings(user)
        assert settings.max_retroactive_days == 7
        assert settings.client_visible_logs is True
        assert get_settings(user).id == settings.id

    def test_update(self, user):
        settings = update_settings(user=user, default_hourly_rate=9000, round_to_minutes=15)
        assert settings.default_hourly_rate == 9000
        assert settings.round_to_minutes == 15

    def test_out_of_bounds(self, user):
        with pytest.raises(InvalidSettingsError):
            update_settings(user=user, round_to_minutes=90)

    def test_unknown_setting(self, user):
        with pytest.raises(InvalidSettingsError):
            update_settings(user=user, favourite_color='blue')


# =============================================================================
# Timers
# =============================================================================

@pytest.mark.django_db
class TestTimers:

    def test_start(self, user, project):
        update_settings(user=user, default_hourly_rate=7500)

        entry = start_timer(owner=user, project_id=project.id, description='Research')

        assert entry.is_running
        assert entry.hourly_rate == 7500
        assert entry.entry_type == EntryType.TRACKED
        assert get_running_timer(user) == entry

    def test_start_with_milestone_sets_project(self, user, milestone):
        entry = start_timer(owner=user, milestone_id=milestone.id)
        assert entry.project_id == milestone.project_id

    def test_only_one_running_timer(self, user, running_entry):
        with pytest.raises(TimerAlreadyRunningError):
            start_timer(owner=user)

    def test_description_required(self, user):
        update_settings(user=user, require_description=True)
        with pytest.raises(InvalidTimeEntryError):
            start_timer(owner=user, description='  ')

    def test_foreign_project(self, other_user, project):
        with pytest.raises(TimeEntryProjectNotFoundError):
            start_timer(owner=other_user, project_id=project.id)

    def test_stop(self, user, running_entry):
        entry = stop_timer(owner=user, entry_id=running_entry.id, description='Fixed login bug')

        assert not entry.is_running
        assert 595 <= entry.duration <= 610
        assert entry.original_duration == entry.duration
        assert entry.description == 'Fixed login bug'

    def test_stop_applies_rounding(self, user, running_entry):
        update_settings(user=user, round_to_minutes=15)
        entry = stop_timer(owner=user, entry_id=running_entry.id)
        assert entry.duration == 900

    def test_stop_applies_minimum(self, user):
        entry = start_timer(owner=user)
        entry = stop_timer(owner=user, entry_id=entry.id)
        assert entry.duration == 60

    def test_stop_twice(self, user, entry):
        with pytest.raises(TimerNotRunningError):
            stop_timer(owner=user, entry_id=entry.id)

    def test_stop_other_users_timer(self, other_user, running_entry):
        with pytest.raises(TimeEntryNotFoundError):
            stop_timer(owner=other_user, entry_id=running_entry.id)

    def test_discard(self, user, running_entry):
        discard_timer(owner=user, entry_id=running_entry.id)
        assert get_running_timer(user) is None

    def test_discard_stopped_entry(self, user, entry):
        with pytest.raises(TimerNotRunningError):
            discard_timer(owner=user, entry_id=entry.id)


@pytest.mark.django_db
class TestAutoStop:

    def _running_since(self, user, start):
        return TimeEntry.objects.create(owner=user, start_time=start)

    def test_stops_at_following_midnight(self, user):
        entry = self._running_since(user, at(date(2030, 3, 4), 22))

        assert auto_stop_timers(now=at(date(2030, 3, 5), 8)) == 1

        entry.refresh_from_db()
        assert entry.end_time == at(date(2030, 3, 5), 0)
        assert entry.duration == 7200
        assert entry.auto_stopped is True
        assert entry.auto_stopped_reason == 'midnight'

    def test_todays_timer_keeps_running(self, user):
        entry = self._running_since(user, at(date(2030, 3, 5), 7))

        assert auto_stop_timers(now=at(date(2030, 3, 5), 8)) == 0
        entry.refresh_from_db()
        assert entry.is_running

    def test_opted_out(self, user):
        update_settings(user=user, auto_stop_at_midnight=False)
        self._running_since(user, at(date(2030, 3, 4), 22))

        assert auto_stop_timers(now=at(date(2030, 3, 5), 8)) == 0


# =============================================================================
# Manual entries
# =============================================================================

@pytest.mark.django_db
class TestManualEntries:

    def test_create(self, user, project, yesterday):
        entry, warning = create_manual_entry(
            owner=user,
            project_id=project.id,
            description='Client call',
            entry_date=yesterday,
            duration=1800,
        )

        assert warning is None
        assert entry.is_manual
        assert entry.start_time == at(yesterday, 9)
        assert entry.end_time == at(yesterday, 9, 30)

    def test_description_required(self, user, yesterday):
        with pytest.raises(InvalidTimeEntryError):
            create_manual_entry(owner=user, description='', entry_date=yesterday, duration=600)

    def test_too_short(self, user, yesterday):
        with pytest.raises(InvalidTimeEntryError):
            create_manual_entry(owner=user, description='Quick', entry_date=yesterday, duration=59)

    def test_future_date(self, user):
        with pytest.raises(InvalidTimeEntryError):
            create_manual_entry(
                owner=user,
                description='Later',
                entry_date=timezone.localdate() + timedelta(days=1),
                duration=600,
            )

    def test_outside_retroactive_window(self, user):
        with pytest.raises(InvalidTimeEntryError) as exc:
            create_manual_entry(
                owner=user,
                description='Ancient',
                entry_date=timezone.localdate() - timedelta(days=8),
                duration=600,
            )
        assert 'more than 7 days' in str(exc.value)

    def test_overlap(self, user, yesterday):
        create_manual_entry(owner=user, description='First', entry_date=yesterday, duration=3600)
        with pytest.raises(OverlappingEntryError):
            create_manual_entry(owner=user, description='Second', entry_date=yesterday, duration=600)

    def test_overlap_allowed(self, user, yesterday):
        update_settings(user=user, allow_overlapping=True)
        create_manual_entry(owner=user, description='First', entry_date=yesterday, duration=3600)
        entry, _ = create_manual_entry(owner=user, description='Second', entry_date=yesterday, duration=600)
        assert entry.pk

    def test_daily_warning(self, user, yesterday):
        _, warning = create_manual_entry(
            owner=user,
            description='Crunch',
            entry_date=yesterday,
            duration=13 * 3600,
        )
        assert 'exceeds 12h 0m' in warning


# =============================================================================
# Listing and editing
# =============================================================================

@pytest.mark.django_db
class TestEntries:

    def test_list_filters(self, user, entry, running_entry):
        assert list_entries(owner=user).count() == 2
        assert list_entries(owner=user, invoiced=False).count() == 2
        assert list_entries(owner=user, start_date=timezone.localdate()).count() == 1

    def test_summarize(self, user, project, entry, yesterday):
        TimeEntry.objects.create(
            owner=user,
            project=project,
            description='Internal',
            start_time=at(yesterday, 16),
            end_time=at(yesterday, 16, 30),
            duration=1800,
            billable=False,
            hourly_rate=6000,
        )

        summary = summarize_entries(list_entries(owner=user))

        assert summary['total_duration'] == 5400
        assert summary['billable_duration'] == 3600
        assert summary['total_earnings'] == 6000
        assert summary['count'] == 2
        assert summary['formatted_total'] == '1h 30m'

    def test_update_records_history(self, user, entry):
        updated = update_entry(
            owner=user,
            entry_id=entry.id,
            duration=5400,
            billable=False,
            edit_reason='Forgot the review',
        )

        assert updated.end_time == entry.start_time + timedelta(seconds=5400)
        fields = [item['field'] for item in updated.edit_history]
        assert fields == ['duration', 'billable']
        assert updated.edit_history[0]['old_value'] == 3600
        assert updated.edit_history[0]['reason'] == 'Forgot the review'
        assert updated.edit_history[1]['new_value'] == 'no'

    def test_unchanged_fields_not_recorded(self, user, entry):
        updated = update_entry(owner=user, entry_id=entry.id, description='Homepage layout')
        assert updated.edit_history == []

    def test_update_locked(self, user, entry):
        entry.locked_at = timezone.now()
        entry.locked_reason = 'invoiced'
        entry.save()

        with pytest.raises(TimeEntryLockedError):
            update_entry(owner=user, entry_id=entry.id, description='Changed')

    def test_update_running(self, user, running_entry):
        with pytest.raises(InvalidTimeEntryError):
            update_entry(owner=user, entry_id=running_entry.id, description='Changed')

    def test_delete(self, user, entry):
        delete_entry(owner=user, entry_id=entry.id)
        assert not TimeEntry.objects.filter(id=entry.id).exists()

    def test_delete_locked(self, user, entry):
        entry.locked_at = timezone.now()
        entry.save()
        with pytest.raises(TimeEntryLockedError):
            delete_entry(owner=user, entry_id=entry.id)


# =============================================================================
# Reports
# =============================================================================

@pytest.mark.django_db
class TestReports:

    def test_weekly_timesheet(self, user, entry, yesterday):
        week_start = yesterday - timedelta(days=1)
        timesheet = get_weekly_timesheet(owner=user, week_start=week_start)

        assert len(timesheet['days']) == 7
        assert timesheet['days'][0]['entries'] == []
        assert timesheet['days'][1]['entries'] == [entry]
        assert timesheet['days'][1]['formatted_total'] == '1h 0m'
        assert timesheet['totals']['entry_count'] == 1
        assert timesheet['totals']['manual_count'] == 0

    def test_stats(self, user, entry, yesterday):
        create_manual_entry(owner=user, description='Call', entry_date=yesterday, duration=1800)

        stats = get_stats(owner=user, start_date=yesterday, end_date=yesterday)

        assert stats['entry_count'] == 2
        assert stats['tracked_count'] == 1
        assert stats['manual_count'] == 1
        assert stats['project_count'] == 1
        assert stats['total_duration'] == 5400


# =============================================================================
# Invoicing hand-off and client logs
# =============================================================================

@pytest.mark.django_db
class TestInvoicing:

    def test_uninvoiced(self, user, project, entry, running_entry):
        result = get_uninvoiced_time(owner=user, project_id=project.id)

        assert result['entries'] == [entry]
        assert result['totals']['total_earnings'] == 6000

    def test_uninvoiced_by_client(self, user, client_record, entry):
        result = get_uninvoiced_time(owner=user, client_id=client_record.id)
        assert len(result['entries']) == 1

    def test_mark_and_unlock(self, user, entry, invoice):
        assert mark_as_invoiced(owner=user, entry_ids=[entry.id], invoice=invoice) == 1
        entry.refresh_from_db()
        assert entry.is_locked
        assert entry.locked_reason == 'invoiced'

        assert unlock_invoiced_entries(invoice=invoice) == 1
        entry.refresh_from_db()
        assert not entry.is_locked
        assert entry.invoice_id is None

    def test_mark_twice(self, user, entry, invoice):
        mark_as_invoiced(owner=user, entry_ids=[entry.id], invoice=invoice)
        with pytest.raises(InvalidTimeEntryError):
            mark_as_invoiced(owner=user, entry_ids=[entry.id], invoice=invoice)

    def test_mark_foreign_entry(self, other_user, entry, invoice):
        with pytest.raises(InvalidTimeEntryError):
            mark_as_invoiced(owner=other_user, entry_ids=[entry.id], invoice=invoice)


@pytest.mark.django_db
class TestPublicTimeLogs:

    def test_completed_billable_only(self, project, entry, running_entry):
        logs = get_public_time_logs(project=project)

        assert logs['enabled'] is True
        assert [log['id'] for log in logs['entries']] == [entry.id]
        assert logs['entries'][0]['formatted_duration'] == '1h 0m'
        assert logs['total_seconds'] == 3600

    def test_disabled(self, user, project, entry):
        update_settings(user=user, client_visible_logs=False)
        assert get_public_time_logs(project=project) == {'enabled': False, 'entries': []}
