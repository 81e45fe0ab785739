from apscheduler.schedulers.background import BackgroundScheduler

from seatbot.reset_job import JOB_ID, build_scheduler, daily_cleanup

from conftest import make_config, make_message


def test_daily_cleanup_empties_bookings(router, event_log):
    router.handle(make_message("m1", "+2"))

    snapshot = daily_cleanup(router)

    assert snapshot.grand_total == 0
    assert event_log.scan_all() == []


def test_job_is_scheduled_daily_at_clear_hour(router):
    config = make_config(clear_hour=3, timezone="UTC")
    scheduler = build_scheduler(config, router, scheduler=BackgroundScheduler(timezone="UTC"))

    job = scheduler.get_job(JOB_ID)
    fields = {f.name: str(f) for f in job.trigger.fields}
    assert fields["hour"] == "3"
    assert fields["minute"] == "0"
    assert job.args == (router,)


def test_rescheduling_replaces_the_existing_job(router):
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.start(paused=True)
    try:
        build_scheduler(make_config(clear_hour=1, timezone="UTC"), router, scheduler=scheduler)
        build_scheduler(make_config(clear_hour=5, timezone="UTC"), router, scheduler=scheduler)

        jobs = scheduler.get_jobs()
        assert len(jobs) == 1
        assert {f.name: str(f) for f in jobs[0].trigger.fields}["hour"] == "5"
    finally:
        scheduler.shutdown(wait=False)
