# borrowing_service/tasks/scheduler.py
from __future__ import annotations

import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


def start_scheduler(app):
    """
    Overdue sweep'i arka planda calistirir.
    - SCHEDULER_ENABLED kapaliysa (test) hic baslamaz.
    - Debug reloader'da cift calismayi engeller.
    """
    if not app.config.get("SCHEDULER_ENABLED", False):
        app.logger.info("[scheduler] Disabled by config.")
        return None

    # Debug reloader iki process calistirir; sadece WERKZEUG_RUN_MAIN=true olan asil process
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    # circular import olmasin diye burada
    from borrowing_service.tasks.overdue_check import run_overdue_check_job

    scheduler = BackgroundScheduler(timezone="UTC")
    minutes = app.config.get("OVERDUE_CHECK_MINUTES", 10)

    def _job_wrapper():
        # Flask app context ile calistir
        with app.app_context():
            try:
                run_overdue_check_job(app)
            except Exception as ex:  # job thread'i olmesin, sonraki tur tekrar dener
                app.logger.exception(f"[scheduler] overdue_check_job error: {ex}")

    scheduler.add_job(
        func=_job_wrapper,
        trigger=IntervalTrigger(minutes=minutes),
        id="overdue_check_job",
        replace_existing=True,
        max_instances=1,        # ayni job ust uste binmesin
        coalesce=True,          # kacirilanlari tek seferde toparla
        misfire_grace_time=120
    )

    scheduler.start()
    app.logger.info(f"[scheduler] Overdue check job started (every {minutes} minutes).")
    app.extensions["apscheduler"] = scheduler

    # process kapanirken scheduler dursun
    atexit.register(lambda: scheduler.shutdown(wait=False))
    return scheduler
