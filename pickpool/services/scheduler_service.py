"""
Automatic results sync

Periodically pulls the scoreboard for the earliest week that still has games
without a result, so standings pick up winners without manual entry.
"""

import atexit
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import func

from pickpool import db
from pickpool.models import Game
from pickpool.stores.sql import SqlGameCatalog
from pickpool.utils.cache_utils import invalidate_standings_cache
from pickpool.utils.odds_sync import OddsSync

logger = logging.getLogger(__name__)


class SchedulerService:
    """Manages the background results sync"""

    def __init__(self, app=None):
        self.scheduler = None
        self.app = app
        self.odds_sync = None
        self.is_running = False
        self.sync_stats = {
            "last_sync": None,
            "total_syncs": 0,
            "successful_syncs": 0,
            "failed_syncs": 0,
            "last_error": None,
        }

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize scheduler with Flask app"""
        self.app = app
        self.scheduler = BackgroundScheduler(daemon=True, timezone="UTC")
        self.odds_sync = OddsSync(
            SqlGameCatalog(), api_base_url=app.config.get("ODDS_API_BASE_URL")
        )

        atexit.register(self.shutdown)

        if app.config.get("SCHEDULER_ENABLED", True):
            self.start()

    def start(self):
        if self.is_running:
            return

        self.scheduler.remove_all_jobs()
        self.scheduler.add_job(
            func=self.sync_results,
            trigger=IntervalTrigger(
                minutes=self.app.config.get("RESULTS_SYNC_MINUTES", 15)
            ),
            id="sync_results",
            name="Sync Game Results",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=60,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info("Scheduler started successfully")

    def stop(self):
        if not self.is_running:
            return

        try:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Scheduler stopped")
        except Exception as e:
            logger.error(f"Error stopping scheduler: {e}")

    def shutdown(self):
        """Graceful shutdown"""
        self.stop()

    @staticmethod
    def current_week():
        """Earliest week with a game that is not over yet"""
        return (
            db.session.query(func.min(Game.week))
            .filter(Game.winner == "", Game.completed.is_(False))
            .scalar()
        )

    def sync_results(self):
        with self.app.app_context():
            week = self.current_week()
            if week is None:
                return

            success, message = self.odds_sync.sync_week(week)
            self._update_stats(success, message)
            if success:
                invalidate_standings_cache()

    def _update_stats(self, success, message):
        self.sync_stats["last_sync"] = datetime.now(timezone.utc).isoformat()
        self.sync_stats["total_syncs"] += 1
        if success:
            self.sync_stats["successful_syncs"] += 1
        else:
            self.sync_stats["failed_syncs"] += 1
            self.sync_stats["last_error"] = message

    def get_status(self):
        jobs = []
        if self.scheduler and self.is_running:
            for job in self.scheduler.get_jobs():
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run": (
                            job.next_run_time.isoformat() if job.next_run_time else None
                        ),
                    }
                )
        return {"running": self.is_running, "jobs": jobs, "stats": self.sync_stats}


scheduler_service = SchedulerService()
