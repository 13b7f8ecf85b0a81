from icebreaker import db, socketio
from .rooms import sweep_expired


_sweeper_started = False


def run_sweep_once(app) -> list:
    with app.app_context():
        try:
            return sweep_expired()
        finally:
            db.session.remove()


def sweep_tick(app) -> bool:
    """Run one sweep; any failure is logged so the worker loop keeps going."""
    try:
        run_sweep_once(app)
    except Exception:
        app.logger.exception("[sweep] sweep failed, retrying next tick")
        return False
    return True


def start_expiry_sweeper(app) -> bool:
    """Start the background loop that deactivates expired rooms.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - No-ops when EXPIRY_SWEEP_INTERVAL_SEC is 0
    - Ensures a single worker per process
    Returns whether a worker was started.
    """
    global _sweeper_started
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False
    interval = int(app.config.get('EXPIRY_SWEEP_INTERVAL_SEC', 3600))
    if interval <= 0:
        app.logger.info("[sweep-off] EXPIRY_SWEEP_INTERVAL_SEC is 0, expired rooms are swept by lookups only")
        return False
    if _sweeper_started:
        app.logger.info("[sweep-skip] sweeper already running")
        return False
    _sweeper_started = True

    def _worker(delay: int):
        while True:
            socketio.sleep(delay)
            sweep_tick(app)

    app.logger.info(f"[sweep-set] interval={interval}s")
    socketio.start_background_task(_worker, interval)
    return True
