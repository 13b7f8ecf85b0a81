from datetime import timedelta

from icebreaker import db
from icebreaker.models import GameRoom, utcnow
from icebreaker.services.game import scheduler
from icebreaker.services.game.rooms import create_room


def test_sweeper_disabled_in_tests(flask_app, monkeypatch):
    started = []
    monkeypatch.setattr(scheduler.socketio, 'start_background_task', lambda *a, **kw: started.append(a))
    assert scheduler.start_expiry_sweeper(flask_app) is False
    assert started == []


def test_sweeper_starts_once(flask_app, monkeypatch):
    started = []
    monkeypatch.setattr(scheduler.socketio, 'start_background_task', lambda *a, **kw: started.append(a))
    monkeypatch.setattr(scheduler, '_sweeper_started', False)
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    assert scheduler.start_expiry_sweeper(flask_app) is True
    assert scheduler.start_expiry_sweeper(flask_app) is False
    assert len(started) == 1
    assert started[0][1] == flask_app.config['EXPIRY_SWEEP_INTERVAL_SEC']


def test_sweeper_off_when_interval_zero(flask_app, monkeypatch):
    monkeypatch.setattr(scheduler, '_sweeper_started', False)
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    flask_app.config['EXPIRY_SWEEP_INTERVAL_SEC'] = 0
    assert scheduler.start_expiry_sweeper(flask_app) is False


def test_sweep_rooms_cli(flask_app):
    room = create_room(1)
    room.expires_at = utcnow() - timedelta(hours=1)
    db.session.commit()
    result = flask_app.test_cli_runner().invoke(args=['sweep-rooms'])
    assert 'Deactivated 1 expired room(s).' in result.output
    assert db.session.get(GameRoom, room.id).is_active is False


def test_sweep_tick_survives_unexpected_errors(flask_app, monkeypatch):
    def broken(app):
        raise RuntimeError('connection pool exhausted')

    monkeypatch.setattr(scheduler, 'run_sweep_once', broken)
    assert scheduler.sweep_tick(flask_app) is False


def test_sweep_tick_deactivates_expired_rooms(flask_app):
    room = create_room(1)
    room.expires_at = utcnow() - timedelta(hours=1)
    db.session.commit()
    assert scheduler.sweep_tick(flask_app) is True
    assert db.session.get(GameRoom, room.id).is_active is False
