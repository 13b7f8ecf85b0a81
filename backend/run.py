from icebreaker import create_app, socketio
from icebreaker.services.game.scheduler import start_expiry_sweeper

app = create_app()

if __name__ == '__main__':
    start_expiry_sweeper(app)
    socketio.run(app, debug=True, use_reloader=False)
