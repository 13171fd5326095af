from signup import create_app, socketio
from signup.services.games.scheduler import start_scheduler

app = create_app()
# Weekly freeze/cleanup triggers run beside the web server
start_scheduler(app)

if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True, use_reloader=False)
