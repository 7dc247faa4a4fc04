from fitcoach import create_app
from fitcoach.extensions import socketio

app = create_app()

if __name__ == '__main__':
    socketio.run(app, debug=app.config.get("DEBUG", False), port=5000, allow_unsafe_werkzeug=True)
