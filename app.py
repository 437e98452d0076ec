from src.event_checkin.event_checkin.extensions import socketio
from src.event_checkin.event_checkin.main import create_app

app = create_app()

if __name__ == "__main__":
    socketio.run(app, host="0.0.0.0", port=5000, debug=app.config["DEBUG"], allow_unsafe_werkzeug=True)
