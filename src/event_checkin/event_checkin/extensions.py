from flask_socketio import SocketIO

# Bound to the app in create_app(); handlers are registered there too.
socketio = SocketIO()
