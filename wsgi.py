"""
WSGI entry point for Blind Story.
Used for production deployment with Gunicorn.
"""

from app import create_app

app, socketio = create_app()

if __name__ == "__main__":
    socketio.run(app, host='0.0.0.0', port=8000, debug=True)
else:
    application = app
