from dotenv import load_dotenv

load_dotenv()

try:
    from backend.impostor.server import create_app
except ImportError:  # pragma: no cover
    from impostor.server import create_app

app, socketio = create_app()
