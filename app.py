import logging

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from routes import transcript_routes
from transcript_config import TranscriptConfig, get_transcript_config
from transcript_service import TranscriptService


def create_app(config: TranscriptConfig = None, service: TranscriptService = None) -> Flask:
    """Build the Flask app serving the transcript API."""
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    config = config or get_transcript_config()
    app.extensions["transcript_service"] = service or TranscriptService(config=config)
    app.register_blueprint(transcript_routes)

    logging.info(f"Transcript API ready, strategies: {', '.join(config.enabled_methods()) or 'none'}")
    return app


app = create_app()
