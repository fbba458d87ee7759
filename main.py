"""
Production entry point for the transcript API.

Environment:
    LOG_LEVEL   root log level (default INFO)
    LOG_FORMAT  "json" for single-line JSON logs, "text" for plain lines (default json)
    PORT        listen port (default 8080)
"""
import os

from log_events import evt
from logging_setup import configure_logging


def main():
    configure_logging(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        use_json=os.getenv("LOG_FORMAT", "json").lower() != "text"
    )

    # Imported after logging is configured so app startup logs use the same format
    from app import app

    port = int(os.environ.get("PORT", 8080))
    service = app.extensions["transcript_service"]
    evt("server_start", port=port, strategies=",".join(service.config.enabled_methods()))
    app.run(host="0.0.0.0", port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
