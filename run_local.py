"""
Local runner that loads .env before starting the transcript API.
"""
import os

from dotenv import load_dotenv

load_dotenv()

from logging_setup import configure_logging  # noqa: E402

configure_logging(log_level=os.getenv("LOG_LEVEL", "DEBUG"), use_json=False)

from app import app  # noqa: E402

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv("PORT", 5000)),
        debug=True,
        use_reloader=False  # Avoid double-loading with dotenv
    )
