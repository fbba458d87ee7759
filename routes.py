import logging
from uuid import uuid4

from flask import Blueprint, current_app, jsonify, request

from log_events import evt
from transcript_service import (
    FailureKind,
    TranscriptFailure,
    TranscriptService,
    INVALID_VIDEO_ID_MESSAGE,
)

transcript_routes = Blueprint("transcript_routes", __name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

STATUS_BY_FAILURE = {
    FailureKind.INVALID_VIDEO_ID: 400,
    FailureKind.NO_CAPTIONS: 200,
    FailureKind.INTERNAL_ERROR: 500,
}


def _transcript_service() -> TranscriptService:
    service = current_app.extensions.get("transcript_service")
    if service is None:
        service = TranscriptService()
        current_app.extensions["transcript_service"] = service
    return service


def _string_field(data: dict, key: str):
    value = data.get(key)
    return value if isinstance(value, str) else None


@transcript_routes.after_request
def add_cors_headers(response):
    response.headers.update(CORS_HEADERS)
    return response


@transcript_routes.route("/api/transcript", methods=["POST", "OPTIONS"])
def get_transcript():
    """Extract a transcript for {videoUrl | videoId, lang}."""
    if request.method == "OPTIONS":
        return "", 200

    request_id = str(uuid4())

    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            evt("transcript_request_invalid_body", request_id=request_id)
            failure = TranscriptFailure(INVALID_VIDEO_ID_MESSAGE, FailureKind.INVALID_VIDEO_ID)
            return jsonify(failure.to_envelope()), 400

        value = _string_field(data, "videoUrl") or _string_field(data, "videoId")
        # lang is accepted for compatibility; track selection ignores it
        lang = _string_field(data, "lang")
        evt("transcript_request", request_id=request_id, lang=lang,
            has_url=_string_field(data, "videoUrl") is not None)

        outcome = _transcript_service().get_transcript(value, request_id=request_id)
        if outcome.success:
            return jsonify(outcome.to_envelope()), 200
        return jsonify(outcome.to_envelope()), STATUS_BY_FAILURE[outcome.kind]

    except Exception as e:
        logging.exception(f"Unhandled error in /api/transcript: {e}")
        failure = TranscriptFailure(str(e) or type(e).__name__, FailureKind.INTERNAL_ERROR)
        return jsonify(failure.to_envelope()), 500


@transcript_routes.route("/api/health")
def health():
    return jsonify({
        "status": "healthy",
        "strategies": _transcript_service().config.enabled_methods(),
    })
