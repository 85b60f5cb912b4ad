#!/usr/bin/env python3
"""
Heavy Lifter web API - describe an app, refine it in conversation, generate it.

Endpoints:
- /api/voice/conversation: multi-turn requirement gathering (start, send_message,
  get_conversation, end_conversation)
- /api/voice/process-requirements: stateless requirement extraction
- /api/voice/transcribe, /api/voice/text-to-speech: placeholder speech services
- /api/generate: scaffold files for the selected platforms
- /api/build/*: simulated build progress and download payloads

Run:
    python3 web_app.py

API base: http://localhost:5001/api
"""

from __future__ import annotations

import asyncio
import logging
import random
import secrets
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from flask import Blueprint, Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from heavylifter import __version__
from heavylifter.builders.app_generator import app_slug, generate_app, normalize_platforms
from heavylifter.builders.build_simulator import BuildSimulator, TaskStatus
from heavylifter.config import Settings
from heavylifter.conversation_store import ConversationStore
from heavylifter.errors import (
    ConflictError,
    HeavyLifterError,
    InternalError,
    NotFound,
    ValidationError,
)
from heavylifter.logging_config import setup_logging
from heavylifter.requirements import ConfidenceScorer, get_confidence_scorer, process_transcript
from heavylifter.schemas.generated_app import GeneratedApp
from heavylifter.voice import synthesize, transcribe

logger = logging.getLogger("heavylifter.web")

api = Blueprint("api", __name__, url_prefix="/api")


class BuildTable:
    """Simulated builds by build_id. Only one may be active at a time."""

    def __init__(self, ttl_seconds: float = 3600.0):
        self.ttl_seconds = ttl_seconds
        self.lock = threading.Lock()
        self._builds: dict[str, BuildSimulator] = {}

    def __len__(self) -> int:
        return len(self._builds)

    def clear(self):
        with self.lock:
            self._builds.clear()

    def active(self) -> list[BuildSimulator]:
        """Builds still pending or building. Caller holds ``lock``."""
        return [b for b in self._builds.values() if b.state.is_active()]

    def prune(self):
        """Remove finished builds older than the TTL. Caller holds ``lock``."""
        if not self.ttl_seconds:
            return
        now = datetime.now()
        to_remove = []
        for build_id, simulator in self._builds.items():
            completed_at = simulator.state.completed_at
            if not completed_at:
                continue
            try:
                completed = datetime.fromisoformat(completed_at)
            except (ValueError, TypeError):
                continue
            if (now - completed).total_seconds() > self.ttl_seconds:
                to_remove.append(build_id)
        for build_id in to_remove:
            del self._builds[build_id]

    def add(self, simulator: BuildSimulator):
        """Register a new build. Caller holds ``lock``."""
        self._builds[simulator.state.build_id] = simulator

    def get(self, build_id: Optional[str]) -> BuildSimulator:
        if not build_id:
            raise ValidationError("No build_id provided")
        with self.lock:
            simulator = self._builds.get(build_id)
        if simulator is None:
            raise NotFound("Build not found")
        return simulator


@dataclass
class Services:
    """Everything the routes need, owned by one app instance."""
    settings: Settings
    store: ConversationStore
    builds: BuildTable
    scorer: ConfidenceScorer
    rng: random.Random = field(default_factory=random.Random)


def _services() -> Services:
    return current_app.extensions["heavylifter"]


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON")
    return data


def _simulate_latency(seconds: float):
    if seconds > 0:
        time.sleep(seconds)


# ── Health ───────────────────────────────────────────────────────────────────

@api.route('/health', methods=['GET'])
def health():
    services = _services()
    return jsonify({
        'status': 'ok',
        'version': __version__,
        'conversations': len(services.store),
        'builds': len(services.builds),
    })


# ── Conversation ─────────────────────────────────────────────────────────────

@api.route('/voice/conversation', methods=['POST'])
def conversation():
    data = _json_body()
    action = data.get('action')
    store = _services().store

    if action == 'start':
        return jsonify(store.start(data.get('userId')).to_dict())

    if action == 'send_message':
        result = store.send_message(data.get('conversationId'), data.get('message'))
        return jsonify(result.to_dict())

    if action == 'get_conversation':
        return jsonify(store.get(data.get('conversationId')).to_dict())

    if action == 'end_conversation':
        return jsonify(store.end(data.get('conversationId')).to_dict())

    raise ValidationError('Invalid action')


@api.route('/voice/process-requirements', methods=['POST'])
def process_requirements():
    """Analyze one transcript and pick a clarification/confirmation reply."""
    data = _json_body()
    transcript = data.get('transcript')
    if not isinstance(transcript, str):
        raise ValidationError('Transcript is required')

    services = _services()
    _simulate_latency(services.settings.analysis_delay)

    result = process_transcript(
        transcript,
        history=data.get('history') or [],
        current_state=data.get('currentState'),
        scorer=services.scorer,
    )
    return jsonify(result.to_dict())


# ── Speech placeholders ──────────────────────────────────────────────────────

@api.route('/voice/transcribe', methods=['POST'])
def transcribe_audio():
    data = _json_body()
    result = transcribe(
        data.get('audioData'),
        language_code=data.get('languageCode') or 'en-US',
        sample_rate_hertz=data.get('sampleRateHertz') or 16000,
        rng=_services().rng,
    )
    return jsonify(result.to_dict())


@api.route('/voice/text-to-speech', methods=['POST'])
def text_to_speech():
    data = _json_body()
    result = synthesize(
        data.get('text'),
        language_code=data.get('languageCode') or 'en-US',
        ssml_gender=data.get('ssmlGender') or 'NEUTRAL',
        speaking_rate=data.get('speakingRate', 1.0),
        pitch=data.get('pitch', 0.0),
        volume_gain_db=data.get('volumeGainDb', 0.0),
    )
    return jsonify(result.to_dict())


# ── Generation ───────────────────────────────────────────────────────────────

def _generate_from(data: dict) -> GeneratedApp:
    idea = data.get('idea')
    if not isinstance(idea, str) or not idea.strip():
        raise ValidationError('Please provide your app idea')

    platforms = normalize_platforms(data.get('platforms') or [])
    if not platforms:
        raise ValidationError('Please select at least one platform')

    return generate_app(idea, platforms, data.get('buildSystem'))


@api.route('/generate', methods=['POST'])
def generate():
    data = _json_body()
    app_data = _generate_from(data)
    _simulate_latency(_services().settings.generation_delay)
    return jsonify(app_data.to_dict())


# ── Build simulation ─────────────────────────────────────────────────────────

@api.route('/build/start', methods=['POST'])
def build_start():
    """Start a simulated build from a generated app (or an idea to generate)."""
    data = _json_body()

    if 'app' in data:
        try:
            app_data = GeneratedApp.from_dict(data['app'])
        except (KeyError, TypeError, AttributeError) as e:
            raise ValidationError(f'Invalid app: {e}') from e
        if not app_data.platforms:
            raise ValidationError('Please select at least one platform')
    else:
        app_data = _generate_from(data)

    services = _services()
    builds = services.builds

    with builds.lock:
        if builds.active():
            raise ConflictError('A build is already running')
        builds.prune()
        simulator = BuildSimulator(app_data, step_delay=services.settings.build_step_delay)
        builds.add(simulator)

    build_id = simulator.state.build_id

    def run_build():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(simulator.build())
        except Exception as e:
            simulator.fail(str(e))
        finally:
            loop.close()

    thread = threading.Thread(target=run_build, daemon=True)
    thread.start()

    return jsonify({'buildId': build_id})


@api.route('/build/status', methods=['GET'])
def build_status():
    simulator = _services().builds.get(request.args.get('build_id'))
    return jsonify(simulator.state.to_dict())


@api.route('/build/stop', methods=['POST'])
def build_stop():
    data = _json_body()
    simulator = _services().builds.get(data.get('buildId'))
    simulator.stop()
    return jsonify({'stopped': True})


@api.route('/build/download', methods=['GET'])
def build_download():
    """Serve the inert payload of a completed platform build."""
    simulator = _services().builds.get(request.args.get('build_id'))
    platform = request.args.get('platform', '')

    status = simulator.state.get(platform)
    if status is None:
        raise NotFound('Platform not part of this build')
    if status.status != TaskStatus.COMPLETED:
        raise ConflictError('Platform build has not completed')

    filename = f"{app_slug(simulator.app.name)}-{platform}.js"
    return Response(
        simulator.payload(platform),
        mimetype='text/javascript',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


# ── App factory ──────────────────────────────────────────────────────────────

def _handle_error(error: HeavyLifterError):
    if error.status_code >= 500:
        logger.error("Request failed: %s", error.message)
    return jsonify(error.to_dict()), error.status_code


def _handle_unexpected(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return _handle_error(InternalError("Request failed"))


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ConversationStore] = None,
    rng: Optional[random.Random] = None,
) -> Flask:
    """Build the Flask app with its own conversation store and build table."""
    settings = settings or Settings.from_env()
    setup_logging(settings)

    rng = rng or random.Random()
    store = store or ConversationStore(
        ttl_seconds=settings.conversation_ttl,
        max_conversations=settings.max_conversations,
    )

    app = Flask(__name__)
    app.secret_key = settings.secret_key or secrets.token_hex(16)
    app.extensions["heavylifter"] = Services(
        settings=settings,
        store=store,
        builds=BuildTable(ttl_seconds=settings.build_ttl),
        scorer=get_confidence_scorer(settings.confidence_mode, rng),
        rng=rng,
    )
    app.register_blueprint(api)
    app.register_error_handler(HeavyLifterError, _handle_error)
    app.register_error_handler(Exception, _handle_unexpected)
    return app


if __name__ == '__main__':
    settings = Settings.from_env()
    app = create_app(settings)

    print(f"""
╔═══════════════════════════════════════════════════════════════╗
║     HEAVY LIFTER - IDEA TO APP                                 ║
╠═══════════════════════════════════════════════════════════════╣
║  Conversation: /api/voice/conversation                         ║
║  Generate:     /api/generate                                   ║
║  Build:        /api/build/start                                ║
╚═══════════════════════════════════════════════════════════════╝

API listening on: http://localhost:{settings.port}/api

Press Ctrl+C to stop the server.
    """)

    app.run(debug=settings.debug, host=settings.host, port=settings.port)
