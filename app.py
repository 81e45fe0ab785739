# -*- coding: utf-8 -*-
"""
LINE seat booking bot – Flask entry point.

  POST /webhook   LINE webhook (JSON body, or form field ``data``)
  GET  /webhook   liveness
  GET  /health    liveness

  flask --app app setup-sheets     create/format the Messages and Bookings sheets
  flask --app app reset-bookings   run the daily cleanup now
"""

from flask import Flask, request, jsonify
from flask_cors import CORS
import logging
import os
import time

from seatbot.aggregator import Aggregator
from seatbot.config import load_config
from seatbot.errors import MalformedPayload
from seatbot.line_api import LineClient
from seatbot.reset_job import daily_cleanup, start_scheduler
from seatbot.router import CommandRouter
from seatbot.sheets_store import open_sheets, setup_sheets
from seatbot.webhook import parse_payload, to_message, verify_signature

# ===============================
# Logging
# ===============================
logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO').upper(), format='%(asctime)s - %(levelname)s - %(message)s')

ACTIVE_MESSAGE = 'Booking bot is active'


def _response(message: str, code: int):
    return jsonify({"message": message}), code


def build_router(config, event_log=None, summary=None, notifier=None) -> CommandRouter:
    """Wire the router; without an explicit event log the Google Sheets are used."""
    if event_log is None:
        event_log, summary = open_sheets(config)
    aggregator = Aggregator(event_log, summary)
    aggregator.refresh()
    notifier = notifier or LineClient(config.line_channel_access_token)
    return CommandRouter(config, event_log, aggregator, notifier)


def _process_event(router, event, tzinfo) -> bool:
    """Handle one webhook event. Returns False if it failed; sibling events still run."""
    try:
        msg = to_message(event, tzinfo)
    except MalformedPayload as e:
        logging.warning(f"Skipping malformed event ({e}): {event!r}")
        return True
    if msg is None:
        logging.debug(f"Ignoring non-text event: {event!r}")
        return True
    try:
        router.handle(msg)
    except Exception:
        logging.exception(f"Error handling event {msg.event_id}")
        return False
    return True


def create_app(config=None, router=None, with_scheduler=None) -> Flask:
    config = config or load_config()
    router = router or build_router(config)

    app = Flask(__name__)
    CORS(app)
    app.extensions['seatbot'] = {'config': config, 'router': router, 'scheduler': None}

    if with_scheduler is None:
        with_scheduler = config.enable_scheduler
    if with_scheduler:
        app.extensions['seatbot']['scheduler'] = start_scheduler(config, router)

    # ===============================
    # Webhook entry
    # ===============================

    @app.route('/webhook', methods=['POST'])
    def webhook():
        t0 = time.monotonic()
        body = request.get_data()
        try:
            if config.line_channel_secret:
                verify_signature(body, request.headers.get('X-Line-Signature'), config.line_channel_secret)
            events = parse_payload(body, request.form.get('data'))
        except MalformedPayload as e:
            logging.error(f"Rejected webhook: {e}")
            return _response(str(e), 400)

        try:
            logging.info(f"==============================📥 Webhook with {len(events)} event(s)==============================")
            failed = [e for e in events if not _process_event(router, e, config.tzinfo)]
        except Exception:
            logging.exception("Webhook crashed")
            return _response('Internal server error', 500)
        if failed:
            # non-2xx makes LINE redeliver; already recorded events are skipped as duplicates
            logging.error(f"{len(failed)} of {len(events)} event(s) failed")
            return _response('Internal server error', 500)

        logging.info(f"⏱ Webhook handler time = {time.monotonic() - t0:.3f}s")
        return _response('OK', 200)

    @app.route('/webhook', methods=['GET'])
    @app.route('/health', methods=['GET'])
    def health():
        return _response(ACTIVE_MESSAGE, 200)

    # ===============================
    # CLI
    # ===============================

    @app.cli.command('setup-sheets')
    def setup_sheets_command():
        """Create the worksheets, write headers and formatting."""
        setup_sheets(config)

    @app.cli.command('reset-bookings')
    def reset_bookings_command():
        """Clear every booking now (same as the daily cleanup)."""
        daily_cleanup(router)

    return app


# ===============================
# Run
# ===============================

if __name__ == '__main__':
    create_app().run(port=int(os.getenv('PORT', '5000')), debug=True, use_reloader=False)
