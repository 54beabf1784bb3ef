#!/usr/bin/env python3
"""
HTTP / Socket.IO surface for live flight statistics.

The GPS source pushes samples with POST /position; every accepted
sample produces a new snapshot, returned in the response and broadcast
to Socket.IO clients as a 'statistics' event.

Routes:
    POST   /position          ingest {lat, lon, altitude, timestamp}
    POST   /gps_error         mark the GPS source as failed
    GET    /statistics        latest snapshot ({} before the first sample)
    GET    /flightpath        download the live flight path
    DELETE /flightpath        clear the live flight path
    PUT    /reference_track   set {name, trackPoints} as reference track
    DELETE /reference_track   remove the reference track
"""

from typing import Optional, Tuple

from flask import Flask, Response, jsonify, request
from flask_socketio import SocketIO

from aviameter.flightpath import FlightPath, RouteStore
from aviameter.statistics import FlightStatistics

import logging
log = logging.getLogger(__name__)


def _error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def create_app(statistics: FlightStatistics,
               route_store: Optional[RouteStore] = None) -> Tuple[Flask, SocketIO]:
    """
    Build the Flask app and its SocketIO wrapper.

    Args:
        statistics: Statistics session samples are fed into
        route_store: Where reference tracks are persisted, if anywhere

    Returns:
        Tuple of (app, socketio)
    """
    app = Flask(__name__)
    # Threading mode, no eventlet or gevent required
    socketio = SocketIO(app, async_mode='threading')

    @socketio.on('connect')
    def connect():
        log.info(f'client connected {request.sid}')

    @socketio.on('disconnect')
    def disconnect():
        log.info(f'client disconnected {request.sid}')

    @app.route('/position', methods=['POST'])
    def position():
        sample = request.get_json(silent=True)
        if sample is None:
            return _error("Expected a JSON sample")
        try:
            snapshot = statistics.ingest(sample)
        except ValueError as e:
            log.debug(f"Rejected sample {sample!r}: {e}")
            return _error(str(e))

        data = snapshot.to_dict()
        socketio.emit('statistics', data)
        return jsonify(data)

    @app.route('/gps_error', methods=['POST'])
    def gps_error():
        body = request.get_json(silent=True) or {}
        snapshot = statistics.report_gps_error(str(body.get('reason', '')))
        data = snapshot.to_dict()
        socketio.emit('statistics', data)
        return jsonify(data)

    @app.route('/statistics')
    def get_statistics():
        snapshot = statistics.latest
        return jsonify(snapshot.to_dict() if snapshot else {})

    @app.route('/flightpath', methods=['GET'])
    def export_flight_path():
        store = statistics.flight_path_store
        return Response(
            store.export_json(),
            mimetype='application/json',
            headers={
                'Content-Disposition': f'attachment; filename={store.export_filename()}'
            },
        )

    @app.route('/flightpath', methods=['DELETE'])
    def clear_flight_path():
        statistics.reset()
        return '', 204

    @app.route('/reference_track', methods=['PUT'])
    def set_reference_track():
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return _error("Expected a JSON object")
        name = body.get('name')
        if not isinstance(name, str) or not name:
            return _error("Reference track needs a name")
        try:
            flight_path = FlightPath.from_dict(body)
        except ValueError as e:
            return _error(str(e))

        if route_store is not None:
            route_store.set_reference_track(name, flight_path)
        statistics.set_reference_track(flight_path)
        log.info(f"Reference track {name!r} loaded with {len(flight_path)} points")
        return jsonify({"name": name, "points": len(flight_path)})

    @app.route('/reference_track', methods=['DELETE'])
    def clear_reference_track():
        if route_store is not None:
            route_store.clear_reference_track()
        statistics.set_reference_track(None)
        return '', 204

    return app, socketio


def run(app: Flask, socketio: SocketIO, host: str, port: int) -> None:
    """Serve until interrupted."""
    log.info(f"Start flighttrack on {host}:{port} ...")
    try:
        socketio.run(app, host=host, port=int(port), allow_unsafe_werkzeug=True)
    except KeyboardInterrupt:
        log.info("Shutdown requested.")
    log.info("Exiting flighttrack ...")
