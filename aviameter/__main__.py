import os
import sys
import argparse
import logging
import logging.handlers

from aviameter.airports import load_airports
from aviameter.amconfig import AMConfig
from aviameter.flightpath import FileStore, RouteStore
from aviameter.flighttrack import create_app, run
from aviameter.statistics import FlightStatistics
from aviameter.version import __version__

log = logging.getLogger(__name__)


def setuplogs(cfg):
    log_file = cfg.paths.log_file
    log_dir = os.path.dirname(os.path.abspath(log_file))
    if not os.path.isdir(log_dir):
        os.makedirs(log_dir)

    file_log_level_str = str(getattr(cfg.general, 'file_log_level', 'DEBUG')).upper()
    console_log_level_str = str(getattr(cfg.general, 'console_log_level', 'INFO')).upper()

    # Override with AM_DEBUG environment variable if set (for development)
    if os.environ.get('AM_DEBUG'):
        file_log_level_str = 'DEBUG'
        console_log_level_str = 'DEBUG'

    file_log_level = getattr(logging, file_log_level_str, logging.DEBUG)
    console_log_level = getattr(logging, console_log_level_str, logging.INFO)

    # Set root logger to the minimum level so all messages can flow through
    root_level = min(file_log_level, console_log_level)

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=10485760,
        backupCount=5
    )
    file_handler.setLevel(file_log_level)
    file_handler.setFormatter(file_formatter)

    handlers = [file_handler]
    if sys.stdout is not None:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_log_level)
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    logging.basicConfig(
        level=root_level,
        handlers=handlers
    )

    log.info(f"Setup logs: {log_dir}")
    log.info(f"File log level: {file_log_level_str}, Console log level: {console_log_level_str}")


def build_statistics(cfg):
    """Wire stores, airports and the reference track into a FlightStatistics."""
    store = FileStore(cfg.paths.data_dir)
    route_store = RouteStore(store)

    airports = []
    if os.path.isfile(cfg.paths.airports_file):
        airports = load_airports(cfg.paths.airports_file)
    else:
        log.warning(f"No airport list at {cfg.paths.airports_file}; "
                    "nearest airport will be unavailable")

    reference_track = route_store.get_reference_track()
    if reference_track is not None:
        if cfg.route.reference_track_name and reference_track.name != cfg.route.reference_track_name:
            log.warning(f"Stored reference track {reference_track.name!r} does not match "
                        f"configured {cfg.route.reference_track_name!r}")
        log.info(f"Using reference track {reference_track.name!r} "
                 f"({len(reference_track.flight_path)} points)")

    statistics = FlightStatistics(
        store=store,
        airports=airports,
        reference_track=reference_track.flight_path if reference_track else None,
        arrival_airport=cfg.route.arrival_airport or None,
        window_size=cfg.statistics.window_size,
        eta_min_altitude=cfg.statistics.eta_min_altitude,
    )
    return statistics, route_store


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Aviameter: live flight statistics and ETA"
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Config file (default ~/.aviameter)",
    )
    parser.add_argument(
        "--host",
        help="Address to serve statistics on",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        help="Port to serve statistics on",
    )
    args = parser.parse_args(argv)

    cfg = AMConfig(args.config)
    setuplogs(cfg)
    log.info(f"Aviameter version: {__version__}")

    statistics, route_store = build_statistics(cfg)
    app, socketio = create_app(statistics, route_store)
    run(app, socketio,
        host=args.host or cfg.flightdata.webui_host,
        port=args.port or cfg.flightdata.webui_port)


if __name__ == "__main__":
    try:
        main()
    except Exception as _fatal_err:
        logging.getLogger(__name__).exception("Fatal error during startup: %s", _fatal_err)
        sys.exit(1)
