# goodwe_pvoutput/main.py

from datetime import datetime, timezone
from zoneinfo import ZoneInfo
import sys

from .cli import build_parser
from .config import Config
from .logging import ConsoleLog, StructuredLog, RunLogEntry

from .protocol.errors import ExchangeError
from .services.daylight_policy import DaylightPolicy
from .services.geocoder import Geocoder, GeocodingError
from .services.inverter_client import InverterClient
from .services.output_formatter import emit_json, emit_human
from .services.pvoutput_client import PVOutputClient, UploadError, reading_from_snapshot


EXIT_OK = 0
EXIT_EXCHANGE_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_UPLOAD_FAILED = 3
EXIT_GEOCODING_FAILED = 4


def check_daylight(app_cfg, geocoder, now, log):
    """Return DaylightInfo for *now*; raises GeocodingError when no location resolves."""
    latitude, longitude = geocoder.resolve()
    policy = DaylightPolicy(app_cfg.daylight, log, latitude=latitude, longitude=longitude)
    info = policy.get_info(now)
    log.debug(
        "Before sun up: %s, after sun down: %s",
        info.phase == "BEFORE_SUNRISE",
        info.phase == "AFTER_SUNSET",
    )
    return info


def run_command(
    command,
    *,
    inverter_client,
    pvoutput_client=None,
    now,
    as_json=False,
    attempts=None,
):
    """Poll once and either print or upload. Returns (snapshot, reading, outcome)."""
    snapshot = inverter_client.fetch_snapshot(attempts)
    reading = reading_from_snapshot(snapshot, now)

    if command == "read":
        if as_json:
            emit_json(snapshot, reading)
        else:
            emit_human(snapshot)
        return snapshot, reading, "printed"

    pvoutput_client.add_status(reading)
    return snapshot, reading, "uploaded"


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "attempts", None) is not None and args.attempts < 1:
        parser.error("--attempts must be at least 1")

    try:
        app_cfg = Config.load(args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    app_cfg.apply_overrides(
        ip_address=args.ip_address,
        port=args.port,
        api_key=args.api_key,
        system_id=args.system_id,
        location=args.location,
    )

    console_logger = ConsoleLog(
        level="DEBUG" if args.debug else app_cfg.logging.console_level,
        quiet=args.quiet or app_cfg.logging.console_quiet,
        debug_modules=app_cfg.logging.debug_modules,
    )
    log = console_logger.setup()
    structured_logger = StructuredLog(
        app_cfg.logging.structured_path,
        app_cfg.logging.structured_enabled,
    )

    try:
        app_cfg.validate_for(args.command, needs_location=not args.ignore_daylight)
        inverter_client = InverterClient(app_cfg.inverter, log)
    except ValueError as exc:
        log.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    now = datetime.now(timezone.utc)
    entry = RunLogEntry(
        timestamp=now.isoformat(),
        command=args.command,
        daylight_phase=None,
        snapshot=None,
        reading=None,
        outcome="failed",
    )

    exit_code = EXIT_OK
    try:
        if not args.ignore_daylight:
            geocoder = Geocoder(app_cfg.location, log)
            daylight_info = check_daylight(app_cfg, geocoder, now, log)
            entry.daylight_phase = daylight_info.phase
            if not daylight_info.is_daylight:
                if daylight_info.phase == "BEFORE_SUNRISE":
                    log.info("Running before sun up, exiting")
                else:
                    log.info("Running after sun down, exiting")
                entry.outcome = "skipped"
                return EXIT_OK

        local_now = now.astimezone(ZoneInfo(app_cfg.daylight.timezone))
        pvoutput_client = None
        if args.command == "upload":
            pvoutput_client = PVOutputClient(app_cfg.pvoutput, log)
        snapshot, reading, outcome = run_command(
            args.command,
            inverter_client=inverter_client,
            pvoutput_client=pvoutput_client,
            now=local_now,
            as_json=args.json,
            attempts=getattr(args, "attempts", None),
        )
        entry.snapshot = snapshot.as_dict()
        entry.reading = reading
        entry.outcome = outcome
    except GeocodingError as exc:
        log.error("Geocoding error: %s", exc)
        entry.error = str(exc)
        exit_code = EXIT_GEOCODING_FAILED
    except ExchangeError as exc:
        log.error("Failed to get data: %s", exc)
        entry.error = str(exc)
        exit_code = EXIT_EXCHANGE_FAILED
    except UploadError as exc:
        log.error("Upload to PVOutput failed: %s", exc)
        entry.error = str(exc)
        exit_code = EXIT_UPLOAD_FAILED
    finally:
        structured_logger.write(entry)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
