# goodwe_pvoutput/cli.py
import argparse

def build_parser():
    parser = argparse.ArgumentParser(
        prog="goodwe-pvoutput",
        description="Poll a GoodWe inverter over UDP and upload the reading to PVOutput"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to an optional configuration file"
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress log output on stdout (cron-friendly)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text"
    )

    parser.add_argument(
        "--ignore-daylight",
        action="store_true",
        help="Poll even between sunset and sunrise"
    )

    # Overrides for values normally taken from the config file or environment
    parser.add_argument("-i", "--ip-address", help="IP address of the GoodWe inverter (env IP_ADDRESS)")
    parser.add_argument("-p", "--port", type=int, help="UDP port of the inverter, default 8899 (env PORT)")
    parser.add_argument("-a", "--api-key", help="PVOutput API key (env API_KEY)")
    parser.add_argument("-s", "--system-id", help="PVOutput system ID (env SYSTEM_ID)")
    parser.add_argument("-l", "--location", help="Location as 'city, country' (env LOCATION)")

    sub = parser.add_subparsers(dest="command", required=True)

    # Poll and upload
    sub.add_parser("upload", help="Poll the inverter and upload the reading to PVOutput")

    # Poll and print
    cmd_read = sub.add_parser(
        "read",
        help="Poll the inverter and print the decoded telemetry without uploading",
    )
    cmd_read.add_argument(
        "--attempts",
        type=int,
        default=None,
        help="Override the configured number of poll attempts",
    )

    return parser
