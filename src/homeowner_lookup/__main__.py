import argparse
import json
import sys
from dataclasses import replace

from .client import BatchDataClient
from .config import Settings
from .errors import InvalidRequest, ProviderError, ServiceNotConfigured
from .logging_setup import configure_logging
from .models import LookupRequest
from .normalize import address_hash
from .service import HomeownerLookupService
from .storage import HomeownerLookupSQLite


EXIT_OK = 0
EXIT_INVALID = 2
EXIT_PROVIDER = 3


def _add_address_args(parser):
    parser.add_argument("--street", required=True, help="Street address")
    parser.add_argument("--city", required=True, help="City")
    parser.add_argument("--state", required=True, help="State abbreviation")
    parser.add_argument("--zip", required=True, help="ZIP code")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="homeowner_lookup",
        description="Homeowner skip-trace lookup with a local cache",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, etc.)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as one JSON object per line",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    lookup = sub.add_parser("lookup", help="Look up the homeowner for an address")
    _add_address_args(lookup)
    lookup.add_argument("--property-id", default=None, help="Listing/property id")
    lookup.add_argument("--db", default=None, help="Cache database path")
    lookup.add_argument("--pretty", action="store_true", help="Indent JSON output")

    key = sub.add_parser("key", help="Print the cache key for an address")
    _add_address_args(key)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def _run_lookup(args, settings):
    if args.db:
        settings = replace(settings, db_path=args.db)
    store = HomeownerLookupSQLite(settings.db_path)
    client = BatchDataClient(settings.batch_data_api_key, settings.batch_data_api_url)
    service = HomeownerLookupService(settings, store, client)
    request = LookupRequest(
        street=args.street,
        city=args.city,
        state=args.state,
        zip=args.zip,
        property_id=args.property_id,
    )
    indent = 2 if args.pretty else None
    try:
        outcome = service.lookup(request)
    except InvalidRequest as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return EXIT_INVALID
    except ServiceNotConfigured as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return EXIT_PROVIDER
    except ProviderError as exc:
        print(
            json.dumps(
                {"error": "Failed to lookup homeowner information", "details": exc.details}
            ),
            file=sys.stderr,
        )
        return EXIT_PROVIDER
    finally:
        store.close()
        client.close()
    print(json.dumps(outcome.to_dict(), indent=indent))
    return EXIT_OK


def _run_serve(args, settings):
    import uvicorn

    from .api.app import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port)
    return EXIT_OK


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(args.log_level, json_lines=args.log_json or settings.log_json)

    if args.command == "key":
        print(address_hash(args.street, args.city, args.state, args.zip))
        return EXIT_OK
    if args.command == "lookup":
        return _run_lookup(args, settings)
    return _run_serve(args, settings)


if __name__ == "__main__":
    sys.exit(main())
