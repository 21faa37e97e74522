"""CLI entry point for the forecast service."""

import argparse
import logging

from forecaster.config.loader import config_hash, get_config_value, load_config
from forecaster.errors import ForecastUnavailable, GeocodingUnavailable, TimezoneUnresolved
from forecaster.geo.geocoder import GeoService
from forecaster.ingest.timezone_resolver import TimezoneResolver
from forecaster.service.weather_service import build_weather_service
from forecaster.storage.cache_store import create_cache_store

DEFAULT_CONFIG = "config/forecaster.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="forecaster",
        description="Daily weather forecast service",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    sub = parser.add_subparsers(dest="command")

    # weather
    weather_p = sub.add_parser("weather", help="Daily forecast for a coordinate")
    weather_p.add_argument("lat", type=float)
    weather_p.add_argument("lon", type=float)

    # timezone
    tz_p = sub.add_parser("timezone", help="Resolve the timezone of a coordinate")
    tz_p.add_argument("lat", type=float)
    tz_p.add_argument("lon", type=float)

    # geo
    geo_p = sub.add_parser("geo", help="Search places by name")
    geo_p.add_argument("name")
    geo_p.add_argument("--limit", type=int, default=None)

    # config show / config get
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    get_p = config_sub.add_parser("get", help="Show a single config value")
    get_p.add_argument("key", help="Dotted key, e.g. rate_limit.min_interval_ms")

    # serve
    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", default=None)
    serve_p.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    if args.command == "weather":
        return _cmd_weather(config, args)
    elif args.command == "timezone":
        return _cmd_timezone(args)
    elif args.command == "geo":
        return _cmd_geo(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    elif args.command == "serve":
        return _cmd_serve(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_weather(config, args) -> int:
    service = build_weather_service(config)
    try:
        result = service.get_weather(args.lat, args.lon)
    except ForecastUnavailable as e:
        print(f"Error: {e}")
        return 1

    meta = result.metadata
    print(f"Timezone: {meta.timezone_label} | Days: {meta.day_count}")
    for entry in result.entries:
        print(f"  {entry.to_dict()['date']}  {entry.temperature:.1f}°C")
    return 0


def _cmd_timezone(args) -> int:
    try:
        print(TimezoneResolver().resolve(args.lat, args.lon))
    except TimezoneUnresolved as e:
        print(f"Error: {e}")
        return 1
    return 0


def _cmd_geo(config, args) -> int:
    service = GeoService(
        create_cache_store(config.cache.redis_url),
        base_url=config.geocoding.base_url,
        user_agent=config.geocoding.user_agent,
        timeout=config.geocoding.timeout_seconds,
    )
    limit = args.limit or config.geocoding.default_limit
    try:
        results = service.search(args.name, limit)
    except GeocodingUnavailable as e:
        print(f"Error: {e}")
        return 1

    print(f"Found {len(results)} location(s)")
    for loc in results:
        print(f"  {loc.lat:.4f}, {loc.lon:.4f}  {loc.location_name}")
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(f"# hash {config_hash(config)}")
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "get":
        try:
            print(get_config_value(config, args.key))
            return 0
        except KeyError as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config get key")
        return 1


def _cmd_serve(config, args) -> int:
    import uvicorn

    from forecaster.api import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    uvicorn.run(create_app(config), host=host, port=port)
    return 0
