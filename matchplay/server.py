import argparse
import logging
import os

import uvicorn

from matchplay.settings import Settings, load_settings

logger = logging.getLogger(__name__)
APP_MODULE = "matchplay.main:app"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

SSL_OPTIONS = {
    "SSL_CERT_FILE": "ssl_certfile",
    "SSL_KEY_FILE": "ssl_keyfile",
    "SSL_CA_FILE": "ssl_ca_certs",
    "SSL_KEY_PASSWORD": "ssl_keyfile_password",
}


def ssl_options() -> dict[str, str]:
    """Uvicorn TLS keyword arguments, or nothing unless both cert and key are set."""
    options = {
        option: os.environ[key]
        for key, option in SSL_OPTIONS.items()
        if os.getenv(key)
    }
    if not options:
        return {}
    if "ssl_certfile" not in options or "ssl_keyfile" not in options:
        logger.warning("HTTPS needs both SSL_CERT_FILE and SSL_KEY_FILE, serving plain HTTP.")
        return {}
    logger.info("Serving HTTPS with %s", options["ssl_certfile"])
    return options


def parse_args(settings: Settings, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the match play scoring service.")
    parser.add_argument("--host", default=settings.app_host)
    parser.add_argument("--port", type=int, default=settings.app_port)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    args = parse_args(settings, argv)
    uvicorn.run(
        APP_MODULE,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
        **ssl_options(),
    )


if __name__ == "__main__":
    main()
