"""Command-line interface: build a request and print its description."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from . import __version__
from .builder import RequestBuilder
from .config import BuilderSettings, load_environment
from .cookies import Cookie
from .logging_utils import configure_logging
from .params import Param
from .signature import Ed25519SignatureCalculator, SignatureError
from .uri import InvalidUriError, UnsupportedSchemeError


def _header(value: str) -> tuple[str, str]:
    name, sep, content = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError("Headers must look like 'Name: value'")
    return name.strip(), content.strip()


def _param(value: str) -> Param:
    name, sep, content = value.partition("=")
    if not name:
        raise argparse.ArgumentTypeError("Parameters must look like 'name=value' or 'name'")
    return Param(name, content if sep else None)


def _cookie(value: str) -> Cookie:
    name, sep, content = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError("Cookies must look like 'name=value'")
    return Cookie(name=name, value=content)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reqbuilder",
        description="Assemble an HTTP request description and print it as JSON.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--method", default="GET", help="HTTP method (default: GET)")
    parser.add_argument("--url", help="Target URL; http://localhost when omitted")
    parser.add_argument("-H", "--header", dest="headers", action="append", type=_header, default=[], help="Header as 'Name: value' (repeatable)")
    parser.add_argument("--query", action="append", type=_param, default=[], help="Query parameter as name=value (repeatable)")
    parser.add_argument("--cookie", dest="cookies", action="append", type=_cookie, default=[], help="Cookie as name=value; later values replace earlier ones")

    body = parser.add_mutually_exclusive_group()
    body.add_argument("--data", help="Text body")
    body.add_argument("--data-file", type=Path, help="Send the named file as the body")
    body.add_argument("--form", action="append", type=_param, help="Form parameter as name=value (repeatable)")

    parser.add_argument("--content-length", type=int, help="Explicit content length")
    parser.add_argument("--timeout", type=int, default=0, help="Request timeout in milliseconds")
    redirects = parser.add_mutually_exclusive_group()
    redirects.add_argument("--follow-redirects", dest="follow_redirect", action="store_true", default=None)
    redirects.add_argument("--no-follow-redirects", dest="follow_redirect", action="store_false")
    parser.add_argument("--disable-url-encoding", action="store_true", help="Append query parameters verbatim")
    parser.add_argument("--sign", action="store_true", help="Sign with the key at REQBUILDER_SIGNING_KEY_PATH")
    parser.add_argument("--key-id", help="Key identifier sent alongside the signature")
    parser.add_argument("--show-secrets", action="store_true", help="Do not redact credential headers")
    parser.add_argument("--log-json", action="store_true", help="Emit structured JSON logs to the log file")
    parser.add_argument("--log-file", type=Path, help="Write logs to the specified path")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("--quiet", action="store_true", help="Reduce logging output")
    return parser


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(None if argv is None else list(argv))


def configure_cli_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    configure_logging(level=level, json_logs=args.log_json, logfile=args.log_file)


def builder_from_args(args: argparse.Namespace, settings: BuilderSettings) -> RequestBuilder:
    builder = RequestBuilder(
        args.method.upper(),
        disable_url_encoding=args.disable_url_encoding or settings.disable_url_encoding,
    )
    if args.url:
        builder.set_url(args.url)
    for name, value in args.headers:
        builder.add_header(name, value)
    if args.query:
        builder.add_query_params(list(args.query))
    for cookie in args.cookies:
        builder.add_or_replace_cookie(cookie)
    if args.data is not None:
        builder.set_body(args.data)
    elif args.data_file is not None:
        builder.set_body(args.data_file)
    elif args.form:
        builder.set_form_params(args.form)
    if args.content_length is not None:
        builder.set_content_length(args.content_length)
    if args.timeout:
        builder.set_request_timeout(args.timeout)
    if args.follow_redirect is not None:
        builder.set_follow_redirect(args.follow_redirect)
    if args.sign:
        builder.set_signature_calculator(
            Ed25519SignatureCalculator.from_path(
                settings.signing_key_path,
                header_name=settings.signature_header,
                key_id=args.key_id,
            )
        )
    return builder


def main(argv: Optional[Iterable[str]] = None) -> int:
    load_environment()
    args = parse_args(argv)

    configure_cli_logging(args)
    logger = logging.getLogger("reqbuilder.cli")
    settings = BuilderSettings.from_env()

    try:
        request = builder_from_args(args, settings).build()
    except (InvalidUriError, UnsupportedSchemeError) as exc:
        logger.error("Invalid request target: %s", exc)
        return 1
    except SignatureError as exc:
        logger.error("Unable to sign request: %s", exc)
        return 1

    print(json.dumps(request.as_dict(redact=not args.show_secrets), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
