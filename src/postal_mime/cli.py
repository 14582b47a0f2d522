"""Command-line interface for postal-mime."""

import sys
from typing import BinaryIO

import click
import structlog
from pydantic import ValidationError

from postal_mime.codec import decode_with_size, write_to
from postal_mime.config import Settings, get_settings
from postal_mime.core import configure_logging
from postal_mime.exceptions import MissingFieldError, PostalMimeError
from postal_mime.models import HeaderSet, Message

logger = structlog.get_logger(__name__)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug logging")
@click.option("--json-logs/--no-json-logs", default=False, help="JSON log format")
@click.pass_context
def main(ctx: click.Context, debug: bool, json_logs: bool) -> None:
    """postal-mime - build and parse RFC 5322 email messages."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_logs"] = json_logs
    configure_logging(json_format=json_logs, debug=debug)


@main.command()
@click.argument("source", type=click.File("rb"))
@click.option("--max-size", type=click.IntRange(min=1), default=None, help="Size cap in bytes")
def decode(source: BinaryIO, max_size: int | None) -> None:
    """Parse a raw message and print its fields and bodies."""
    settings = _load_settings()
    try:
        message = decode_with_size(source, max_size or settings.max_message_size)
    except PostalMimeError as e:
        logger.error("decode_failed", error=e.message)
        click.echo(f"Could not decode message: {e.message}", err=True)
        sys.exit(1)

    click.echo(f"From: {message.sender}")
    for address in message.to:
        click.echo(f"To: {address}")
    for address in message.cc:
        click.echo(f"Cc: {address}")
    click.echo(f"Subject: {message.subject}")
    for name, value in message.headers.lines():
        click.echo(f"{name}: {value}")

    for label, body in (("text/plain", message.text), ("text/html", message.html)):
        if body:
            click.echo(f"\n--- {label} ---")
            click.echo(body.decode("utf-8", errors="replace"))


def _parse_header_option(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise click.BadParameter(f"expected 'Name: value', got {raw!r}", param_hint="--header")
    return name.strip(), value.strip()


@main.command()
@click.option("--from", "sender", default="", help="Sender address")
@click.option("--to", multiple=True, help="Recipient (repeatable)")
@click.option("--cc", multiple=True, help="Cc recipient (repeatable)")
@click.option("--bcc", multiple=True, help="Bcc recipient (repeatable)")
@click.option("--subject", default="", help="Subject line")
@click.option("--text", "text_file", type=click.File("rb"), help="Plain-text body file")
@click.option("--html", "html_file", type=click.File("rb"), help="HTML body file")
@click.option(
    "--attach",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="File to attach (repeatable)",
)
@click.option("--header", "extra_headers", multiple=True, help="Extra 'Name: value' header")
@click.option("--output", type=click.File("wb"), default="-", help="Output file (default stdout)")
def encode(
    sender: str,
    to: tuple[str, ...],
    cc: tuple[str, ...],
    bcc: tuple[str, ...],
    subject: str,
    text_file: BinaryIO | None,
    html_file: BinaryIO | None,
    attach: tuple[str, ...],
    extra_headers: tuple[str, ...],
    output: BinaryIO,
) -> None:
    """Build a multipart message and write it out."""
    settings = _load_settings()

    headers = HeaderSet()
    for raw in extra_headers:
        headers.add(*_parse_header_option(raw))

    with Message(
        sender=sender,
        to=list(to),
        cc=list(cc),
        bcc=list(bcc),
        subject=subject,
        text=text_file.read() if text_file else b"",
        html=html_file.read() if html_file else b"",
        headers=headers,
    ) as message:
        try:
            for path in attach:
                message.attach_file(path)
            written = write_to(message, output, hostname=settings.hostname)
        except MissingFieldError as e:
            click.echo(f"Could not encode message: {e.message}", err=True)
            sys.exit(1)
        except (PostalMimeError, OSError) as e:
            logger.error("encode_failed", error=str(e))
            click.echo(f"Could not encode message: {e}", err=True)
            sys.exit(1)

    logger.info("message_written", bytes_written=written, attachments=len(attach))


if __name__ == "__main__":
    main()
