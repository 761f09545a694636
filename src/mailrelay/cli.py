from __future__ import annotations

from pathlib import Path

import typer
from rich import print

from mailrelay.config import Settings
from mailrelay.core.logging import configure_logging, get_logger, new_correlation_id
from mailrelay.delivery import MailClient
from mailrelay.errors import RelayError
from mailrelay.parsers import convert_mime
from mailrelay.services import RelayService, run_doctor_checks
from mailrelay.smtp import SmtpRelayServer

app = typer.Typer(no_args_is_help=True, help="Simple SMTP relay to an HMAC-signed mail API")


def _load_settings(base_dir: Path | None = None) -> Settings:
    settings = Settings.load(base_dir=base_dir)
    settings.ensure_directories()
    return settings


@app.command("serve")
def serve_command(
    address: str | None = typer.Argument(None, help="Listen address host:port (default RELAY_BIND_ADDRESS)"),
    domain: str | None = typer.Argument(None, help="Advertised domain (default RELAY_DOMAIN)"),
) -> None:
    settings = _load_settings()
    if address:
        settings.bind_address = address
    if domain:
        settings.domain = domain

    try:
        listen = settings.listen_address()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    correlation_id = new_correlation_id()
    configure_logging(settings.logs_dir, correlation_id=correlation_id, level=settings.log_level)
    logger = get_logger("mailrelay.relay", correlation_id)

    handler = RelayService(settings=settings, logger=logger)
    with SmtpRelayServer(listen, settings.domain, handler) as server:
        host, port = server.server_address[:2]
        logger.info("Simple SMTP Relay for %s listening at %s:%s", settings.domain, host, port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")


@app.command("send")
def send_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="RFC 822 message file"),
    sender: str = typer.Option(..., "--from", help="Sender address"),
    to: list[str] = typer.Option(..., "--to", help="Recipient address (repeatable)"),
) -> None:
    settings = _load_settings()
    if not settings.delivery_enabled:
        raise typer.BadParameter("RELAY_ENDPOINT and RELAY_ACCESS_KEY must be set")

    correlation_id = new_correlation_id()
    configure_logging(settings.logs_dir, correlation_id=correlation_id, level=settings.log_level)
    logger = get_logger("mailrelay.send", correlation_id)

    client = MailClient(
        settings.endpoint,
        settings.access_key,
        timeout_sec=settings.delivery_timeout_sec,
        logger=logger,
    )
    try:
        message = convert_mime(sender.lower(), [addr.lower() for addr in to], file.read_bytes())
        response = client.send_mail(message)
    except RelayError as exc:
        print(f"[red]Delivery failed[/red]: {exc.__class__.__name__}: {exc}")
        raise typer.Exit(1) from exc

    print(f"[green]Sent[/green]. status={response.status_code} correlation_id={correlation_id}")


@app.command("doctor")
def doctor_command() -> None:
    settings = _load_settings()
    checks = run_doctor_checks(settings)

    print("Doctor results:")
    for check in checks:
        status = check["status"].upper()
        print(f"- \\[{status}] {check['check']}: {check['detail']}")

    if any(check["status"] == "error" for check in checks):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
