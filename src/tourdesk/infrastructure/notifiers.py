"""Notifier implementations: the log, or the terminal via click."""

from __future__ import annotations

import logging

import click

from tourdesk.application.ports import ERROR, Notifier

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):

    def notify(self, level: str, message: str) -> None:
        if level == ERROR:
            logger.warning(message)
        else:
            logger.info(message)


class ClickNotifier(Notifier):

    def notify(self, level: str, message: str) -> None:
        if level == ERROR:
            click.secho(f"  ! {message}", fg="red", err=True)
        else:
            click.secho(f"  {message}", fg="green")
