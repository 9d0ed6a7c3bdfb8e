"""Console notifier - prints reminders to the terminal."""

from datetime import datetime

import click


class ConsoleNotifier:
    """
    Terminal notifier.

    Implements Notifier protocol.
    """

    def __init__(self, bell: bool = True):
        self.bell = bell

    def notify(self, title: str, body: str) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        bell = "\a" if self.bell else ""
        click.echo(f"{bell}[{stamp}] {click.style(title, bold=True)} {body}")
