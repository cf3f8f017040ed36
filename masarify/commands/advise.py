"""Advise command: ask the spending advisor a question."""

from rich.markdown import Markdown

from masarify.advisor import get_financial_advice
from masarify.commands.common import console, load_settings, open_session


def advise_command(question: str) -> None:
    """Send a question and a reduced ledger summary to the advisor."""
    settings = load_settings()
    _, state = open_session()

    with console.status("Thinking..."):
        answer = get_financial_advice(
            question,
            state.transactions,
            state.categories,
            state.language,
            state.currency.code,
            settings.advisor,
        )

    console.print(Markdown(answer))
