"""Spending advisor backed by the Gemini API.

Only a privacy-reduced summary of the ledger ever leaves the machine:
date, amount, direction and English category name of the most recent
transactions. Ids, notes, accounts and receipt images are never sent.
"""

import json
import logging
from datetime import datetime
from typing import Any

from google import genai
from google.genai import types

from masarify.config import AdvisorSettings
from masarify.dates import date_part, parse_timestamp
from masarify.domain.models import UNKNOWN_LABEL, Category, Language, Transaction
from masarify.domain.state import find_category
from masarify.errors import ExternalServiceError

logger = logging.getLogger(__name__)

MESSAGES: dict[Language, dict[str, str]] = {
    Language.EN: {
        "missing_key": "Error: API Key is missing. Please set {env} in your environment.",
        "empty": "I could not generate a response.",
        "failed": "Sorry, an error occurred connecting to the Smart Advisor.",
    },
    Language.AR: {
        "missing_key": "عذراً، مفتاح الربط مع الذكاء الاصطناعي مفقود. يرجى التأكد من إعداد {env}.",
        "empty": "لم أتمكن من توليد إجابة.",
        "failed": "عذراً، حدث خطأ أثناء الاتصال بالمستشار الذكي. يرجى المحاولة لاحقاً.",
    },
}


def summarize_for_advisor(
    transactions: tuple[Transaction, ...],
    categories: tuple[Category, ...],
    limit: int = 100,
) -> list[dict[str, Any]]:
    """Reduce transactions to the fields the advisor may see.

    Args:
        transactions: All transactions.
        categories: Categories used to resolve names.
        limit: Maximum number of transactions to include.

    Returns:
        List of {date, amount, type, category} dicts, most recent first.
    """
    # Category names are always sent in English; the reply is localized by the prompt
    summary = []
    for txn in transactions:
        category = find_category(categories, txn.category_id)
        summary.append(
            {
                "date": date_part(txn.date),
                "amount": txn.amount,
                "type": txn.type.value,
                "category": category.name_en if category else UNKNOWN_LABEL,
            }
        )

    def sort_key(item: dict[str, Any]) -> datetime:
        return parse_timestamp(item["date"]) or datetime.min

    summary.sort(key=sort_key, reverse=True)
    return summary[:limit]


def build_system_instruction(language: Language, currency_code: str) -> str:
    language_name = "Arabic" if language == Language.AR else "English"
    return (
        'You are an expert financial advisor named "Masarify AI".\n'
        "Analyze the provided transaction JSON data.\n"
        f"The user's language is {language_name}.\n"
        f"Respond strictly in {language_name}.\n"
        "Be concise, encouraging, and provide specific actionable advice based on the spending patterns.\n"
        "Format your response in Markdown (use bullet points, bold text).\n"
        "Focus on high spending categories and saving opportunities.\n"
        f"The currency code is {currency_code}.\n"
    )


def request_advice(
    client: Any,
    query: str,
    summary: list[dict[str, Any]],
    language: Language,
    currency_code: str,
    settings: AdvisorSettings,
) -> str | None:
    """Send one advice request.

    Returns:
        Response text, or None if the model returned nothing.

    Raises:
        ExternalServiceError: If the API call fails.
    """
    data_string = json.dumps(summary, ensure_ascii=False)
    try:
        response = client.models.generate_content(
            model=settings.model,
            contents=[
                f"Here is my recent transaction data: {data_string}",
                f"User Question: {query}",
            ],
            config=types.GenerateContentConfig(
                system_instruction=build_system_instruction(language, currency_code),
                temperature=settings.temperature,
            ),
        )
    except Exception as e:
        raise ExternalServiceError(f"Gemini API error: {e}") from e
    return response.text or None


def get_financial_advice(
    query: str,
    transactions: tuple[Transaction, ...],
    categories: tuple[Category, ...],
    language: Language,
    currency_code: str,
    settings: AdvisorSettings | None = None,
    client: Any = None,
) -> str:
    """Ask the advisor a question about the ledger.

    Args:
        query: Free-text question.
        transactions: All transactions (reduced before sending).
        categories: Categories used to resolve names.
        language: Reply language.
        currency_code: Currency code of the amounts.
        settings: Advisor settings. If None, uses defaults.
        client: Gemini client. If None, one is created from the API key.

    Returns:
        Advice text, or a localized error message. Never raises.
    """
    settings = settings or AdvisorSettings()
    messages = MESSAGES[language]

    if client is None:
        api_key = settings.api_key
        if not api_key:
            logger.error("Advisor API key is missing (%s)", settings.api_key_env)
            return messages["missing_key"].format(env=settings.api_key_env)
        client = genai.Client(api_key=api_key)

    summary = summarize_for_advisor(transactions, categories, settings.max_transactions)

    try:
        text = request_advice(client, query, summary, language, currency_code, settings)
    except ExternalServiceError as e:
        logger.error("%s", e)
        return messages["failed"]

    return text or messages["empty"]
