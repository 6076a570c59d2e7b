"""Tests for the nutrition advisor."""

import asyncio

from nutrichat.domain.chat import AssistantReply
from nutrichat.domain.food import aggregate_daily_stats
from nutrichat.services.advisor import (
    FAILED_ADVICE,
    MISSING_KEY_ADVICE,
    AdvisorService,
    build_prompt,
    cache_key,
)
from nutrichat.services.chat import CoachChatService
from nutrichat.services.preferences import InMemoryLocalStore, PreferencesService
from tests.conftest import FakeChatClient, make_food, make_profile


def _advisor(client: FakeChatClient | None) -> AdvisorService:
    return AdvisorService(
        chat_service=CoachChatService(
            client=client, model="deepseek-chat", temperature=0.7
        ),
        preferences=PreferencesService(InMemoryLocalStore()),
    )


def test_advice_is_cached_per_log_signature() -> None:
    client = FakeChatClient(
        replies=[AssistantReply(content="First"), AssistantReply(content="Second")]
    )
    advisor = _advisor(client)
    log = [make_food()]
    stats = aggregate_daily_stats(log)

    first = asyncio.run(advisor.get_advice(make_profile(), stats, log, "2024-05-01"))
    again = asyncio.run(advisor.get_advice(make_profile(), stats, log, "2024-05-01"))
    log.append(make_food(calories=100))
    changed = asyncio.run(
        advisor.get_advice(
            make_profile(), aggregate_daily_stats(log), log, "2024-05-01"
        )
    )

    assert (first, again, changed) == ("First", "First", "Second")
    assert len(client.calls) == 2


def test_missing_key_advice() -> None:
    advisor = _advisor(None)

    advice = asyncio.run(
        advisor.get_advice(make_profile(), aggregate_daily_stats([]), [], "2024-05-01")
    )

    assert advice == MISSING_KEY_ADVICE


def test_provider_failure_is_not_cached() -> None:
    client = FakeChatClient(error=RuntimeError("timeout"))
    advisor = _advisor(client)
    stats = aggregate_daily_stats([])

    assert asyncio.run(
        advisor.get_advice(make_profile(), stats, [], "2024-05-01")
    ) == FAILED_ADVICE
    client.error = None
    client.replies = [AssistantReply(content="Recovered")]
    assert asyncio.run(
        advisor.get_advice(make_profile(), stats, [], "2024-05-01")
    ) == "Recovered"


def test_cache_key_format() -> None:
    log = [make_food()]

    key = cache_key("2024-05-01", aggregate_daily_stats(log), log)

    assert key == 'ADVISOR_CACHE_2024-05-01_{"count": 1, "cals": 500.0, "prot": 30.0}'


def test_prompt_mentions_biometrics_when_known() -> None:
    prompt = build_prompt(
        make_profile(age=30, weight=80.0, height=180.0),
        aggregate_daily_stats([]),
        [],
    )

    assert "- Age: 30 years" in prompt
    assert "- Weight: 80 kg" in prompt
    assert "No meals logged yet." in prompt
