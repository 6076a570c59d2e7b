"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date
from uuid import uuid4

import pytest

from nutrichat.config import Settings
from nutrichat.containers import AppContainer
from nutrichat.domain.chat import AssistantReply
from nutrichat.domain.food import FoodItem
from nutrichat.domain.profile import UserProfile
from nutrichat.domain.state import AppState
from nutrichat.services.advisor import AdvisorService
from nutrichat.services.chat import ChatClient, CoachChatService
from nutrichat.services.classifier import MealClassifierClient, MealClassifierService
from nutrichat.services.food_log import FoodLogService, MealRepository
from nutrichat.services.insights import InsightScheduler
from nutrichat.services.notifications import NotificationService, TelegramClient
from nutrichat.services.orchestrator import ConversationOrchestrator
from nutrichat.services.preferences import InMemoryLocalStore, PreferencesService
from nutrichat.services.profiles import AuthService, ProfileRepository, ProfileService
from nutrichat.services.sessions import SessionManager
from nutrichat.services.sync import MealSyncService, SheetsWebhookClient
from nutrichat.services.tools import ToolExecutor


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[str, UserProfile] = field(default_factory=dict)
    updates: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    fail_reads: bool = False
    fail_creates: bool = False

    def get_by_phone(self, phone_number: str) -> UserProfile | None:
        if self.fail_reads:
            raise ConnectionError("datastore unreachable")
        return self.profiles.get(phone_number)

    def create_profile(self, phone_number: str) -> UserProfile:
        if self.fail_creates:
            raise RuntimeError("insert failed")
        profile = UserProfile(
            name="User",
            calorie_target=2200,
            protein_target=150,
            uuid=str(uuid4()),
            phone_number=phone_number,
        )
        self.profiles[phone_number] = profile
        return profile

    def update_profile(self, uuid: str, fields: dict[str, object]) -> None:
        self.updates.append((uuid, fields))


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    rows: dict[str, list[FoodItem]] = field(default_factory=dict)
    updated: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    fail: bool = False

    def list_logs(self, phone_number: str, day: date | None = None) -> list[FoodItem]:
        if self.fail:
            raise ConnectionError("datastore unreachable")
        return list(self.rows.get(phone_number, []))

    def add_log(self, phone_number: str, item: FoodItem) -> None:
        if self.fail:
            raise ConnectionError("datastore unreachable")
        self.rows.setdefault(phone_number, []).append(item)

    def update_log(self, log_id: str, updates: dict[str, object]) -> None:
        if self.fail:
            raise ConnectionError("datastore unreachable")
        self.updated.append((log_id, updates))

    def delete_log(self, log_id: str) -> None:
        if self.fail:
            raise ConnectionError("datastore unreachable")
        self.deleted.append(log_id)


@dataclass
class FakeChatClient(ChatClient):
    """Chat client returning scripted replies and recording requests."""

    replies: list[AssistantReply] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None
    on_complete: Callable[[], None] | None = None

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        tools: list[dict[str, object]] | None,
        temperature: float,
    ) -> AssistantReply:
        self.calls.append(
            {
                "model": model,
                "messages": messages,
                "tools": tools,
                "temperature": temperature,
            }
        )
        if self.on_complete:
            self.on_complete()
        if self.error:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return AssistantReply(content="ok")


@dataclass
class FakeClassifierClient(MealClassifierClient):
    """Classifier client returning fixed text."""

    image_text: str = (
        "Meal Description: Chicken salad\n"
        "Calories: 420\nProteins: 35\nCarbs: 12\nFat: 24"
    )
    audio_text: str = (
        "Meal Description: Oatmeal\nCalories: 300\nProteins: 10\nCarbs: 50\nFat: 6"
    )
    calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    async def classify_image(self, *, model: str, data_url: str, prompt: str) -> str:
        self.calls.append({"kind": "image", "model": model, "data_url": data_url})
        if self.error:
            raise self.error
        return self.image_text

    async def classify_audio(
        self, *, model: str, mime_type: str, data: str, prompt: str
    ) -> str:
        self.calls.append(
            {"kind": "audio", "model": model, "mime_type": mime_type, "data": data}
        )
        if self.error:
            raise self.error
        return self.audio_text


@dataclass
class FakeSheetsClient(SheetsWebhookClient):
    """Webhook client recording posted rows."""

    rows: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    error: Exception | None = None

    async def post_row(self, url: str, row: dict[str, object]) -> None:
        if self.error:
            raise self.error
        self.rows.append((url, row))


@dataclass
class FakeTelegramClient(TelegramClient):
    """Telegram client recording sends."""

    messages: list[tuple[str, str]] = field(default_factory=list)
    photos: list[tuple[str, bytes, str | None]] = field(default_factory=list)
    voices: list[tuple[str, bytes]] = field(default_factory=list)
    error: Exception | None = None

    async def send_message(self, chat_id: str, text: str) -> None:
        if self.error:
            raise self.error
        self.messages.append((chat_id, text))

    async def send_photo(
        self, chat_id: str, photo: bytes, caption: str | None = None
    ) -> None:
        if self.error:
            raise self.error
        self.photos.append((chat_id, photo, caption))

    async def send_voice(self, chat_id: str, voice: bytes) -> None:
        if self.error:
            raise self.error
        self.voices.append((chat_id, voice))


def make_profile(**overrides: object) -> UserProfile:
    """Return a signed-in profile with standard targets."""
    profile = UserProfile(
        name="Alex",
        calorie_target=2200,
        protein_target=150,
        uuid="profile-1",
        phone_number="5551234",
    )
    return replace(profile, **overrides)


def make_food(name: str = "Rice bowl", **overrides: object) -> FoodItem:
    """Return a logged food with simple macros."""
    item = FoodItem(
        id=str(uuid4()),
        name=name,
        quantity="1 serving",
        calories=500.0,
        protein=30.0,
        carbs=60.0,
        fat=10.0,
        timestamp=1_700_000_000_000,
    )
    return replace(item, **overrides)


def make_executor(  # noqa: PLR0913
    profile_repository: InMemoryProfileRepository,
    meal_repository: InMemoryMealRepository,
    sheets_client: FakeSheetsClient,
    preferences: PreferencesService,
    scheduler: InsightScheduler | None = None,
    behavioral_delay: float = 1.5,
) -> ToolExecutor:
    """Return a tool executor wired to in-memory fakes."""
    food_log_service = FoodLogService(meal_repository)
    return ToolExecutor(
        profile_service=ProfileService(profile_repository),
        preferences=preferences,
        sync_service=MealSyncService(
            sheets_client=sheets_client, food_log_service=food_log_service
        ),
        insight_scheduler=scheduler or InsightScheduler(),
        behavioral_delay=behavioral_delay,
    )


def make_orchestrator(
    chat_client: FakeChatClient | None,
    classifier_client: FakeClassifierClient | None,
    executor: ToolExecutor,
    notifications: NotificationService | None = None,
) -> ConversationOrchestrator:
    """Return an orchestrator around fake providers."""
    return ConversationOrchestrator(
        chat_service=CoachChatService(
            client=chat_client, model="deepseek-chat", temperature=0.7
        ),
        classifier=MealClassifierService(
            client=classifier_client,
            image_model="gpt-4o-mini",
            audio_model="gpt-4o-audio-preview",
        ),
        tool_executor=executor,
        notifications=notifications or NotificationService(client=None, chat_id=""),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_key="service-key",
        chat_api_key="chat-key",
        classifier_api_key="classifier-key",
        telegram_bot_token="test-token",
        telegram_chat_id="42",
    )


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def classifier_client() -> FakeClassifierClient:
    return FakeClassifierClient()


@pytest.fixture
def sheets_client() -> FakeSheetsClient:
    return FakeSheetsClient()


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def preferences() -> PreferencesService:
    return PreferencesService(InMemoryLocalStore())


@pytest.fixture
def state() -> AppState:
    return AppState(profile=make_profile())


@pytest.fixture
def executor(
    profile_repository: InMemoryProfileRepository,
    meal_repository: InMemoryMealRepository,
    sheets_client: FakeSheetsClient,
    preferences: PreferencesService,
) -> ToolExecutor:
    return make_executor(
        profile_repository, meal_repository, sheets_client, preferences
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    profile_repository: InMemoryProfileRepository,
    meal_repository: InMemoryMealRepository,
    chat_client: FakeChatClient,
    classifier_client: FakeClassifierClient,
    sheets_client: FakeSheetsClient,
    telegram_client: FakeTelegramClient,
    preferences: PreferencesService,
) -> AppContainer:
    profile_service = ProfileService(profile_repository)
    food_log_service = FoodLogService(meal_repository)
    chat_service = CoachChatService(
        client=chat_client,
        model=settings.chat_model,
        temperature=settings.chat_temperature,
    )
    classifier = MealClassifierService(
        client=classifier_client,
        image_model=settings.classifier_model,
        audio_model=settings.classifier_audio_model,
    )
    sync_service = MealSyncService(
        sheets_client=sheets_client, food_log_service=food_log_service
    )
    notifications = NotificationService(
        client=telegram_client, chat_id=settings.telegram_chat_id
    )
    advisor = AdvisorService(chat_service=chat_service, preferences=preferences)
    auth_service = AuthService(profile_service)
    session_manager = SessionManager(
        auth_service=auth_service,
        profile_service=profile_service,
        preferences=preferences,
        food_log_service=food_log_service,
        chat_service=chat_service,
        classifier=classifier,
        sync_service=sync_service,
        notifications=notifications,
        advisor=advisor,
    )

    async def close_resources() -> None:
        session_manager.close_all()

    return AppContainer(
        settings=settings,
        preferences=preferences,
        profile_service=profile_service,
        auth_service=auth_service,
        food_log_service=food_log_service,
        chat_service=chat_service,
        classifier=classifier,
        sync_service=sync_service,
        notifications=notifications,
        advisor=advisor,
        session_manager=session_manager,
        close_resources=close_resources,
    )
