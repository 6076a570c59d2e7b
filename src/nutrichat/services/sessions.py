"""Signed-in session registry."""

import logging
from dataclasses import dataclass, field
from uuid import uuid4

from nutrichat.domain.profile import UserProfile
from nutrichat.domain.state import AppState
from nutrichat.services.advisor import AdvisorService
from nutrichat.services.chat import CoachChatService
from nutrichat.services.classifier import MealClassifierService
from nutrichat.services.controller import AppController
from nutrichat.services.food_log import FoodLogService
from nutrichat.services.insights import InsightScheduler
from nutrichat.services.notifications import NotificationService
from nutrichat.services.orchestrator import ConversationOrchestrator
from nutrichat.services.preferences import PreferencesService
from nutrichat.services.profiles import AuthService, ProfileService
from nutrichat.services.sync import MealSyncService
from nutrichat.services.tools import ToolExecutor

logger = logging.getLogger(__name__)


@dataclass
class SessionManager:
    """Creates one controller per sign-in and looks them up by token."""

    auth_service: AuthService
    profile_service: ProfileService
    preferences: PreferencesService
    food_log_service: FoodLogService
    chat_service: CoachChatService
    classifier: MealClassifierService
    sync_service: MealSyncService
    notifications: NotificationService
    advisor: AdvisorService
    history_window: int = 10
    behavioral_delay: float = 1.5
    biometric_delay: float = 3.0
    _sessions: dict[str, AppController] = field(default_factory=dict)

    def request_code(self, phone_number: str) -> None:
        """Run the first sign-in step."""
        self.auth_service.request_code(phone_number)

    def sign_in(self, phone_number: str, code: str) -> tuple[str, AppController]:
        """Verify the code and open a session; return its token."""
        profile = self.auth_service.verify_code(phone_number, code)
        controller = self._build_controller(profile)
        controller.start()
        token = uuid4().hex
        self._sessions[token] = controller
        logger.info("Session opened", extra={"phone": profile.phone_number})
        return token, controller

    def get(self, token: str) -> AppController | None:
        """Return the controller for a session token."""
        return self._sessions.get(token)

    def sign_out(self, token: str) -> bool:
        """Close a session; return False for unknown tokens."""
        controller = self._sessions.pop(token, None)
        if controller is None:
            return False
        controller.stop()
        return True

    def close_all(self) -> None:
        """Cancel timers of every open session."""
        for controller in self._sessions.values():
            controller.insight_scheduler.cancel_all()
        self._sessions.clear()

    def _build_controller(self, profile: UserProfile) -> AppController:
        scheduler = InsightScheduler()
        executor = ToolExecutor(
            profile_service=self.profile_service,
            preferences=self.preferences,
            sync_service=self.sync_service,
            insight_scheduler=scheduler,
            behavioral_delay=self.behavioral_delay,
        )
        orchestrator = ConversationOrchestrator(
            chat_service=self.chat_service,
            classifier=self.classifier,
            tool_executor=executor,
            notifications=self.notifications,
            history_window=self.history_window,
        )
        return AppController(
            state=AppState(profile=profile),
            preferences=self.preferences,
            profile_service=self.profile_service,
            food_log_service=self.food_log_service,
            orchestrator=orchestrator,
            advisor=self.advisor,
            insight_scheduler=scheduler,
            biometric_delay=self.biometric_delay,
        )
