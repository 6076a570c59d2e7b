"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status

from nutrichat.api.models import (
    ChatRequest,
    CodeRequest,
    FoodCreate,
    FoodUpdate,
    LayoutUpdate,
    ProfileUpdate,
    ReorderRequest,
    SheetUrlUpdate,
    ThemeUpdate,
    VerifyRequest,
    WearablesUpdate,
)
from nutrichat.api.sessions import require_session
from nutrichat.app_logging import configure_logging
from nutrichat.containers import AppContainer
from nutrichat.domain.profile import WearableConfig
from nutrichat.services.controller import AppController
from nutrichat.services.profiles import AuthError


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/auth/code")
    async def request_code(body: CodeRequest, request: Request) -> dict[str, str]:
        """Validate the phone number; the code itself is simulated."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.session_manager.request_code(body.phone_number)
        except AuthError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return {"status": "code_sent"}

    @app.post("/auth/verify")
    async def verify_code(body: VerifyRequest, request: Request) -> dict[str, object]:
        """Accept the code and open a session."""
        state_container: AppContainer = request.app.state.container
        try:
            token, controller = state_container.session_manager.sign_in(
                body.phone_number, body.code
            )
        except AuthError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        logger.info("User signed in", extra={"phone": controller.phone_number})
        return {"token": token, "profile": asdict(controller.state.profile)}

    @app.post("/auth/logout")
    async def logout(
        request: Request, x_session_token: str | None = Header(default=None)
    ) -> dict[str, str]:
        """Close the caller's session."""
        state_container: AppContainer = request.app.state.container
        if not x_session_token or not state_container.session_manager.sign_out(
            x_session_token
        ):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        return {"status": "signed_out"}

    @app.get("/dashboard")
    async def dashboard(
        controller: AppController = Depends(require_session),
    ) -> dict[str, object]:
        """Return the dashboard view of the session."""
        return controller.snapshot()

    @app.post("/dashboard/reorder")
    async def reorder_dashboard(
        body: ReorderRequest, controller: AppController = Depends(require_session)
    ) -> dict[str, list[str]]:
        """Apply a drag gesture to the widget order."""
        return {"dashboard": controller.reorder_dashboard(body.active_id, body.over_id)}

    @app.put("/dashboard")
    async def set_dashboard(
        body: LayoutUpdate, controller: AppController = Depends(require_session)
    ) -> dict[str, list[str]]:
        """Store a widget order."""
        controller.set_dashboard(body.items)
        return {"dashboard": controller.state.dashboard}

    @app.post("/refresh")
    async def refresh(
        controller: AppController = Depends(require_session),
    ) -> dict[str, object]:
        """Reload today's meals from the datastore."""
        ok = controller.refresh()
        return {"ok": ok, "count": len(controller.state.food_log)}

    @app.get("/food")
    async def list_food(
        query: str = "", controller: AppController = Depends(require_session)
    ) -> dict[str, object]:
        """Return logged foods, newest first, optionally filtered by name."""
        items = controller.search_food(query)
        return {"items": [asdict(item) for item in items]}

    @app.post("/food", status_code=status.HTTP_201_CREATED)
    async def add_food(
        body: FoodCreate, controller: AppController = Depends(require_session)
    ) -> dict[str, object]:
        """Log a food manually."""
        return asdict(controller.add_food(body.model_dump()))

    @app.patch("/food/{item_id}")
    async def update_food(
        item_id: str,
        body: FoodUpdate,
        controller: AppController = Depends(require_session),
    ) -> dict[str, object]:
        """Edit a logged food."""
        updated = controller.update_food(item_id, body.model_dump(exclude_none=True))
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return asdict(updated)

    @app.delete("/food/{item_id}")
    async def delete_food(
        item_id: str, controller: AppController = Depends(require_session)
    ) -> dict[str, str]:
        """Delete a logged food."""
        if not controller.remove_food(item_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"status": "deleted"}

    @app.post("/chat")
    async def chat(
        body: ChatRequest, controller: AppController = Depends(require_session)
    ) -> dict[str, object]:
        """Run a chat turn and return the assistant reply."""
        reply = await controller.send_message(body.text, body.image, body.audio)
        return {
            "reply": asdict(reply) if reply else None,
            "last_sync": [asdict(result) for result in controller.state.last_sync],
        }

    @app.get("/chat/messages")
    async def list_messages(
        controller: AppController = Depends(require_session),
    ) -> dict[str, object]:
        """Return the session's chat history."""
        return {
            "messages": [asdict(message) for message in controller.state.messages],
            "is_processing": controller.state.is_processing,
        }

    @app.delete("/chat/messages/{message_id}")
    async def delete_message(
        message_id: str, controller: AppController = Depends(require_session)
    ) -> dict[str, str]:
        """Remove a chat message."""
        controller.delete_message(message_id)
        return {"status": "deleted"}

    @app.put("/profile")
    async def update_profile(
        body: ProfileUpdate, controller: AppController = Depends(require_session)
    ) -> dict[str, object]:
        """Apply the settings form to the profile."""
        return asdict(controller.update_settings(body.model_dump(exclude_unset=True)))

    @app.put("/wearables")
    async def update_wearables(
        body: WearablesUpdate, controller: AppController = Depends(require_session)
    ) -> dict[str, object]:
        """Store connected wearable flags."""
        controller.update_wearables(WearableConfig(**body.model_dump()))
        return asdict(controller.state.wearables)

    @app.put("/theme")
    async def set_theme(
        body: ThemeUpdate, controller: AppController = Depends(require_session)
    ) -> dict[str, bool]:
        """Set the theme flag."""
        controller.set_dark_mode(body.dark_mode)
        return {"dark_mode": controller.state.dark_mode}

    @app.post("/theme/toggle")
    async def toggle_theme(
        controller: AppController = Depends(require_session),
    ) -> dict[str, bool]:
        """Flip the theme flag."""
        return {"dark_mode": controller.toggle_theme()}

    @app.put("/settings/sheet-url")
    async def set_sheet_url(
        body: SheetUrlUpdate, controller: AppController = Depends(require_session)
    ) -> dict[str, str]:
        """Store the spreadsheet webhook URL."""
        controller.set_sheet_url(body.url)
        return {"url": controller.state.sheet_url}

    @app.get("/advice")
    async def advice(
        controller: AppController = Depends(require_session),
    ) -> dict[str, str]:
        """Return nutrition advice for today's log."""
        return {"advice": await controller.get_advice()}

    @app.get("/insight")
    async def insight(
        controller: AppController = Depends(require_session),
    ) -> dict[str, object]:
        """Return and clear the pending insight alert."""
        alert = controller.take_insight()
        return {"insight": asdict(alert) if alert else None}

    return app
