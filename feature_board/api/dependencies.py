# feature_board/api/dependencies.py
from typing import Optional

from fastapi import Depends, Header, Request

from feature_board.config.settings import Settings
from feature_board.pipelines.automation import AutomationRunner, verify_cron_secret
from feature_board.services.analytics import AnalyticsService
from feature_board.services.container import ServiceContainer
from feature_board.services.feedback_service import FeedbackService
from feature_board.services.user_store import UserStore


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_app_settings(container: ServiceContainer = Depends(get_container)) -> Settings:
    return container.settings


def get_feedback_service(container: ServiceContainer = Depends(get_container)) -> FeedbackService:
    return container.feedback


def get_analytics_service(container: ServiceContainer = Depends(get_container)) -> AnalyticsService:
    return AnalyticsService(container.store)


def get_user_store(container: ServiceContainer = Depends(get_container)) -> UserStore:
    return container.users


def get_runner(container: ServiceContainer = Depends(get_container)) -> AutomationRunner:
    return container.runner


def require_cron_secret(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    verify_cron_secret(authorization, settings)
