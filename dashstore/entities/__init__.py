"""Entity catalog: models, seed routines and collection schemas."""

from dashstore.entities.analytics import (
    AnalyticsKpis,
    AnalyticsService,
    AnalyticsSummary,
    DailySources,
    DailyVisitors,
    SourcesBreakdown,
)
from dashstore.entities.apis import API_KEYS, APIS, Api, ApiCollection, ApiKey, ApiKeyCollection
from dashstore.entities.billing import PAYMENTS, SUBSCRIPTIONS, Payment, Subscription
from dashstore.entities.chats import (
    CHAT_MESSAGES,
    CHATS,
    ChatCollection,
    ChatMessage,
    ChatMessageCollection,
    ChatThread,
)
from dashstore.entities.events import EVENTS, Event
from dashstore.entities.feedbacks import FEEDBACKS, Feedback
from dashstore.entities.monitoring import (
    InternalApiLog,
    InternalApiMetrics,
    InternalApiService,
    MonitoringMetrics,
    MonitoringService,
)
from dashstore.entities.notifications import EMAILS, NOTIFICATIONS, Email, Notification
from dashstore.entities.users import USERS, User

__all__ = [
    "USERS",
    "NOTIFICATIONS",
    "EMAILS",
    "FEEDBACKS",
    "PAYMENTS",
    "SUBSCRIPTIONS",
    "EVENTS",
    "CHATS",
    "CHAT_MESSAGES",
    "APIS",
    "API_KEYS",
    "User",
    "Notification",
    "Email",
    "Feedback",
    "Payment",
    "Subscription",
    "Event",
    "ChatThread",
    "ChatMessage",
    "Api",
    "ApiKey",
    "ApiCollection",
    "ApiKeyCollection",
    "ChatCollection",
    "ChatMessageCollection",
    "AnalyticsService",
    "AnalyticsSummary",
    "AnalyticsKpis",
    "DailyVisitors",
    "DailySources",
    "SourcesBreakdown",
    "MonitoringService",
    "MonitoringMetrics",
    "InternalApiService",
    "InternalApiMetrics",
    "InternalApiLog",
]
