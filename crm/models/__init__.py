"""SQLAlchemy ORM models"""

from crm.models.contact import Contact
from crm.models.lead import Lead
from crm.models.activity import Activity, ColdCall, OnsiteVisit
from crm.models.deal import Deal
from crm.models.task import Task
from crm.models.notification import Notification
from crm.models.chat_message import ChatMessage
from crm.models.subscription_plan import SubscriptionPlan
from crm.models.project_credential import ProjectCredential
from crm.models.client_file import ClientFile
from crm.models.user import User

__all__ = [
    "Contact",
    "Lead",
    "Activity",
    "ColdCall",
    "OnsiteVisit",
    "Deal",
    "Task",
    "Notification",
    "ChatMessage",
    "SubscriptionPlan",
    "ProjectCredential",
    "ClientFile",
    "User",
]
