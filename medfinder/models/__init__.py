from .base import Base
from .error_code import ErrorCode
from .user import User
from .medicine import Medicine
from .pharmacy import Pharmacy
from .inventory import MedicineInventory
from .chat_message import ChatMessage
from .anonymous_chat import AnonymousChatUsage
from .user_search import UserSearch

__all__ = [
    "Base",
    "ErrorCode",
    "User",
    "Medicine",
    "Pharmacy",
    "MedicineInventory",
    "ChatMessage",
    "AnonymousChatUsage",
    "UserSearch",
]
