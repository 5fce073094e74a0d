from models.user import User
from models.chat import Chat, Message, Vote
from models.document import Document, Suggestion

__all__ = ["User", "Chat", "Message", "Vote", "Document", "Suggestion"]
