from .message_store_port import MessageStorePort

__all__ = ["MessageStorePort"]
