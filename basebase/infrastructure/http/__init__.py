from basebase.infrastructure.http.transport import HttpTransport

__all__ = ["HttpTransport"]
