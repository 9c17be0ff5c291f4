"""String classification helpers used by the interceptor."""
from bearer_agent.strings.content_type import is_parseable_content_type

__all__ = ["is_parseable_content_type"]
