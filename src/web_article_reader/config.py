"""Configuration for the acquisition pipeline."""

import os
from dataclasses import dataclass

ENV_PREFIX = "WEB_ARTICLE_READER_"

DEFAULT_TIMEOUT = 30.0
HTML_MEDIA_TYPE = "text/html"


@dataclass(frozen=True)
class Config:
    """Settings shared by every stage of a Reader."""

    timeout: float = DEFAULT_TIMEOUT
    accepted_media_type: str = HTML_MEDIA_TYPE
    min_text_length: int = 0

    def __post_init__(self):
        if self.timeout < 0:
            raise ValueError(f"timeout must not be negative, got {self.timeout}")
        if not self.accepted_media_type:
            raise ValueError("accepted_media_type must not be empty")
        if self.min_text_length < 0:
            raise ValueError(f"min_text_length must not be negative, got {self.min_text_length}")

    @classmethod
    def from_env(cls, environ=None) -> "Config":
        """
        Build a Config from ``WEB_ARTICLE_READER_*`` environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Returns:
            Config with unset variables left at their defaults
        """
        environ = os.environ if environ is None else environ
        values = {}

        timeout = environ.get(f"{ENV_PREFIX}TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as e:
                raise ValueError(f"Invalid {ENV_PREFIX}TIMEOUT: {timeout!r}") from e

        media_type = environ.get(f"{ENV_PREFIX}MEDIA_TYPE")
        if media_type:
            values["accepted_media_type"] = media_type

        min_length = environ.get(f"{ENV_PREFIX}MIN_TEXT_LENGTH")
        if min_length:
            try:
                values["min_text_length"] = int(min_length)
            except ValueError as e:
                raise ValueError(f"Invalid {ENV_PREFIX}MIN_TEXT_LENGTH: {min_length!r}") from e

        return cls(**values)
