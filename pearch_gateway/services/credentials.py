import os
from typing import Optional, Union
from dotenv import load_dotenv
from pearch_gateway.api.schemas import Credentials
from pearch_gateway.errors import CredentialError
from pearch_gateway.utils.logger import logger

DEFAULT_BASE_URL = "https://api.pearch.ai"


def _check(base_url: Optional[str], api_key: Optional[str]) -> Credentials:
    if not base_url:
        raise CredentialError("Base URL not found in credentials")
    if not api_key:
        raise CredentialError("API Key not found in credentials")
    return Credentials(base_url=base_url.rstrip("/"), api_key=api_key)


class StaticCredentialProvider:
    def __init__(self, base_url: Optional[str], api_key: Optional[str]):
        self.base_url = base_url
        self.api_key = api_key

    def resolve(self) -> Credentials:
        return _check(self.base_url, self.api_key)


class EnvCredentialProvider:
    """Reads PEARCH_BASE_URL / PEARCH_API_KEY on every resolve, so a rotated key is picked up."""

    def __init__(self):
        load_dotenv()
        if not os.getenv("PEARCH_API_KEY"):
            logger.warning("PEARCH_API_KEY not found in environment variables")

    def resolve(self) -> Credentials:
        return _check(
            os.getenv("PEARCH_BASE_URL", DEFAULT_BASE_URL),
            os.getenv("PEARCH_API_KEY")
        )


CredentialProvider = Union[EnvCredentialProvider, StaticCredentialProvider]

credential_provider = EnvCredentialProvider()
