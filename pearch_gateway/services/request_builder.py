from typing import Any, Dict, Mapping
from pydantic import ValidationError
from pearch_gateway.api.schemas import SearchRequest, PollConfig
from pearch_gateway.errors import SearchValidationError

SEARCH_FIELDS = {
    "query": "query",
    "limit": "limit",
    "type": "type",
    "insights": "insights",
    "high_freshness": "highFreshness",
    "show_emails": "showEmails",
    "show_phone_numbers": "showPhoneNumbers",
    "profile_scoring": "profileScoring",
}

POLL_FIELDS = {
    "max_wait_seconds": "maxWaitTime",
    "interval_seconds": "pollingInterval",
}


def _pick(parameters: Mapping[str, Any], fields: Dict[str, str]) -> Dict[str, Any]:
    """Collects known fields by snake_case name, falling back to the camelCase one."""
    picked = {}
    for name, alias in fields.items():
        if name in parameters:
            picked[name] = parameters[name]
        elif alias in parameters:
            picked[name] = parameters[alias]
    return picked


def _describe(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        message = error["msg"].removeprefix("Value error, ")
        messages.append(f"{field}: {message}" if field else message)
    return "; ".join(messages)


def build_search_request(parameters: Mapping[str, Any]) -> SearchRequest:
    # unset values fall back to the model defaults
    values = {k: v for k, v in _pick(parameters, SEARCH_FIELDS).items() if v is not None}
    if not isinstance(values.get("query"), str) or not values["query"].strip():
        raise SearchValidationError("Query parameter is required and cannot be empty")
    try:
        return SearchRequest.model_validate(values)
    except ValidationError as e:
        raise SearchValidationError(f"Invalid search parameters: {_describe(e)}") from e


def build_search_body(parameters: Mapping[str, Any]) -> Dict[str, Any]:
    return build_search_request(parameters).to_body()


def build_poll_config(parameters: Mapping[str, Any]) -> PollConfig:
    values = {k: v for k, v in _pick(parameters, POLL_FIELDS).items() if v is not None}
    try:
        return PollConfig.model_validate(values)
    except ValidationError as e:
        raise SearchValidationError(f"Invalid polling parameters: {_describe(e)}") from e
