from typing import Annotated

from pydantic import AfterValidator, Field

from teamdesk.access.selectors import invalid_selectors


def _check_selectors(value: list[str]) -> list[str]:
    bad = invalid_selectors(value)
    if bad:
        raise ValueError(f"Unrecognised audience selectors: {', '.join(bad)}")
    return value


SelectorList = Annotated[list[str], AfterValidator(_check_selectors)]
AudienceList = Annotated[list[str], Field(min_length=1), AfterValidator(_check_selectors)]
