from typing import NamedTuple, Union


class Locator(NamedTuple):
    """Where in the UI: a lookup strategy and its selector."""
    strategy: str
    value: str

    @classmethod
    def css(cls, selector: str) -> "Locator":
        return cls("css", selector)

    @classmethod
    def xpath(cls, expression: str) -> "Locator":
        return cls("xpath", expression)

    @classmethod
    def id(cls, element_id: str) -> "Locator":
        return cls("id", element_id)

    def __str__(self) -> str:
        return f"{self.strategy}={self.value}"


Target = Union[Locator, str]


def as_locator(target: Target) -> Locator:
    """Plain strings are CSS selectors."""
    if isinstance(target, Locator):
        return target
    return Locator.css(target)
