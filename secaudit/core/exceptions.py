"""
Exceptions raised while building the registry or resolving names.

Runtime errors inside a check never surface here: they are converted into
a FAILED state by BaseCheck.execute().
"""

from typing import Iterable, List


class AuditError(Exception):
    """Base exception for the audit system."""
    pass


class ConfigurationError(AuditError):
    """Raised when the configuration file cannot be read or validated."""
    pass


class InvalidCheckError(AuditError):
    """Builder returned something that is not a BaseCheck."""

    def __init__(self, class_name: str):
        self.class_name = class_name
        super().__init__(
            f"Expected check to be of type BaseCheck but got {class_name} instead."
        )


class UnknownElementError(AuditError):
    """
    Запрошен неизвестный элемент (audit, report, check).

    Сообщение перечисляет все известные элементы естественным языком.
    """

    element_name_singular = "element"
    element_name_plural = "elements"

    def __init__(self, requested_element: str, known_elements: Iterable[str]):
        self.requested_element = requested_element
        self.known_elements: List[str] = list(known_elements)
        super().__init__(self.build_message())

    def build_message(self) -> str:
        message = f'Unknown {self.element_name_singular} "{self.requested_element}" requested.'

        if not self.known_elements:
            return message

        label = self.element_name_singular if len(self.known_elements) == 1 else self.element_name_plural
        return f"{message} Available {label}: {self.join_elements()}"

    def join_elements(self) -> str:
        """'"a"', '"a" and "b"', '"a", "b" and "c"'."""
        quoted = [f'"{element}"' for element in self.known_elements]

        if len(quoted) == 1:
            return quoted[0]

        return f"{', '.join(quoted[:-1])} and {quoted[-1]}"


class UnknownAuditError(UnknownElementError):
    element_name_singular = "audit"
    element_name_plural = "audits"


class UnknownReportError(UnknownElementError):
    element_name_singular = "report"
    element_name_plural = "reports"


class UnknownCheckError(UnknownElementError):
    element_name_singular = "check"
    element_name_plural = "checks"
