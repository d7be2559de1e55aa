"""Error handling utilities."""

from typing import TypeVar

TErr = TypeVar("TErr", bound=Exception)


def extract_first_exception(
    exc: BaseExceptionGroup, target_type: type[TErr]
) -> TErr | None:
    """
    Extract the first exception of the specified type from a nested ExceptionGroup.
    Task groups wrap whatever their tasks raised, but callers almost always want to re-raise
    the single typed failure (say an upstream HTTP error) rather than the group.
    """
    for sub_exc in exc.exceptions:
        if isinstance(sub_exc, BaseExceptionGroup):
            result = extract_first_exception(sub_exc, target_type)
            if result is not None:
                return result

        if isinstance(sub_exc, target_type):
            return sub_exc

    return None
